"""
数据模型 / 类型定义，供各模块引用。
使用 dataclass 保持轻量。
"""

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from enum import Enum

from wxpay.errors import (
    CommFailureError,
    MalformedProtocolError,
    ParamsSealedError,
    SignatureInvalidError,
)

# 请求参数中的签名字段
FIELD_SIGN = "sign"


class SignType(str, Enum):
    """签名类型，默认为 MD5。"""

    MD5 = "MD5"
    HMAC_SHA256 = "HMAC-SHA256"

    @classmethod
    def parse(cls, value: "str | SignType") -> "SignType":
        """将报文中的 sign_type 字符串转换为枚举，未知取值抛出 ValueError。"""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"不支持的签名类型: {value!r}")


@dataclass(frozen=True)
class SignatureContext:
    secret: str
    sign_type: SignType = SignType.MD5


class ParamSet(MutableMapping):
    """
    请求 / 响应参数集：字段名 → 字符串值，不嵌套、不做类型转换。

    签名完成后调用 seal() 封存，之后任何修改都会抛出 ParamsSealedError，
    避免签名后再改动字段导致签名失效。
    """

    def __init__(self, data: Mapping[str, str] | None = None, **kwargs: str):
        self._data: dict[str, str] = {}
        self._sealed = False
        if data:
            self.update(data)
        if kwargs:
            self.update(kwargs)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> "ParamSet":
        self._sealed = True
        return self

    def _check_writable(self) -> None:
        if self._sealed:
            raise ParamsSealedError("参数集已签名封存，不能再修改")

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._check_writable()
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError(
                f"参数名和参数值必须是字符串: {key!r}={value!r}"
            )
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        self._check_writable()
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"ParamSet({self._data!r}, {state})"

    def to_dict(self) -> dict[str, str]:
        return dict(self._data)


# ── 响应校验结果 ──────────────────────────────────────────


@dataclass(frozen=True)
class Valid:
    """通信成功且验签通过，携带完整的响应字段。"""

    fields: dict = field(default_factory=dict)
    ok = True

    def unwrap(self) -> dict:
        return self.fields


@dataclass(frozen=True)
class CommFailure:
    """return_code=FAIL，message 为网关返回的 return_msg 原文。"""

    message: str = ""
    ok = False

    def unwrap(self) -> dict:
        raise CommFailureError(self.message)


@dataclass(frozen=True)
class MalformedProtocol:
    """报文无法解析、缺少 return_code 或 return_code 取值无效。"""

    message: str = ""
    ok = False

    def unwrap(self) -> dict:
        raise MalformedProtocolError(self.message)


@dataclass(frozen=True)
class SignatureInvalid:
    """响应签名校验失败。"""

    message: str = "invalid sign value in response"
    ok = False

    def unwrap(self) -> dict:
        raise SignatureInvalidError(self.message)


ResponseOutcome = Valid | CommFailure | MalformedProtocol | SignatureInvalid
