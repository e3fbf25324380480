"""MD5 / HMAC-SHA256 签名生成与验证模块。"""

import hashlib
import hmac
import secrets
from collections.abc import Mapping

from wxpay.models.schemas import FIELD_SIGN, SignType

# 随机字符串字符集
NONCE_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
NONCE_LENGTH = 32


def build_sign_string(params: Mapping[str, str], key: str) -> str:
    """
    构建待签名字符串。

    1. 排除 sign 参数
    2. 按参数名 ASCII 码从小到大排序
    3. 跳过空值，拼接 key=value&（参数值不 URL 编码）
    4. 末尾拼接 key=商户密钥
    """
    parts = []
    for k in sorted(k for k in params if k != FIELD_SIGN):
        v = params[k]
        if v:
            parts.append(f"{k}={v}&")
    parts.append(f"key={key}")
    return "".join(parts)


def generate_sign(
    params: Mapping[str, str], key: str, sign_type: SignType = SignType.MD5
) -> str:
    """
    生成签名，返回大写十六进制字符串。

    MD5 为 32 位，HMAC-SHA256（以商户密钥为 HMAC 密钥）为 64 位。
    """
    sign_str = build_sign_string(params, key).encode("utf-8")
    if sign_type is SignType.HMAC_SHA256:
        digest = hmac.new(key.encode("utf-8"), sign_str, hashlib.sha256).hexdigest()
    else:
        digest = hashlib.md5(sign_str).hexdigest()
    return digest.upper()


def verify_sign(
    params: Mapping[str, str], key: str, sign_type: SignType = SignType.MD5
) -> bool:
    """验证参数中的 sign 字段，没有 sign 字段视为无效。"""
    sign = params.get(FIELD_SIGN)
    if sign is None:
        return False
    expected = generate_sign(params, key, sign_type)
    return hmac.compare_digest(sign.encode("utf-8"), expected.encode("utf-8"))


def generate_nonce_str(length: int = NONCE_LENGTH) -> str:
    """生成随机字符串，字符取自 62 个字母数字。"""
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(length))
