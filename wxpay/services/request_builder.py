"""
请求参数构建：补全 appid、mch_id、nonce_str、sign_type 后签名并封存。

适用于统一下单等商户接口，不适用于红包、代金券接口。
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from wxpay.models.schemas import FIELD_SIGN, ParamSet, SignType
from wxpay.services.sign import generate_nonce_str, generate_sign

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestBuilder:
    """商户账户上下文，构造后只读，可在多个线程间共享。"""

    app_id: str
    mch_id: str
    api_secret: str
    sign_type: SignType = SignType.MD5

    def build(
        self,
        params: Mapping[str, str],
        extra_defaults: Mapping[str, str] | None = None,
    ) -> ParamSet:
        """
        复制调用方参数，补全默认字段，最后计算 sign 并封存。

        调用方已设置的非空字段优先，空值视为未设置；传入的 params 不会被修改。

        Args:
            params: 业务参数。
            extra_defaults: 额外的默认字段（如统一下单的 notify_url）。

        Returns:
            已签名、已封存的 ParamSet。

        Raises:
            ValueError: 调用方传入的 sign_type 不是受支持的签名类型。
        """
        filled = ParamSet(params)
        filled.pop(FIELD_SIGN, None)
        defaults = {
            "appid": self.app_id,
            "mch_id": self.mch_id,
            "nonce_str": generate_nonce_str(),
            "sign_type": self.sign_type.value,
        }
        if extra_defaults:
            defaults.update(extra_defaults)
        for k, v in defaults.items():
            if not filled.get(k):
                filled[k] = v

        sign_type = SignType.parse(filled["sign_type"])
        filled[FIELD_SIGN] = generate_sign(filled, self.api_secret, sign_type)
        logger.debug(
            "请求参数已签名: nonce_str=%s, sign_type=%s",
            filled["nonce_str"], sign_type.value,
        )
        return filled.seal()
