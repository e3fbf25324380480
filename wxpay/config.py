"""
商户账户配置：从环境变量（支持 .env 文件）读取。

必填：WXPAY_APP_ID、WXPAY_MCH_ID、WXPAY_API_SECRET
可选：WXPAY_SIGN_TYPE（默认 MD5）、WXPAY_NOTIFY_URL、WXPAY_DOMAIN、
      WXPAY_CERT_FILE + WXPAY_KEY_FILE（需同时配置）、WXPAY_ROOTCA_FILE
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from wxpay.errors import ConfigurationError
from wxpay.models.schemas import SignType

DOMAIN_API = "api.mch.weixin.qq.com"
DOMAIN_API2 = "api2.mch.weixin.qq.com"


@dataclass(frozen=True)
class WxPaySettings:
    app_id: str
    mch_id: str
    api_secret: str
    sign_type: SignType = SignType.MD5
    notify_url: str = ""
    domain: str = DOMAIN_API
    cert_file: str | None = None
    key_file: str | None = None
    rootca_file: str | None = None


def load_settings() -> WxPaySettings:
    """
    读取商户配置。

    Raises:
        ConfigurationError: 必填项缺失、签名类型无效或证书配置不完整。
    """
    load_dotenv()

    required = {
        "WXPAY_APP_ID": os.getenv("WXPAY_APP_ID", ""),
        "WXPAY_MCH_ID": os.getenv("WXPAY_MCH_ID", ""),
        "WXPAY_API_SECRET": os.getenv("WXPAY_API_SECRET", ""),
    }
    missing = [k for k, v in required.items() if not v]
    if missing:
        raise ConfigurationError(f"缺少必填配置: {', '.join(missing)}")

    try:
        sign_type = SignType.parse(os.getenv("WXPAY_SIGN_TYPE", "MD5"))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    cert_file = os.getenv("WXPAY_CERT_FILE") or None
    key_file = os.getenv("WXPAY_KEY_FILE") or None
    if bool(cert_file) != bool(key_file):
        raise ConfigurationError("WXPAY_CERT_FILE 和 WXPAY_KEY_FILE 必须同时配置")

    return WxPaySettings(
        app_id=required["WXPAY_APP_ID"],
        mch_id=required["WXPAY_MCH_ID"],
        api_secret=required["WXPAY_API_SECRET"],
        sign_type=sign_type,
        notify_url=os.getenv("WXPAY_NOTIFY_URL", ""),
        domain=os.getenv("WXPAY_DOMAIN") or DOMAIN_API,
        cert_file=cert_file,
        key_file=key_file,
        rootca_file=os.getenv("WXPAY_ROOTCA_FILE") or None,
    )
