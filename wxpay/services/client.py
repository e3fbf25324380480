"""
微信支付 API 客户端：签名请求、发送报文、校验响应。

默认签名类型为 MD5。退款、撤销订单等接口需要配置 API 证书传输，
未配置时直接抛出 ConfigurationError，不发起网络请求。
"""

import logging
from collections.abc import Mapping

from wxpay.config import DOMAIN_API, WxPaySettings
from wxpay.errors import CommFailureError, ConfigurationError, DecodeError
from wxpay.models.schemas import ParamSet, SignatureContext, SignType
from wxpay.services.request_builder import RequestBuilder
from wxpay.services.response_validator import (
    RETURN_FAIL,
    process_response_xml,
)
from wxpay.services.transport import HttpTransport, Transport, new_cert_transport
from wxpay.services.xml_codec import map_to_xml, xml_to_map

logger = logging.getLogger(__name__)


class WechatPay:
    """微信支付商户账户，构造后配置只读。"""

    def __init__(
        self,
        app_id: str,
        mch_id: str,
        api_secret: str,
        *,
        sign_type: SignType = SignType.MD5,
        transport: Transport | None = None,
        tls_transport: Transport | None = None,
        notify_url: str = "",
        domain: str = DOMAIN_API,
    ):
        """
        Args:
            app_id: 应用 appid。
            mch_id: 商户号。
            api_secret: 商户 API 密钥。
            sign_type: 默认签名类型。
            transport: 默认传输，为空时创建 HttpTransport。传入的传输由调用方负责关闭。
            tls_transport: 带 API 证书的传输，不设置则需要证书的接口无法调用。
            notify_url: 支付结果通知地址。
            domain: 微信支付接口域名。
        """
        self._builder = RequestBuilder(app_id, mch_id, api_secret, sign_type)
        # 只关闭本对象自行创建的传输
        self._owned: list = []
        if transport is None:
            transport = HttpTransport()
            self._owned.append(transport)
        self._transport = transport
        self._tls_transport = tls_transport
        self._notify_url = notify_url
        self._domain = domain

    @classmethod
    def from_settings(cls, settings: WxPaySettings) -> "WechatPay":
        """根据配置创建客户端，配置了证书时同时创建双向 TLS 传输。"""
        tls_transport = None
        if settings.cert_file and settings.key_file:
            tls_transport = new_cert_transport(
                settings.cert_file, settings.key_file, settings.rootca_file
            )
        pay = cls(
            settings.app_id,
            settings.mch_id,
            settings.api_secret,
            sign_type=settings.sign_type,
            tls_transport=tls_transport,
            notify_url=settings.notify_url,
            domain=settings.domain,
        )
        if tls_transport is not None:
            pay._owned.append(tls_transport)
        return pay

    @property
    def app_id(self) -> str:
        return self._builder.app_id

    @property
    def mch_id(self) -> str:
        return self._builder.mch_id

    @property
    def sign_type(self) -> SignType:
        """当前商户号的签名类型。"""
        return self._builder.sign_type

    @property
    def api_secret(self) -> str:
        """当前商户号的 API 密钥。"""
        return self._builder.api_secret

    @property
    def notify_url(self) -> str:
        return self._notify_url

    def close(self) -> None:
        """关闭本对象创建的传输连接，调用方传入的传输不受影响。"""
        for t in self._owned:
            t.close()
        self._owned.clear()

    # ── 请求流程 ──────────────────────────────────────────

    def build_request(
        self,
        params: Mapping[str, str],
        extra_defaults: Mapping[str, str] | None = None,
    ) -> ParamSet:
        """补全 appid、mch_id、nonce_str、sign_type 并签名。"""
        return self._builder.build(params, extra_defaults)

    def _secured_transport(self) -> Transport:
        if self._tls_transport is None:
            raise ConfigurationError("the request need cert: 未配置 API 证书")
        return self._tls_transport

    def _send(
        self,
        path: str,
        params: Mapping[str, str],
        *,
        secured: bool = False,
        extra_defaults: Mapping[str, str] | None = None,
    ) -> tuple[ParamSet, bytes]:
        transport = self._secured_transport() if secured else self._transport
        request = self.build_request(params, extra_defaults)
        logger.info(
            "调用微信支付接口: path=%s, nonce_str=%s", path, request["nonce_str"]
        )
        body = transport.send(self._domain, path, map_to_xml(request))
        return request, body

    def _call(
        self,
        path: str,
        params: Mapping[str, str],
        *,
        secured: bool = False,
        extra_defaults: Mapping[str, str] | None = None,
    ) -> dict:
        request, body = self._send(
            path, params, secured=secured, extra_defaults=extra_defaults
        )
        sign_type = SignType.parse(request["sign_type"])
        outcome = process_response_xml(body, SignatureContext(self.api_secret, sign_type))
        return outcome.unwrap()

    def _download(self, path: str, params: Mapping[str, str]) -> bytes:
        _, body = self._send(path, params)
        # 下载成功返回文本数据，失败时返回 XML 报文
        if body.lstrip().startswith(b"<"):
            try:
                ret = xml_to_map(body)
            except DecodeError:
                return body
            if ret.get("return_code") == RETURN_FAIL:
                raise CommFailureError(ret.get("return_msg", ""))
        return body

    def verify_notify(self, body: bytes | str) -> dict:
        """
        校验支付结果通知：检查 return_code 并使用当前签名类型验签。

        Returns:
            通知中的全部字段。

        Raises:
            MalformedProtocolError / CommFailureError / SignatureInvalidError
        """
        outcome = process_response_xml(
            body, SignatureContext(self.api_secret, self.sign_type)
        )
        return outcome.unwrap()

    # ── 接口 ──────────────────────────────────────────────

    def micro_pay(self, params: Mapping[str, str]) -> dict:
        """付款码支付。"""
        return self._call("/pay/micropay", params)

    def unified_order(self, params: Mapping[str, str]) -> dict:
        """统一下单，未传 notify_url 时使用账户默认通知地址。"""
        extra = {"notify_url": self._notify_url} if self._notify_url else None
        return self._call("/pay/unifiedorder", params, extra_defaults=extra)

    def order_query(self, params: Mapping[str, str]) -> dict:
        """查询订单。"""
        return self._call("/pay/orderquery", params)

    def reverse(self, params: Mapping[str, str]) -> dict:
        """撤销订单，需要 API 证书。"""
        return self._call("/secapi/pay/reverse", params, secured=True)

    def close_order(self, params: Mapping[str, str]) -> dict:
        """关闭订单。"""
        return self._call("/pay/closeorder", params)

    def refund(self, params: Mapping[str, str]) -> dict:
        """申请退款，需要 API 证书。"""
        return self._call("/secapi/pay/refund", params, secured=True)

    def refund_query(self, params: Mapping[str, str]) -> dict:
        """退款查询。"""
        return self._call("/pay/refundquery", params)

    def short_url(self, params: Mapping[str, str]) -> dict:
        """转换短链接。"""
        return self._call("/tools/shorturl", params)

    def auth_code_to_openid(self, params: Mapping[str, str]) -> dict:
        """授权码查询 openid。"""
        return self._call("/tools/authcodetoopenid", params)

    def download_bill(self, params: Mapping[str, str]) -> bytes:
        """下载交易账单，返回原始数据。"""
        return self._download("/pay/downloadbill", params)

    def download_fundflow(self, params: Mapping[str, str]) -> bytes:
        """下载资金账单，返回原始数据。"""
        return self._download("/pay/downloadfundflow", params)
