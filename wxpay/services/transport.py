"""
HTTP 传输层：使用 httpx 以 POST 方式发送 XML 报文。

- HttpTransport: 默认传输，仅校验服务端证书
- new_cert_transport: 携带商户 API 证书的双向 TLS 传输，退款、撤销等接口必须使用
"""

import logging
import ssl
from typing import Protocol

import httpx

from wxpay.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

# 连接超时 6 秒，整体超时 8 秒
DEFAULT_TIMEOUT = httpx.Timeout(8.0, connect=6.0)


class Transport(Protocol):
    """报文传输接口：返回响应报文，失败时抛出 TransportError。"""

    def send(self, host: str, path: str, body: bytes) -> bytes: ...


class HttpTransport:
    """基于 httpx.Client 的报文传输，复用连接，可在多线程间共享。"""

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        verify: ssl.SSLContext | bool = True,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ):
        self._client = client or httpx.Client(verify=verify, timeout=timeout)

    def send(self, host: str, path: str, body: bytes) -> bytes:
        """
        POST 报文到 https://{host}{path}。

        Returns:
            响应报文。

        Raises:
            TransportError: 连接失败或 HTTP 状态码 >= 400。
        """
        url = f"https://{host}{path}"
        try:
            response = self._client.post(
                url,
                content=body,
                headers={"Content-Type": "text/xml"},
            )
        except httpx.HTTPError as e:
            logger.warning("请求微信支付接口失败 (url=%s): %s", url, e)
            raise TransportError(f"请求微信支付接口失败: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                "微信支付接口返回错误状态码 (url=%s, status=%d)",
                url, response.status_code,
            )
            raise TransportError(
                f"response code: {response.status_code}",
                status_code=response.status_code,
                body=response.content,
            )
        return response.content

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def new_cert_transport(
    cert_file: str,
    key_file: str,
    rootca_file: str | None = None,
    timeout: httpx.Timeout = DEFAULT_TIMEOUT,
) -> HttpTransport:
    """
    创建使用 API 证书的传输。

    rootca_file 为空时使用系统根证书（主流操作系统已内置微信支付服务器的根 CA）。

    Raises:
        ConfigurationError: 证书、私钥或根证书无法加载。
    """
    try:
        ctx = ssl.create_default_context(cafile=rootca_file)
        ctx.load_cert_chain(certfile=cert_file, keyfile=key_file)
    except (OSError, ssl.SSLError) as e:
        raise ConfigurationError(f"无法加载 API 证书: {e}") from e
    return HttpTransport(verify=ctx, timeout=timeout)
