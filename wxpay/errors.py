"""
异常定义：签名、编解码、网关响应、传输与配置错误。

所有异常都继承 WxPayError，调用方可以按类型区分重试策略，
本包内部不做任何重试。
"""


class WxPayError(Exception):
    """wxpay 异常基类。"""
    pass


class TransportError(WxPayError):
    """网络连接失败或 HTTP 状态码 >= 400。"""

    def __init__(self, message: str, status_code: int | None = None, body: bytes = b""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(WxPayError):
    """XML 报文格式错误，无法解析。"""
    pass


class MalformedProtocolError(WxPayError):
    """响应缺少 return_code 或 return_code 取值无效。"""
    pass


class CommFailureError(WxPayError):
    """网关返回 return_code=FAIL（通信失败），return_msg 原样保留。"""

    def __init__(self, return_msg: str):
        super().__init__(return_msg)
        self.return_msg = return_msg


class SignatureInvalidError(WxPayError):
    """响应签名校验失败。"""
    pass


class ConfigurationError(WxPayError):
    """配置缺失或无效，例如未配置证书却调用需要证书的接口。"""
    pass


class ParamsSealedError(WxPayError):
    """参数集已签名封存，不允许再修改。"""
    pass
