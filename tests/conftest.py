"""全局测试配置：共享的商户参数和记录请求的假传输。"""

import pytest

from wxpay.errors import TransportError
from wxpay.models.schemas import SignType
from wxpay.services.sign import generate_sign
from wxpay.services.xml_codec import map_to_xml, xml_to_map

TEST_APP_ID = "wxabc"
TEST_MCH_ID = "1900000109"
TEST_SECRET = "testkey123456789"


class FakeTransport:
    """按顺序返回预设响应，并记录每次请求。"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def send(self, host: str, path: str, body: bytes) -> bytes:
        self.calls.append((host, path, body))
        if not self.responses:
            raise TransportError("no response configured")
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def close(self) -> None:
        self.closed = True

    def last_request(self) -> dict:
        return xml_to_map(self.calls[-1][2])


def signed_response(fields: dict, key: str = TEST_SECRET,
                    sign_type: SignType = SignType.MD5) -> bytes:
    """构造带正确签名的网关响应报文。"""
    params = dict(fields)
    params["sign"] = generate_sign(params, key, sign_type)
    return map_to_xml(params)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def tls_transport():
    return FakeTransport()
