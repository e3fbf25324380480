"""支付结果通知：解析通知报文，生成应答报文。"""

from wxpay.services.xml_codec import map_to_xml, xml_to_map


def parse_notify(body: bytes | str) -> dict[str, str]:
    """解析通知报文，格式错误抛出 DecodeError。"""
    return xml_to_map(body)


def response_success() -> bytes:
    """通知处理成功的应答报文。"""
    return map_to_xml({"return_code": "SUCCESS", "return_msg": "OK"})


def response_fail(err_msg: str) -> bytes:
    """通知处理失败的应答报文，网关收到后会重新通知。"""
    return map_to_xml({"return_code": "FAIL", "return_msg": err_msg})
