"""
响应校验：解析网关返回的 XML，依次检查 return_code 和签名。

只有 Valid 结果会把业务字段交给调用方，其余结果只携带诊断信息。
"""

import logging

from wxpay.errors import DecodeError
from wxpay.models.schemas import (
    CommFailure,
    MalformedProtocol,
    ResponseOutcome,
    SignatureContext,
    SignatureInvalid,
    Valid,
)
from wxpay.services.sign import verify_sign
from wxpay.services.xml_codec import xml_to_map

logger = logging.getLogger(__name__)

RETURN_SUCCESS = "SUCCESS"
RETURN_FAIL = "FAIL"


def process_response_xml(body: bytes | str, ctx: SignatureContext) -> ResponseOutcome:
    """
    处理 HTTPS API 返回数据。

    流程：解析 XML → 检查 return_code → FAIL 返回通信失败 →
    SUCCESS 时按请求使用的签名类型验签。

    Args:
        body: 响应报文。
        ctx: 商户 API 密钥和请求时使用的签名类型（网关不一定回传 sign_type）。
    """
    try:
        ret = xml_to_map(body)
    except DecodeError as e:
        logger.warning("响应报文解析失败: %s", e)
        return MalformedProtocol(str(e))

    return_code = ret.get("return_code")
    if return_code is None:
        logger.warning("响应缺少 return_code 字段")
        return MalformedProtocol("no return_code in response")

    if return_code == RETURN_FAIL:
        # 通信失败，例如签名失败、参数格式校验错误
        return_msg = ret.get("return_msg", "")
        logger.warning("网关返回通信失败: %s", return_msg)
        return CommFailure(return_msg)

    if return_code != RETURN_SUCCESS:
        logger.warning("响应 return_code 取值无效: %s", return_code)
        return MalformedProtocol(f"invalid return_code value: {return_code}")

    if not verify_sign(ret, ctx.secret, ctx.sign_type):
        logger.warning("响应验签失败 (sign_type=%s)", ctx.sign_type.value)
        return SignatureInvalid()

    return Valid(ret)
