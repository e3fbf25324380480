"""
支付结果通知路由：POST /wxpay/notify

接收微信支付异步通知，校验 return_code 和签名后交给业务回调处理，
按处理结果返回 SUCCESS / FAIL 应答报文。应答 FAIL 时网关会重新通知。
"""

import logging
from collections.abc import Callable

from fastapi import APIRouter, Request
from fastapi.responses import Response

from wxpay.errors import WxPayError
from wxpay.services.notify import response_fail, response_success

logger = logging.getLogger(__name__)

NotifyHandler = Callable[[dict], None]


def _xml_response(content: bytes) -> Response:
    return Response(content=content, media_type="text/xml")


def create_notify_router(
    on_notify: NotifyHandler, path: str = "/wxpay/notify"
) -> APIRouter:
    """
    创建通知路由。

    Args:
        on_notify: 业务回调，参数为验签通过的通知字段；抛出异常视为处理失败。
        path: 路由路径。
    """
    router = APIRouter()

    @router.post(path)
    async def receive_notify(request: Request):
        """流程：读取报文 → 校验 return_code 和签名 → 业务回调 → 应答"""
        pay = request.app.state.pay
        body = await request.body()

        try:
            fields = pay.verify_notify(body)
        except WxPayError as e:
            logger.warning("支付通知校验失败: %s", e)
            return _xml_response(response_fail(str(e) or "invalid notify"))

        try:
            on_notify(fields)
        except Exception:
            logger.exception(
                "支付通知业务处理异常 (out_trade_no=%s)", fields.get("out_trade_no")
            )
            return _xml_response(response_fail("notify handler error"))

        logger.info(
            "支付通知处理成功 (out_trade_no=%s, transaction_id=%s)",
            fields.get("out_trade_no"), fields.get("transaction_id"),
        )
        return _xml_response(response_success())

    return router
