"""
wxpay 应用入口：FastAPI 应用实例、通知路由注册、生命周期。
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from wxpay.config import load_settings
from wxpay.routes.notify import NotifyHandler, create_notify_router
from wxpay.services.client import WechatPay

load_dotenv()

# 日志配置
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    force=True,
)

logger = logging.getLogger(__name__)


def _log_notify(fields: dict) -> None:
    """默认通知处理：仅记录日志。"""
    logger.info(
        "收到支付通知: out_trade_no=%s, result_code=%s",
        fields.get("out_trade_no"), fields.get("result_code"),
    )


def create_app(
    pay: WechatPay | None = None, on_notify: NotifyHandler | None = None
) -> FastAPI:
    """
    创建应用。

    未传入 pay 时在启动阶段根据环境变量创建，并在关闭时释放连接。
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "pay", None) is None:
            owned = WechatPay.from_settings(load_settings())
            app.state.pay = owned
            logger.info("微信支付客户端初始化完成 (mch_id=%s)", owned.mch_id)

        yield

        if owned is not None:
            owned.close()

    app = FastAPI(title="wxpay", description="微信支付通知接收", lifespan=lifespan)
    app.state.pay = pay
    app.include_router(create_notify_router(on_notify or _log_notify))

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app


app = create_app()
