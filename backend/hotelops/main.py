"""
HotelOps 主应用入口
多租户酒店前台运营看板：入住退房、房间库存、客房服务请求
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hotelops.config import settings
from hotelops.database import init_db
from hotelops.routers import (
    auth, hotels, room_types, inventory, customers, service_requests,
    admin_services, rooms, ws
)
from hotelops.services.connection_manager import connection_manager
from hotelops.services.event_handlers import register_event_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时执行
    logging.basicConfig(level=settings.LOG_LEVEL)

    # 初始化数据库
    init_db()

    # 注册事件处理器，推送投递到当前事件循环
    register_event_handlers()
    connection_manager.bind_loop(asyncio.get_running_loop())
    logger.info(f"{settings.APP_NAME} started")

    yield

    # 关闭时执行
    connection_manager.unbind_loop()


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    description="酒店前台运营看板：入住退房、房间库存与客房服务请求",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(auth.router)
app.include_router(hotels.router)
app.include_router(room_types.router)
app.include_router(inventory.router)
app.include_router(customers.router)
app.include_router(service_requests.router)
app.include_router(admin_services.router)
app.include_router(rooms.router)
app.include_router(ws.router)


@app.get("/")
def root():
    """根路径"""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
