"""
实时推送连接管理
按酒店分组管理 WebSocket 连接；推送为即发即弃，不确认、不补发
"""
import asyncio
import logging
from typing import Dict, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class HotelConnectionManager:
    """
    每个连接同一时间只属于一个酒店分组

    业务服务运行在线程池中，通过 schedule_broadcast 把推送投递到服务器事件循环，
    HTTP 请求不等待推送完成
    """

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self.connection_hotels: Dict[WebSocket, str] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """绑定服务器事件循环（应用启动时调用）"""
        self._loop = loop

    def unbind_loop(self) -> None:
        self._loop = None

    async def accept(self, websocket: WebSocket) -> None:
        await websocket.accept()

    def join(self, websocket: WebSocket, hotel_id: str) -> None:
        """加入酒店分组，已在其他分组的连接会先移出"""
        self.disconnect(websocket)
        self.active_connections.setdefault(hotel_id, []).append(websocket)
        self.connection_hotels[websocket] = hotel_id
        logger.info(f"WebSocket joined hotel {hotel_id}")

    def disconnect(self, websocket: WebSocket) -> None:
        hotel_id = self.connection_hotels.pop(websocket, None)
        if hotel_id is None:
            return
        connections = self.active_connections.get(hotel_id, [])
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            self.active_connections.pop(hotel_id, None)
        logger.info(f"WebSocket left hotel {hotel_id}")

    def connection_count(self, hotel_id: str) -> int:
        return len(self.active_connections.get(hotel_id, []))

    async def broadcast(self, hotel_id: str, message: dict) -> None:
        """向酒店分组内所有连接发送消息，发送失败的连接被移除"""
        for connection in list(self.active_connections.get(hotel_id, [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.error(f"Failed to push {message.get('type')} to hotel {hotel_id}: {e}", exc_info=True)
                self.disconnect(connection)

    def schedule_broadcast(self, hotel_id: str, message: dict) -> None:
        """
        从任意线程投递一次推送

        未绑定事件循环（如脱离服务器运行的脚本或测试）时直接丢弃
        """
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug(f"No event loop bound, dropping {message.get('type')} for hotel {hotel_id}")
            return
        if hotel_id not in self.active_connections:
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            loop.create_task(self.broadcast(hotel_id, message))
        else:
            asyncio.run_coroutine_threadsafe(self.broadcast(hotel_id, message), loop)


# 全局连接管理器实例
connection_manager = HotelConnectionManager()
