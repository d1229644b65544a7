"""
实时推送路由
客户端连接后发送 {"type": "join_hotel", "token": ..., "hotelId": ...} 订阅自己酒店的变更；
hotelId 可省略，省略时订阅 token 对应管理员的酒店
"""
import json
import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.security.auth import admin_for_token
from hotelops.services.connection_manager import connection_manager
from hotelops.services.hotel_service import HotelService
from hotelops.services.identifiers import is_valid_identifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["实时推送"])


def _resolve_hotel_id(db: Session, message: dict):
    """返回 (hotel_id, 错误信息)"""
    requested = message.get("hotelId")
    if requested is not None and not is_valid_identifier(requested):
        return None, "hotelId 格式无效"

    admin = admin_for_token(db, message.get("token"))
    if admin is None:
        return None, "无效的认证凭证"

    hotel = HotelService(db).get_hotel_for_owner(admin.id)
    if hotel is None:
        return None, "请先完成酒店设置"
    if requested is not None and requested.lower() != hotel.id:
        logger.warning(f"Admin {admin.id} tried to join hotel {requested}")
        return None, "酒店不存在"
    return hotel.id, None


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, db: Session = Depends(get_db)):
    await connection_manager.accept(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "error", "message": "消息必须是 JSON"})
                continue
            if not isinstance(message, dict):
                continue

            if message.get("type") == "join_hotel":
                hotel_id, error = _resolve_hotel_id(db, message)
                if error:
                    await websocket.send_json({"type": "error", "message": error})
                    continue
                connection_manager.join(websocket, hotel_id)
                await websocket.send_json({"type": "joined", "hotelId": hotel_id})
            elif message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        connection_manager.disconnect(websocket)
