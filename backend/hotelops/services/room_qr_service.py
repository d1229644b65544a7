"""
房间二维码服务
为房间生成客房服务二维码：二维码内容是带房间号和酒店 ID 的前台服务页地址，
扫码即可提交服务请求，不需要登录
"""
import base64
import io
import logging
from typing import List, Optional
from urllib.parse import urlencode

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from sqlalchemy.orm import Session

from hotelops.config import settings
from hotelops.models.ontology import Room
from hotelops.services.errors import ValidationError, commit_or_raise
from hotelops.services.hotel_service import HotelService
from hotelops.services.identifiers import ensure_identifier
from hotelops.services.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


def build_service_url(hotel_id: str, room_number: str, base_url: Optional[str] = None) -> str:
    """客房服务页地址：{base}/service?room=..&hotel=.."""
    base = (base_url or settings.SERVICE_APP_URL).rstrip("/")
    return f"{base}/service?{urlencode({'room': room_number, 'hotel': hotel_id})}"


def render_qr_data_url(payload: str) -> str:
    """把内容编码为二维码 PNG，返回 data URL"""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=10,
        border=1,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def _room_sort_key(room: Room):
    # 数字房号按数值排序，其余按字符串
    number = room.room_number
    return (0, int(number), "") if number.isdecimal() else (1, 0, number)


class RoomQRService:
    """房间二维码服务"""

    def __init__(self, db: Session, ledger: Optional[InventoryLedger] = None):
        self.db = db
        self.ledger = ledger or InventoryLedger(db)

    def get_room(self, hotel_id: str, room_number: str) -> Optional[Room]:
        return self.db.query(Room).filter(
            Room.hotel_id == hotel_id,
            Room.room_number == room_number
        ).first()

    def list_rooms(self, hotel_id: str) -> List[Room]:
        rooms = self.db.query(Room).filter(Room.hotel_id == hotel_id).all()
        return sorted(rooms, key=_room_sort_key)

    def provision_room(self, hotel_id: str, room_number: str, room_type_id: str,
                       room_type_name: Optional[str] = None) -> Room:
        """
        创建房间记录并生成二维码

        同一房间号只能生成一次；重新编码请用 regenerate_all
        """
        room_number = room_number.strip()
        if not room_number:
            raise ValidationError("房间号不能为空")

        room_type = self.ledger.get_room_type(room_type_id, hotel_id)
        if room_type.room_numbers and room_number not in room_type.room_numbers:
            raise ValidationError(f"房间 {room_number} 不属于房型 {room_type.name}")

        if self.get_room(hotel_id, room_number):
            raise ValidationError(f"房间 {room_number} 已生成二维码")

        url = build_service_url(hotel_id, room_number)
        room = Room(
            hotel_id=hotel_id,
            room_number=room_number,
            room_type_id=room_type.id,
            room_type_name=room_type_name or room_type.name,
            qr_code=render_qr_data_url(url),
            qr_code_url=url,
            is_occupied=self.ledger.is_room_held(hotel_id, room_number)
        )
        self.db.add(room)
        commit_or_raise(
            self.db, "生成房间二维码",
            conflict_error=ValidationError(f"房间 {room_number} 已生成二维码")
        )
        self.db.refresh(room)
        logger.info(f"Provisioned QR code for room {room_number} at hotel {hotel_id}")
        return room

    def regenerate_all(self, hotel_id: str) -> int:
        """按当前服务地址重新编码本酒店所有房间的二维码，不改变房间号和房型"""
        rooms = self.db.query(Room).filter(Room.hotel_id == hotel_id).all()
        for room in rooms:
            url = build_service_url(hotel_id, room.room_number)
            room.qr_code_url = url
            room.qr_code = render_qr_data_url(url)

        commit_or_raise(self.db, "重新生成二维码")
        logger.info(f"Regenerated {len(rooms)} QR codes for hotel {hotel_id}")
        return len(rooms)

    def list_qr_codes(self, hotel_id: str) -> List[Room]:
        """公开的二维码列表（仅含已生成二维码的房间）"""
        hotel_id = ensure_identifier(hotel_id, "酒店")
        HotelService(self.db).get_hotel(hotel_id)
        return [room for room in self.list_rooms(hotel_id) if room.qr_code]
