"""
库存台账服务
维护房型可用数（RoomType.available_rooms）和房间占用标记（Room.is_occupied），
两者都以在住客人记录为准

reserve / release / adjust / mark_room_occupied 只修改会话，由调用方统一提交；
recalculate 是权威修复操作，自行提交
"""
import logging
from typing import Dict, List, Optional, Set

from sqlalchemy import update, func
from sqlalchemy.orm import Session

from hotelops.models.ontology import RoomType, Room, Customer
from hotelops.services.errors import (
    NotFoundError, RoomUnavailableError, ValidationError, commit_or_raise
)

logger = logging.getLogger(__name__)


class InventoryLedger:
    """库存台账"""

    def __init__(self, db: Session):
        self.db = db

    def get_room_type(self, room_type_id: str, hotel_id: Optional[str] = None) -> RoomType:
        """获取房型；指定 hotel_id 时其他酒店的房型视为不存在"""
        query = self.db.query(RoomType).filter(RoomType.id == room_type_id)
        if hotel_id is not None:
            query = query.filter(RoomType.hotel_id == hotel_id)
        room_type = query.first()
        if not room_type:
            raise NotFoundError("房型不存在")
        return room_type

    def _exists(self, room_type_id: str) -> bool:
        return self.db.query(RoomType.id).filter(RoomType.id == room_type_id).first() is not None

    def reserve(self, room_type_id: str) -> None:
        """
        占用一间：可用数减 1

        条件更新保证可用数不会减到 0 以下，并发入住不会超卖
        """
        result = self.db.execute(
            update(RoomType)
            .where(RoomType.id == room_type_id, RoomType.available_rooms > 0)
            .values(available_rooms=RoomType.available_rooms - 1)
        )
        if result.rowcount == 1:
            return
        if not self._exists(room_type_id):
            raise NotFoundError("房型不存在")
        raise RoomUnavailableError("该房型已无可用房间")

    def release(self, room_type_id: str) -> None:
        """
        释放一间：可用数加 1

        已满时不再增加，只记录偏差，由 recalculate 修复
        """
        result = self.db.execute(
            update(RoomType)
            .where(RoomType.id == room_type_id, RoomType.available_rooms < RoomType.total_rooms)
            .values(available_rooms=RoomType.available_rooms + 1)
        )
        if result.rowcount == 1:
            return
        if not self._exists(room_type_id):
            raise NotFoundError("房型不存在")
        logger.warning(f"Release on room type {room_type_id} already at capacity, counter drift")

    def adjust(self, room_type_id: str, delta: int) -> None:
        """按增量调整可用数，调整后须仍在 [0, total_rooms] 内"""
        if delta == 0:
            return
        result = self.db.execute(
            update(RoomType)
            .where(
                RoomType.id == room_type_id,
                RoomType.available_rooms + delta >= 0,
                RoomType.available_rooms + delta <= RoomType.total_rooms,
            )
            .values(available_rooms=RoomType.available_rooms + delta)
        )
        if result.rowcount == 1:
            return
        if not self._exists(room_type_id):
            raise NotFoundError("房型不存在")
        raise ValidationError("调整后的可用房间数超出范围")

    def active_counts(self, hotel_id: str) -> Dict[str, int]:
        """各房型在住客人数"""
        rows = self.db.query(Customer.room_type_id, func.count(Customer.id)).filter(
            Customer.hotel_id == hotel_id,
            Customer.is_active.is_(True)
        ).group_by(Customer.room_type_id).all()
        return {room_type_id: count for room_type_id, count in rows}

    def occupied_room_numbers(self, hotel_id: str) -> Set[str]:
        """在住客人占用的房间号"""
        rows = self.db.query(Customer.room_number).filter(
            Customer.hotel_id == hotel_id,
            Customer.is_active.is_(True)
        ).all()
        return {row[0] for row in rows}

    def is_room_held(self, hotel_id: str, room_number: str, exclude_customer_id: Optional[str] = None) -> bool:
        """房间号是否已被在住客人占用"""
        query = self.db.query(Customer.id).filter(
            Customer.hotel_id == hotel_id,
            Customer.room_number == room_number,
            Customer.is_active.is_(True)
        )
        if exclude_customer_id:
            query = query.filter(Customer.id != exclude_customer_id)
        return query.first() is not None

    def mark_room_occupied(self, hotel_id: str, room_number: str, occupied: bool) -> None:
        """同步房间占用标记；房间记录尚未创建时忽略"""
        room = self.db.query(Room).filter(
            Room.hotel_id == hotel_id,
            Room.room_number == room_number
        ).first()
        if room:
            room.is_occupied = occupied

    def recalculate(self, hotel_id: str) -> Dict[str, int]:
        """
        全量重算：available_rooms = total_rooms - 在住客人数，并同步房间占用标记

        Returns:
            房型 ID 到重算后可用数的映射
        """
        counts = self.active_counts(hotel_id)
        occupied = self.occupied_room_numbers(hotel_id)

        summary = {}
        room_types = self.db.query(RoomType).filter(RoomType.hotel_id == hotel_id).all()
        for room_type in room_types:
            active = counts.get(room_type.id, 0)
            available = room_type.total_rooms - active
            if available < 0:
                logger.warning(
                    f"Room type {room_type.id} overbooked: {active} active guests for {room_type.total_rooms} rooms"
                )
                available = 0
            if room_type.available_rooms != available:
                logger.info(
                    f"Recalculated room type {room_type.name} ({room_type.id}): "
                    f"{room_type.available_rooms} -> {available}"
                )
            room_type.available_rooms = available
            summary[room_type.id] = available

        for room in self.db.query(Room).filter(Room.hotel_id == hotel_id).all():
            room.is_occupied = room.room_number in occupied

        commit_or_raise(self.db, "重算房间可用数")
        logger.info(f"Recalculated availability for hotel {hotel_id}: {len(summary)} room types")
        return summary

    def available_room_numbers(self, hotel_id: str) -> Dict[str, List[str]]:
        """
        各房型当前可选的房间号（保持房型内原有顺序）

        结果一定是房型 room_numbers 的子集，且不含在住客人占用的房间号
        """
        occupied = self.occupied_room_numbers(hotel_id)
        room_types = self.db.query(RoomType).filter(
            RoomType.hotel_id == hotel_id
        ).order_by(RoomType.created_at, RoomType.id).all()
        return {
            room_type.id: [n for n in (room_type.room_numbers or []) if n not in occupied]
            for room_type in room_types
        }
