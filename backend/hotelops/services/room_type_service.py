"""
房型服务
房型增删改查；可用数的增减统一交给 InventoryLedger
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from hotelops.models.ontology import RoomType, Room, Customer
from hotelops.models.schemas import RoomTypeCreate, RoomTypeUpdate
from hotelops.services.errors import HotelOpsError, ValidationError, commit_or_raise
from hotelops.services.hotel_service import HotelService
from hotelops.services.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class RoomTypeService:
    """房型服务"""

    def __init__(self, db: Session, ledger: Optional[InventoryLedger] = None):
        self.db = db
        self.ledger = ledger or InventoryLedger(db)

    def get_room_types(self, hotel_id: str) -> List[RoomType]:
        return self.db.query(RoomType).filter(
            RoomType.hotel_id == hotel_id
        ).order_by(RoomType.created_at, RoomType.id).all()

    def get_room_type(self, room_type_id: str, hotel_id: str) -> RoomType:
        return self.ledger.get_room_type(room_type_id, hotel_id)

    def _check_room_numbers(self, hotel_id: str, numbers: List[str], total_rooms: int,
                            exclude_room_type_id: Optional[str] = None) -> List[str]:
        """房间号数量须与总房数一致，且在酒店内不重复"""
        numbers = [str(n).strip() for n in numbers]
        if any(not n for n in numbers):
            raise ValidationError("房间号不能为空")
        if len(numbers) != total_rooms:
            raise ValidationError(f"房间号数量 ({len(numbers)}) 与总房数 ({total_rooms}) 不一致")
        if len(set(numbers)) != len(numbers):
            raise ValidationError("房间号不能重复")

        taken = set()
        for room_type in self.get_room_types(hotel_id):
            if room_type.id != exclude_room_type_id:
                taken.update(room_type.room_numbers or [])
        conflicts = [n for n in numbers if n in taken]
        if conflicts:
            raise ValidationError(f"房间号已属于其他房型: {', '.join(conflicts)}")
        return numbers

    def create_room_type(self, hotel_id: str, data: RoomTypeCreate) -> RoomType:
        """创建房型，可用数初始化为总房数"""
        numbers = []
        if data.room_numbers is not None:
            numbers = self._check_room_numbers(hotel_id, data.room_numbers, data.total_rooms)

        room_type = RoomType(
            hotel_id=hotel_id,
            name=data.name,
            category=data.category,
            type=data.type,
            amenities=list(data.amenities),
            price=data.price,
            total_rooms=data.total_rooms,
            available_rooms=data.total_rooms,
            room_numbers=numbers,
            description=data.description
        )
        self.db.add(room_type)
        self.db.flush()
        HotelService(self.db).sync_total_rooms(hotel_id)

        commit_or_raise(self.db, "创建房型")
        self.db.refresh(room_type)
        logger.info(f"Created room type {room_type.name} ({room_type.id}) with {room_type.total_rooms} rooms")
        return room_type

    def update_room_type(self, room_type_id: str, hotel_id: str, data: RoomTypeUpdate) -> RoomType:
        """更新房型资料，available_rooms_delta 经台账按边界调整"""
        room_type = self.get_room_type(room_type_id, hotel_id)

        values = data.model_dump(exclude_unset=True)
        delta = values.pop('available_rooms_delta', None)
        for field, value in values.items():
            if value is None:
                continue
            setattr(room_type, field, value)

        if delta:
            try:
                self.ledger.adjust(room_type.id, delta)
            except HotelOpsError:
                self.db.rollback()
                raise

        commit_or_raise(self.db, "更新房型")
        self.db.refresh(room_type)
        return room_type

    def delete_room_type(self, room_type_id: str, hotel_id: str) -> None:
        """删除房型；仍有在住客人时拒绝"""
        room_type = self.get_room_type(room_type_id, hotel_id)

        active = self.db.query(Customer.id).filter(
            Customer.room_type_id == room_type.id,
            Customer.is_active.is_(True)
        ).count()
        if active:
            raise ValidationError(f"该房型仍有 {active} 位在住客人，无法删除")

        self.db.query(Room).filter(Room.room_type_id == room_type.id).delete(synchronize_session=False)
        self.db.delete(room_type)
        self.db.flush()
        HotelService(self.db).sync_total_rooms(hotel_id)

        commit_or_raise(self.db, "删除房型")
        logger.info(f"Deleted room type {room_type_id} of hotel {hotel_id}")
