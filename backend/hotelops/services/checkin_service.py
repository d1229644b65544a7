"""
入住服务 - 客人记录的创建与重新入住
入住在一个事务内完成：校验房间号、写客人记录、台账占用、同步房间占用标记
支持事件驱动：提交后发布 customer_added / customer_updated
"""
import logging
from typing import List, Optional, Callable

from sqlalchemy.orm import Session

from hotelops.database import utcnow
from hotelops.models.ontology import Customer
from hotelops.models.schemas import CustomerCreate
from hotelops.models.events import EventType, CustomerEventData, customer_record
from hotelops.services.event_bus import event_bus, Event
from hotelops.services.errors import (
    NotFoundError, RoomUnavailableError, ValidationError, commit_or_raise
)
from hotelops.services.hotel_service import HotelService, to_hotel_local
from hotelops.services.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class CheckInService:
    """入住服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None,
                 ledger: Optional[InventoryLedger] = None):
        self.db = db
        self.ledger = ledger or InventoryLedger(db)
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish

    def get_customers(self, hotel_id: str, active: Optional[bool] = None) -> List[Customer]:
        """获取客人列表（最新的在前）"""
        query = self.db.query(Customer).filter(Customer.hotel_id == hotel_id)
        if active is not None:
            query = query.filter(Customer.is_active.is_(active))
        return query.order_by(Customer.created_at.desc(), Customer.id.desc()).all()

    def get_customer(self, hotel_id: str, customer_id: str) -> Customer:
        """获取客人；其他酒店的记录视为不存在"""
        customer = self.db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.hotel_id == hotel_id
        ).first()
        if not customer:
            raise NotFoundError("客人记录不存在")
        return customer

    def check_in(self, hotel_id: str, data: CustomerCreate) -> Customer:
        """
        办理入住

        业务规则：
        1. 房型必须属于本酒店
        2. 房型配置了房间号时，房间号必须属于该房型
        3. 房间号不能已有在住客人（数据库部分唯一索引兜底）
        4. 房型可用数减 1，已满则拒绝
        5. 房型名称和价格作为快照写入客人记录
        """
        room_type = self.ledger.get_room_type(data.room_type_id, hotel_id)
        room_number = data.room_number.strip()

        if room_type.room_numbers and room_number not in room_type.room_numbers:
            raise ValidationError(f"房间 {room_number} 不属于房型 {room_type.name}")

        if self.ledger.is_room_held(hotel_id, room_number):
            raise RoomUnavailableError(f"房间 {room_number} 已有在住客人")

        hotel = HotelService(self.db).get_hotel(hotel_id)

        customer = Customer(
            hotel_id=hotel_id,
            name=data.name,
            email=str(data.email) if data.email else None,
            phone=data.phone,
            room_number=room_number,
            room_type_id=room_type.id,
            room_type_name=room_type.name,
            room_price=room_type.price,
            checkin_time=to_hotel_local(hotel, data.checkin_time),
            expected_stay_days=data.expected_stay_days,
            is_active=True
        )

        self.ledger.reserve(room_type.id)
        self.db.add(customer)
        self.ledger.mark_room_occupied(hotel_id, room_number, True)

        commit_or_raise(
            self.db, "办理入住",
            conflict_error=RoomUnavailableError(f"房间 {room_number} 已有在住客人")
        )
        self.db.refresh(customer)
        logger.info(
            f"Checked in {customer.name} to room {room_number} "
            f"({room_type.name}, {room_type.available_rooms} left) at hotel {hotel_id}"
        )

        self._publish(EventType.CUSTOMER_ADDED, customer, "check_in")
        return customer

    def apply_reactivation(self, customer: Customer) -> None:
        """
        重新入住（不提交）：房间号须空闲，房型可用数再减 1
        """
        if customer.is_active:
            raise ValidationError("该客人已在住")

        if self.ledger.is_room_held(customer.hotel_id, customer.room_number, exclude_customer_id=customer.id):
            raise RoomUnavailableError(f"房间 {customer.room_number} 已有在住客人")

        self.ledger.reserve(customer.room_type_id)
        customer.is_active = True
        customer.checkout_time = None
        self.ledger.mark_room_occupied(customer.hotel_id, customer.room_number, True)

    def reactivate(self, hotel_id: str, customer_id: str) -> Customer:
        """已退房客人重新入住"""
        customer = self.get_customer(hotel_id, customer_id)
        self.apply_reactivation(customer)

        commit_or_raise(
            self.db, "重新入住",
            conflict_error=RoomUnavailableError(f"房间 {customer.room_number} 已有在住客人")
        )
        self.db.refresh(customer)
        logger.info(f"Reactivated customer {customer.id} in room {customer.room_number}")

        self._publish(EventType.CUSTOMER_UPDATED, customer, "reactivate")
        return customer

    def _publish(self, event_type: EventType, customer: Customer, action: str) -> None:
        self._publish_event(Event(
            event_type=event_type,
            timestamp=utcnow(),
            data=CustomerEventData(
                hotel_id=customer.hotel_id,
                customer_id=customer.id,
                action=action,
                record=customer_record(customer)
            ).to_dict(),
            source="checkin_service"
        ))
