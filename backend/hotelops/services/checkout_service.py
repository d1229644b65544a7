"""
退房服务
退房：客人记录置为离店，释放房型库存，清除房间占用标记
"""
import logging
from datetime import datetime
from typing import Optional, Callable

from sqlalchemy.orm import Session

from hotelops.database import utcnow
from hotelops.models.ontology import Customer
from hotelops.models.events import EventType, CustomerEventData, customer_record
from hotelops.services.event_bus import event_bus, Event
from hotelops.services.errors import NotFoundError, ValidationError, commit_or_raise
from hotelops.services.hotel_service import HotelService, to_hotel_local
from hotelops.services.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class CheckOutService:
    """退房服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None,
                 ledger: Optional[InventoryLedger] = None):
        self.db = db
        self.ledger = ledger or InventoryLedger(db)
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish

    def apply_check_out(self, customer: Customer, checkout_time: Optional[datetime] = None) -> None:
        """
        退房（不提交）

        业务联动规则：
        1. 只有在住客人可以退房
        2. 离店时间默认取酒店本地当前时间
        3. 房型可用数加 1
        4. 房间记录存在时清除占用标记
        """
        if not customer.is_active:
            raise ValidationError("该客人已退房")

        hotel = HotelService(self.db).get_hotel(customer.hotel_id)
        customer.is_active = False
        customer.checkout_time = to_hotel_local(hotel, checkout_time)

        self.ledger.release(customer.room_type_id)
        self.ledger.mark_room_occupied(customer.hotel_id, customer.room_number, False)

    def check_out(self, hotel_id: str, customer_id: str,
                  checkout_time: Optional[datetime] = None) -> Customer:
        """办理退房"""
        customer = self.db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.hotel_id == hotel_id
        ).first()
        if not customer:
            raise NotFoundError("客人记录不存在")

        self.apply_check_out(customer, checkout_time)

        commit_or_raise(self.db, "办理退房")
        self.db.refresh(customer)
        logger.info(f"Checked out {customer.name} from room {customer.room_number} at hotel {hotel_id}")

        self._publish_event(Event(
            event_type=EventType.CUSTOMER_UPDATED,
            timestamp=utcnow(),
            data=CustomerEventData(
                hotel_id=customer.hotel_id,
                customer_id=customer.id,
                action="check_out",
                record=customer_record(customer)
            ).to_dict(),
            source="checkout_service"
        ))
        return customer
