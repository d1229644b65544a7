"""
客人记录维护
部分字段修改；is_active 的变化分别走退房 / 重新入住流程；删除在住客人时释放库存
"""
import logging
from typing import Optional, Callable

from sqlalchemy.orm import Session

from hotelops.database import utcnow
from hotelops.models.ontology import Customer, ServiceRequest
from hotelops.models.schemas import CustomerUpdate
from hotelops.models.events import EventType, CustomerEventData, customer_record
from hotelops.services.event_bus import event_bus, Event
from hotelops.services.errors import HotelOpsError, RoomUnavailableError, commit_or_raise
from hotelops.services.hotel_service import HotelService, to_hotel_local
from hotelops.services.inventory_ledger import InventoryLedger
from hotelops.services.checkin_service import CheckInService
from hotelops.services.checkout_service import CheckOutService

logger = logging.getLogger(__name__)


class CustomerService:
    """客人记录服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None,
                 ledger: Optional[InventoryLedger] = None):
        self.db = db
        self.ledger = ledger or InventoryLedger(db)
        self._publish_event = event_publisher or event_bus.publish
        self.checkin_service = CheckInService(db, event_publisher=self._publish_event, ledger=self.ledger)
        self.checkout_service = CheckOutService(db, event_publisher=self._publish_event, ledger=self.ledger)

    def update_customer(self, hotel_id: str, customer_id: str, data: CustomerUpdate) -> Customer:
        """
        修改客人记录

        is_active 由 True 变 False 视为退房，由 False 变 True 视为重新入住，
        其余字段直接修改，全部在同一事务内提交
        """
        customer = self.checkin_service.get_customer(hotel_id, customer_id)
        values = data.model_dump(exclude_unset=True)
        is_active = values.pop('is_active', None)
        checkout_time = values.pop('checkout_time', None)

        hotel = HotelService(self.db).get_hotel(hotel_id)
        for field, value in values.items():
            if value is None and field in ('name', 'phone', 'checkin_time'):
                continue
            if field == 'email' and value is not None:
                value = str(value)
            if field == 'checkin_time':
                value = to_hotel_local(hotel, value)
            setattr(customer, field, value)

        action = "update"
        try:
            if is_active is not None and is_active != customer.is_active:
                if is_active:
                    self.checkin_service.apply_reactivation(customer)
                    action = "reactivate"
                else:
                    self.checkout_service.apply_check_out(customer, checkout_time)
                    action = "check_out"
            elif checkout_time is not None and not customer.is_active:
                customer.checkout_time = to_hotel_local(hotel, checkout_time)
        except HotelOpsError:
            # 撤销已写入会话的字段修改
            self.db.rollback()
            raise

        commit_or_raise(
            self.db, "修改客人记录",
            conflict_error=RoomUnavailableError(f"房间 {customer.room_number} 已有在住客人")
        )
        self.db.refresh(customer)
        logger.info(f"Updated customer {customer.id} ({action})")

        self._publish_event(Event(
            event_type=EventType.CUSTOMER_UPDATED,
            timestamp=utcnow(),
            data=CustomerEventData(
                hotel_id=customer.hotel_id,
                customer_id=customer.id,
                action=action,
                record=customer_record(customer)
            ).to_dict(),
            source="customer_service"
        ))
        return customer

    def delete_customer(self, hotel_id: str, customer_id: str) -> None:
        """删除客人记录；在住客人同时释放库存"""
        customer = self.checkin_service.get_customer(hotel_id, customer_id)

        if customer.is_active:
            self.ledger.release(customer.room_type_id)
            self.ledger.mark_room_occupied(hotel_id, customer.room_number, False)

        # 服务请求保留，只解除关联
        self.db.query(ServiceRequest).filter(
            ServiceRequest.customer_id == customer.id
        ).update({ServiceRequest.customer_id: None}, synchronize_session=False)

        self.db.delete(customer)
        commit_or_raise(self.db, "删除客人记录")
        logger.info(f"Deleted customer {customer_id} of hotel {hotel_id}")
