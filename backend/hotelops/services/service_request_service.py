"""
服务请求服务 - 客房服务请求的生命周期
状态机：pending → assigned → in_progress → completed，非终态可取消
分配与完成都在一个事务内同时写服务请求和员工指派记录
支持事件驱动：创建发布 service_request_created，其余变更发布 service_request_updated
"""
from typing import List, Optional, Callable
import logging

from sqlalchemy.orm import Session

from hotelops.database import utcnow
from hotelops.models.ontology import (
    ServiceRequest, ServiceRequestStatus, Customer
)
from hotelops.models.schemas import ServiceRequestCreate, ServiceRequestUpdate
from hotelops.models.events import EventType, ServiceRequestEventData, service_request_record
from hotelops.services.event_bus import event_bus, Event
from hotelops.services.errors import (
    HotelOpsError, NotFoundError, ValidationError, InvalidTransitionError, commit_or_raise
)
from hotelops.services.hotel_service import HotelService
from hotelops.services.identifiers import ensure_identifier
from hotelops.services.staff_assignment_service import StaffAssignmentService

logger = logging.getLogger(__name__)

# 正向顺序，只能往后走
_STATUS_RANK = {
    ServiceRequestStatus.PENDING: 0,
    ServiceRequestStatus.ASSIGNED: 1,
    ServiceRequestStatus.IN_PROGRESS: 2,
    ServiceRequestStatus.COMPLETED: 3,
}

TERMINAL_STATUSES = (ServiceRequestStatus.COMPLETED, ServiceRequestStatus.CANCELLED)


def can_transition(current: ServiceRequestStatus, target: ServiceRequestStatus) -> bool:
    """
    状态转换规则：
    - 终态（completed / cancelled）不能再变
    - 任何非终态都可以取消
    - assigned → assigned 表示重新分配
    - 其余只能转到更靠后的状态
    """
    if current in TERMINAL_STATUSES:
        return False
    if target == ServiceRequestStatus.CANCELLED:
        return True
    if current == target == ServiceRequestStatus.ASSIGNED:
        return True
    return _STATUS_RANK[target] > _STATUS_RANK[current]


def _status_value(status) -> str:
    return getattr(status, "value", status)


class ServiceRequestService:
    """服务请求服务"""

    def __init__(self, db: Session, event_publisher: Callable[[Event], None] = None,
                 assignment_service: Optional[StaffAssignmentService] = None):
        self.db = db
        self.assignment_service = assignment_service or StaffAssignmentService(db)
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish

    def get_service_requests(self, hotel_id: str,
                             status: Optional[ServiceRequestStatus] = None,
                             room_number: Optional[str] = None) -> List[ServiceRequest]:
        """获取服务请求列表（最新的在前）"""
        query = self.db.query(ServiceRequest).filter(ServiceRequest.hotel_id == hotel_id)
        if status:
            query = query.filter(ServiceRequest.status == status)
        if room_number:
            query = query.filter(ServiceRequest.room_number == room_number)
        return query.order_by(ServiceRequest.requested_at.desc(), ServiceRequest.id.desc()).all()

    def get_service_request(self, hotel_id: str, service_request_id: str) -> ServiceRequest:
        """获取单个服务请求；标识符格式不对时不访问存储"""
        service_request_id = ensure_identifier(service_request_id, "服务请求")
        service_request = self.db.query(ServiceRequest).filter(
            ServiceRequest.id == service_request_id,
            ServiceRequest.hotel_id == hotel_id
        ).first()
        if not service_request:
            raise NotFoundError("服务请求不存在")
        return service_request

    def create_service_request(self, data: ServiceRequestCreate) -> ServiceRequest:
        """
        创建服务请求（客人扫码或前台录入）

        未指定客人时，自动关联该房间当前的在住客人
        """
        hotel_id = ensure_identifier(data.hotel_id, "酒店")
        HotelService(self.db).get_hotel(hotel_id)
        room_number = data.room_number.strip()

        customer = None
        if data.customer_id:
            customer_id = ensure_identifier(data.customer_id, "客人")
            customer = self.db.query(Customer).filter(
                Customer.id == customer_id,
                Customer.hotel_id == hotel_id
            ).first()
            if not customer:
                raise NotFoundError("客人记录不存在")
        else:
            customer = self.db.query(Customer).filter(
                Customer.hotel_id == hotel_id,
                Customer.room_number == room_number,
                Customer.is_active.is_(True)
            ).first()

        service_request = ServiceRequest(
            hotel_id=hotel_id,
            customer_id=customer.id if customer else None,
            guest_name=data.guest_name or (customer.name if customer else None),
            room_number=room_number,
            type=data.type,
            description=data.description,
            notes=data.notes,
            priority=data.priority,
            status=ServiceRequestStatus.PENDING,
            requested_at=utcnow()
        )
        self.db.add(service_request)
        commit_or_raise(self.db, "创建服务请求")
        self.db.refresh(service_request)
        logger.info(
            f"Service request {service_request.id} ({_status_value(service_request.type)}) "
            f"created for room {room_number} at hotel {hotel_id}"
        )

        self._publish(EventType.SERVICE_REQUEST_CREATED, service_request, None)
        return service_request

    def _check_transition(self, service_request: ServiceRequest, target: ServiceRequestStatus) -> None:
        current = service_request.status
        if not can_transition(current, target):
            logger.warning(
                f"Rejected transition of request {service_request.id}: "
                f"{_status_value(current)} -> {_status_value(target)}"
            )
            raise InvalidTransitionError(
                f"状态为 {_status_value(current)} 的服务请求不能变为 {_status_value(target)}"
            )

    def _apply_assign(self, service_request: ServiceRequest, assigned_to: str, time_frame: str,
                      assigned_by: Optional[str]) -> None:
        if service_request.status not in (ServiceRequestStatus.PENDING, ServiceRequestStatus.ASSIGNED):
            raise InvalidTransitionError(
                f"状态为 {_status_value(service_request.status)} 的服务请求无法分配"
            )
        self._check_transition(service_request, ServiceRequestStatus.ASSIGNED)

        now = utcnow()
        self.assignment_service.add_assignment(service_request, assigned_to, time_frame)
        service_request.status = ServiceRequestStatus.ASSIGNED
        service_request.assigned_to = assigned_to
        service_request.assigned_by = assigned_by
        service_request.assigned_at = now

    def _apply_start(self, service_request: ServiceRequest) -> None:
        self._check_transition(service_request, ServiceRequestStatus.IN_PROGRESS)
        service_request.status = ServiceRequestStatus.IN_PROGRESS

    def _apply_complete(self, service_request: ServiceRequest, completed_by: Optional[str]) -> None:
        self._check_transition(service_request, ServiceRequestStatus.COMPLETED)
        service_request.status = ServiceRequestStatus.COMPLETED
        service_request.completed_by = completed_by or service_request.assigned_to
        service_request.completed_at = utcnow()

        # 从未分配过的请求也允许直接完成
        if self.assignment_service.close_latest_open(service_request) is None:
            logger.info(f"No open staff assignment to close for request {service_request.id}")

    def _apply_cancel(self, service_request: ServiceRequest) -> None:
        self._check_transition(service_request, ServiceRequestStatus.CANCELLED)
        service_request.status = ServiceRequestStatus.CANCELLED

    def _commit_transition(self, service_request: ServiceRequest, old_status, action: str,
                           operator: Optional[str] = None) -> ServiceRequest:
        commit_or_raise(self.db, action)
        self.db.refresh(service_request)
        logger.info(
            f"Service request {service_request.id}: "
            f"{_status_value(old_status)} -> {_status_value(service_request.status)}"
        )
        self._publish(EventType.SERVICE_REQUEST_UPDATED, service_request, old_status, operator)
        return service_request

    def assign(self, hotel_id: str, service_request_id: str, assigned_to: str, time_frame: str,
               assigned_by: Optional[str] = None) -> ServiceRequest:
        """分配服务请求：新建指派记录并转为 assigned，同一事务提交"""
        service_request = self.get_service_request(hotel_id, service_request_id)
        old_status = service_request.status
        self._apply_assign(service_request, assigned_to, time_frame, assigned_by)
        return self._commit_transition(service_request, old_status, "分配服务请求", assigned_by)

    def start(self, hotel_id: str, service_request_id: str) -> ServiceRequest:
        """开始处理"""
        service_request = self.get_service_request(hotel_id, service_request_id)
        old_status = service_request.status
        self._apply_start(service_request)
        return self._commit_transition(service_request, old_status, "开始处理服务请求")

    def complete(self, hotel_id: str, service_request_id: str,
                 completed_by: Optional[str] = None) -> ServiceRequest:
        """完成服务请求，同时关闭最近一条处理中的指派"""
        service_request = self.get_service_request(hotel_id, service_request_id)
        old_status = service_request.status
        self._apply_complete(service_request, completed_by)
        return self._commit_transition(service_request, old_status, "完成服务请求", completed_by)

    def cancel(self, hotel_id: str, service_request_id: str) -> ServiceRequest:
        """取消服务请求"""
        service_request = self.get_service_request(hotel_id, service_request_id)
        old_status = service_request.status
        self._apply_cancel(service_request)
        return self._commit_transition(service_request, old_status, "取消服务请求")

    def update(self, hotel_id: str, service_request_id: str, data: ServiceRequestUpdate,
               operator: Optional[str] = None) -> ServiceRequest:
        """
        通用修改：字段编辑 + 可选的状态变更

        status 为 assigned 时必须同时提供 assigned_to 和 time_frame
        """
        service_request = self.get_service_request(hotel_id, service_request_id)
        old_status = service_request.status

        if service_request.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"状态为 {_status_value(service_request.status)} 的服务请求不能修改"
            )

        values = data.model_dump(exclude_unset=True)
        target = values.pop('status', None)
        assigned_to = values.pop('assigned_to', None)
        time_frame = values.pop('time_frame', None)
        completed_by = values.pop('completed_by', None)

        for field, value in values.items():
            if value is None and field in ('priority', 'description'):
                continue
            setattr(service_request, field, value)

        # 状态变更被拒绝时，已写入会话的字段修改一并撤销
        try:
            if target == ServiceRequestStatus.ASSIGNED:
                if not assigned_to or not time_frame:
                    raise ValidationError("分配服务请求需要提供 assigned_to 和 time_frame")
                self._apply_assign(service_request, assigned_to, time_frame, operator)
            elif target == ServiceRequestStatus.IN_PROGRESS:
                self._apply_start(service_request)
            elif target == ServiceRequestStatus.COMPLETED:
                self._apply_complete(service_request, completed_by or operator)
            elif target == ServiceRequestStatus.CANCELLED:
                self._apply_cancel(service_request)
            elif target is not None:
                self._check_transition(service_request, target)
            elif assigned_to is not None:
                service_request.assigned_to = assigned_to
        except HotelOpsError:
            self.db.rollback()
            raise

        return self._commit_transition(service_request, old_status, "修改服务请求", operator)

    def _publish(self, event_type: EventType, service_request: ServiceRequest, old_status,
                 operator: Optional[str] = None) -> None:
        self._publish_event(Event(
            event_type=event_type,
            timestamp=utcnow(),
            data=ServiceRequestEventData(
                hotel_id=service_request.hotel_id,
                service_request_id=service_request.id,
                old_status=_status_value(old_status) if old_status else None,
                new_status=_status_value(service_request.status),
                operator=operator,
                record=service_request_record(service_request)
            ).to_dict(),
            source="service_request_service"
        ))
