"""
员工指派服务
每次分配服务请求都新建一条指派记录，当前指派 = assigned_at 最新的一条
add_assignment / close_latest_open 只修改会话，由服务请求流程统一提交
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from hotelops.database import utcnow
from hotelops.models.ontology import ServiceRequest, StaffAssignment
from hotelops.models.schemas import StaffAssignmentCreate, StaffAssignmentUpdate
from hotelops.services.errors import NotFoundError, commit_or_raise
from hotelops.services.identifiers import ensure_identifier

logger = logging.getLogger(__name__)


def _type_value(value) -> str:
    return getattr(value, "value", value)


class StaffAssignmentService:
    """员工指派服务"""

    def __init__(self, db: Session):
        self.db = db

    def list_assignments(self, hotel_id: str) -> List[StaffAssignment]:
        """酒店的指派记录（最新的在前）"""
        return self.db.query(StaffAssignment).filter(
            StaffAssignment.hotel_id == hotel_id
        ).order_by(StaffAssignment.assigned_at.desc(), StaffAssignment.id.desc()).all()

    def _latest_query(self, service_request_id: str):
        return self.db.query(StaffAssignment).filter(
            StaffAssignment.service_request_id == service_request_id
        ).order_by(StaffAssignment.assigned_at.desc(), StaffAssignment.id.desc())

    def get_current(self, hotel_id: str, service_request_id: str) -> Optional[StaffAssignment]:
        """服务请求的当前指派"""
        service_request_id = ensure_identifier(service_request_id, "服务请求")
        return self._latest_query(service_request_id).filter(
            StaffAssignment.hotel_id == hotel_id
        ).first()

    def add_assignment(self, service_request: ServiceRequest, assigned_to: str,
                       time_frame: str) -> StaffAssignment:
        """新建一条处理中的指派记录（不提交）"""
        assignment = StaffAssignment(
            hotel_id=service_request.hotel_id,
            service_request_id=service_request.id,
            request_type=_type_value(service_request.type),
            assigned_to=assigned_to,
            time_frame=time_frame,
            service=True,
            assigned_at=utcnow()
        )
        self.db.add(assignment)
        return assignment

    def close_latest_open(self, service_request: ServiceRequest) -> Optional[StaffAssignment]:
        """关闭最近一条处理中的指派（不提交）；没有则返回 None"""
        assignment = self._latest_query(service_request.id).filter(
            StaffAssignment.service.is_(True)
        ).first()
        if assignment:
            assignment.service = False
            assignment.completed_at = utcnow()
        return assignment

    def create_assignment(self, hotel_id: str, data: StaffAssignmentCreate) -> StaffAssignment:
        """直接登记一条指派记录（不改变服务请求状态）"""
        service_request_id = ensure_identifier(data.service_request_id, "服务请求")
        service_request = self.db.query(ServiceRequest).filter(
            ServiceRequest.id == service_request_id,
            ServiceRequest.hotel_id == hotel_id
        ).first()
        if not service_request:
            raise NotFoundError("服务请求不存在")

        assignment = self.add_assignment(service_request, data.assigned_to, data.time_frame)
        if data.request_type:
            assignment.request_type = data.request_type

        commit_or_raise(self.db, "登记员工指派")
        self.db.refresh(assignment)
        logger.info(f"Recorded assignment of request {service_request.id} to {assignment.assigned_to}")
        return assignment

    def update_assignment(self, hotel_id: str, service_request_id: str,
                          data: StaffAssignmentUpdate) -> StaffAssignment:
        """修改服务请求的当前指派；service 置 False 时记录完成时间"""
        assignment = self.get_current(hotel_id, service_request_id)
        if not assignment:
            raise NotFoundError("该服务请求没有指派记录")

        values = data.model_dump(exclude_unset=True)
        service = values.pop('service', None)
        for field, value in values.items():
            if value is not None:
                setattr(assignment, field, value)

        if service is not None and service != assignment.service:
            assignment.service = service
            assignment.completed_at = None if service else utcnow()

        commit_or_raise(self.db, "修改员工指派")
        self.db.refresh(assignment)
        return assignment
