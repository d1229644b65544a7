"""
员工指派路由（admin-services）
按服务请求 ID 修改其当前指派
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import Hotel
from hotelops.models.schemas import (
    StaffAssignmentCreate, StaffAssignmentUpdate, StaffAssignmentResponse
)
from hotelops.services.errors import HotelOpsError
from hotelops.services.staff_assignment_service import StaffAssignmentService
from hotelops.security.auth import get_current_hotel, scoped_hotel_id
from hotelops.routers.errors import http_error

router = APIRouter(prefix="/admin-services", tags=["员工指派"])


@router.get("", response_model=List[StaffAssignmentResponse])
def list_assignments(
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """获取指派记录列表"""
    return StaffAssignmentService(db).list_assignments(scoped_hotel_id(hotel, hotel_id))


@router.post("", response_model=StaffAssignmentResponse)
def create_assignment(
    data: StaffAssignmentCreate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """登记指派记录"""
    try:
        return StaffAssignmentService(db).create_assignment(hotel.id, data)
    except HotelOpsError as e:
        raise http_error(e)


@router.put("/{service_request_id}", response_model=StaffAssignmentResponse)
def update_assignment(
    service_request_id: str,
    data: StaffAssignmentUpdate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """修改服务请求的当前指派"""
    try:
        return StaffAssignmentService(db).update_assignment(hotel.id, service_request_id, data)
    except HotelOpsError as e:
        raise http_error(e)
