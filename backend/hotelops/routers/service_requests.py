"""
服务请求路由
创建接口公开（扫房间二维码提交），其余需要登录
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Body
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import Hotel, HotelAdmin, ServiceRequestStatus
from hotelops.models.schemas import (
    ServiceRequestCreate, ServiceRequestUpdate, ServiceRequestAssign,
    ServiceRequestComplete, ServiceRequestResponse
)
from hotelops.services.errors import HotelOpsError
from hotelops.services.service_request_service import ServiceRequestService
from hotelops.security.auth import get_current_admin, get_current_hotel
from hotelops.routers.errors import http_error

router = APIRouter(prefix="/service-requests", tags=["服务请求"])


@router.get("", response_model=List[ServiceRequestResponse])
def list_service_requests(
    status: Optional[ServiceRequestStatus] = None,
    room_number: Optional[str] = None,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """获取服务请求列表"""
    return ServiceRequestService(db).get_service_requests(hotel.id, status, room_number)


@router.post("", response_model=ServiceRequestResponse)
def create_service_request(data: ServiceRequestCreate, db: Session = Depends(get_db)):
    """提交服务请求（公开）"""
    try:
        return ServiceRequestService(db).create_service_request(data)
    except HotelOpsError as e:
        raise http_error(e)


@router.get("/{service_request_id}", response_model=ServiceRequestResponse)
def get_service_request(
    service_request_id: str,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """获取服务请求详情"""
    try:
        return ServiceRequestService(db).get_service_request(hotel.id, service_request_id)
    except HotelOpsError as e:
        raise http_error(e)


@router.put("/{service_request_id}", response_model=ServiceRequestResponse)
def update_service_request(
    service_request_id: str,
    data: ServiceRequestUpdate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel),
    current_admin: HotelAdmin = Depends(get_current_admin)
):
    """修改服务请求（可附带状态变更）"""
    try:
        return ServiceRequestService(db).update(hotel.id, service_request_id, data, current_admin.username)
    except HotelOpsError as e:
        raise http_error(e)


@router.post("/{service_request_id}/assign", response_model=ServiceRequestResponse)
def assign_service_request(
    service_request_id: str,
    data: ServiceRequestAssign,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel),
    current_admin: HotelAdmin = Depends(get_current_admin)
):
    """分配服务请求"""
    try:
        return ServiceRequestService(db).assign(
            hotel.id, service_request_id, data.assigned_to, data.time_frame, current_admin.username
        )
    except HotelOpsError as e:
        raise http_error(e)


@router.post("/{service_request_id}/start", response_model=ServiceRequestResponse)
def start_service_request(
    service_request_id: str,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """开始处理服务请求"""
    try:
        return ServiceRequestService(db).start(hotel.id, service_request_id)
    except HotelOpsError as e:
        raise http_error(e)


@router.post("/{service_request_id}/complete", response_model=ServiceRequestResponse)
def complete_service_request(
    service_request_id: str,
    data: Optional[ServiceRequestComplete] = Body(None),
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """完成服务请求"""
    completed_by = data.completed_by if data else None
    try:
        return ServiceRequestService(db).complete(hotel.id, service_request_id, completed_by)
    except HotelOpsError as e:
        raise http_error(e)


@router.post("/{service_request_id}/cancel", response_model=ServiceRequestResponse)
def cancel_service_request(
    service_request_id: str,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """取消服务请求"""
    try:
        return ServiceRequestService(db).cancel(hotel.id, service_request_id)
    except HotelOpsError as e:
        raise http_error(e)
