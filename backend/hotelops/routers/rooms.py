"""
房间与二维码路由
二维码列表公开，供打印和前台服务页使用
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import Hotel
from hotelops.models.schemas import (
    RoomQRCreate, RoomResponse, RoomQRCodeResponse, RegenerateResponse
)
from hotelops.services.errors import HotelOpsError
from hotelops.services.room_qr_service import RoomQRService
from hotelops.security.auth import get_current_hotel
from hotelops.routers.errors import http_error

router = APIRouter(prefix="/rooms", tags=["房间管理"])


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """获取已创建的房间"""
    return RoomQRService(db).list_rooms(hotel.id)


@router.post("/qr", response_model=RoomResponse)
def provision_room(
    data: RoomQRCreate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """创建房间并生成二维码"""
    try:
        return RoomQRService(db).provision_room(hotel.id, data.room_number, data.room_type_id)
    except HotelOpsError as e:
        raise http_error(e)


@router.post("/qr/regenerate-all", response_model=RegenerateResponse)
def regenerate_all(
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """重新生成本酒店所有房间的二维码"""
    try:
        count = RoomQRService(db).regenerate_all(hotel.id)
    except HotelOpsError as e:
        raise http_error(e)
    return RegenerateResponse(message=f"已重新生成 {count} 个二维码", count=count)


@router.get("/qr-codes/{hotel_id}", response_model=List[RoomQRCodeResponse])
def list_qr_codes(hotel_id: str, db: Session = Depends(get_db)):
    """获取酒店所有房间二维码（公开）"""
    try:
        return RoomQRService(db).list_qr_codes(hotel_id)
    except HotelOpsError as e:
        raise http_error(e)
