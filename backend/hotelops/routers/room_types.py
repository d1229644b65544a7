"""
房型管理路由
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import Hotel
from hotelops.models.schemas import RoomTypeCreate, RoomTypeUpdate, RoomTypeResponse
from hotelops.services.errors import HotelOpsError
from hotelops.services.room_type_service import RoomTypeService
from hotelops.security.auth import get_current_hotel
from hotelops.routers.errors import http_error

router = APIRouter(prefix="/room-types", tags=["房型管理"])


@router.get("", response_model=List[RoomTypeResponse])
def list_room_types(
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """获取房型列表"""
    return RoomTypeService(db).get_room_types(hotel.id)


@router.post("", response_model=RoomTypeResponse)
def create_room_type(
    data: RoomTypeCreate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """创建房型"""
    try:
        return RoomTypeService(db).create_room_type(hotel.id, data)
    except HotelOpsError as e:
        raise http_error(e)


@router.put("/{room_type_id}", response_model=RoomTypeResponse)
def update_room_type(
    room_type_id: str,
    data: RoomTypeUpdate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """更新房型（可附带可用数增量）"""
    try:
        return RoomTypeService(db).update_room_type(room_type_id, hotel.id, data)
    except HotelOpsError as e:
        raise http_error(e)


@router.delete("/{room_type_id}")
def delete_room_type(
    room_type_id: str,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """删除房型"""
    try:
        RoomTypeService(db).delete_room_type(room_type_id, hotel.id)
        return {"message": "房型已删除"}
    except HotelOpsError as e:
        raise http_error(e)
