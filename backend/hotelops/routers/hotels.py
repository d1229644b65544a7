"""
酒店路由
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import HotelAdmin, Hotel
from hotelops.models.schemas import HotelCreate, HotelUpdate, HotelResponse
from hotelops.services.errors import HotelOpsError
from hotelops.services.hotel_service import HotelService
from hotelops.security.auth import get_current_admin, get_current_hotel
from hotelops.routers.errors import http_error

router = APIRouter(prefix="/hotels", tags=["酒店"])


@router.post("", response_model=HotelResponse)
def create_hotel(
    data: HotelCreate,
    db: Session = Depends(get_db),
    current_admin: HotelAdmin = Depends(get_current_admin)
):
    """创建酒店（自动生成默认房型）"""
    try:
        return HotelService(db).create_hotel(current_admin, data)
    except HotelOpsError as e:
        raise http_error(e)


@router.get("/me", response_model=HotelResponse)
def get_my_hotel(hotel: Hotel = Depends(get_current_hotel)):
    """获取当前管理员的酒店"""
    return hotel


@router.put("/{hotel_id}", response_model=HotelResponse)
def update_hotel(
    hotel_id: str,
    data: HotelUpdate,
    db: Session = Depends(get_db),
    current_admin: HotelAdmin = Depends(get_current_admin)
):
    """更新酒店资料"""
    try:
        return HotelService(db).update_hotel(hotel_id, current_admin.id, data)
    except HotelOpsError as e:
        raise http_error(e)
