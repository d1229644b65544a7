"""
客人管理路由
入住、退房、修改、删除
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import Hotel
from hotelops.models.schemas import CustomerCreate, CustomerUpdate, CustomerResponse
from hotelops.services.errors import HotelOpsError
from hotelops.services.checkin_service import CheckInService
from hotelops.services.checkout_service import CheckOutService
from hotelops.services.customer_service import CustomerService
from hotelops.security.auth import get_current_hotel
from hotelops.routers.errors import http_error

router = APIRouter(prefix="/customers", tags=["客人管理"])


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """获取客人列表"""
    return CheckInService(db).get_customers(hotel.id, active)


@router.post("", response_model=CustomerResponse)
def check_in(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """办理入住"""
    try:
        return CheckInService(db).check_in(hotel.id, data)
    except HotelOpsError as e:
        raise http_error(e)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """获取客人详情"""
    try:
        return CheckInService(db).get_customer(hotel.id, customer_id)
    except HotelOpsError as e:
        raise http_error(e)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """修改客人记录（is_active 变化会退房或重新入住）"""
    try:
        return CustomerService(db).update_customer(hotel.id, customer_id, data)
    except HotelOpsError as e:
        raise http_error(e)


@router.post("/{customer_id}/checkout", response_model=CustomerResponse)
def check_out(
    customer_id: str,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """办理退房"""
    try:
        return CheckOutService(db).check_out(hotel.id, customer_id)
    except HotelOpsError as e:
        raise http_error(e)


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """删除客人记录"""
    try:
        CustomerService(db).delete_customer(hotel.id, customer_id)
        return {"message": "客人记录已删除"}
    except HotelOpsError as e:
        raise http_error(e)
