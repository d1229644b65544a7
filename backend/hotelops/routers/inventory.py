"""
库存路由
可选房间号查询与可用数重算
"""
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import Hotel
from hotelops.models.schemas import RecalculateResponse
from hotelops.services.errors import HotelOpsError
from hotelops.services.inventory_ledger import InventoryLedger
from hotelops.security.auth import get_current_hotel, scoped_hotel_id
from hotelops.routers.errors import http_error

router = APIRouter(tags=["库存"])


@router.get("/available-rooms", response_model=Dict[str, List[str]])
def get_available_rooms(
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """各房型当前可选的房间号"""
    return InventoryLedger(db).available_room_numbers(scoped_hotel_id(hotel, hotel_id))


@router.post("/recalculate-rooms", response_model=RecalculateResponse)
def recalculate_rooms(
    db: Session = Depends(get_db),
    hotel: Hotel = Depends(get_current_hotel)
):
    """按在住客人全量重算房型可用数"""
    try:
        summary = InventoryLedger(db).recalculate(hotel.id)
    except HotelOpsError as e:
        raise http_error(e)
    return RecalculateResponse(message="房间可用数已重算", available_rooms=summary)
