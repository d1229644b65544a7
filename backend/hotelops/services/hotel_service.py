"""
酒店服务
酒店创建（自动生成默认房型）、资料维护、酒店本地时间
"""
import logging
from datetime import datetime, UTC
from decimal import Decimal
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func
from sqlalchemy.orm import Session

from hotelops.config import settings
from hotelops.models.ontology import Hotel, HotelAdmin, RoomType, RoomCategory, RoomKind
from hotelops.models.schemas import HotelCreate, HotelUpdate
from hotelops.services.errors import NotFoundError, ValidationError, commit_or_raise

logger = logging.getLogger(__name__)

# 默认房型：名称、大类、规格、价格、设施、描述
DEFAULT_ROOM_TYPES = [
    ("Standard Room", RoomCategory.STANDARD, RoomKind.SINGLE, Decimal("2500"),
     ["Bed", "TV", "Wi-Fi", "Bathroom"],
     "Basic amenities (bed, TV, Wi-Fi, bathroom). Perfect for solo travelers or couples."),
    ("Deluxe Room", RoomCategory.DELUXE, RoomKind.DOUBLE, Decimal("3500"),
     ["Large Bed", "TV", "Wi-Fi", "Minibar", "Better View", "Bathroom"],
     "More spacious than Standard. Includes extras like minibar, better view, larger bed."),
    ("Suite", RoomCategory.SUITE, RoomKind.JUNIOR_SUITE, Decimal("5500"),
     ["Separate Living Area", "Bedroom", "Sofa", "Work Desk", "Luxury Bathroom", "Premium Amenities"],
     "Separate living area + bedroom. Premium amenities (sofa, work desk, luxury bathroom)."),
    ("Family Room", RoomCategory.STANDARD, RoomKind.TRIPLE, Decimal("4500"),
     ["Multiple Beds", "Family Space", "TV", "Wi-Fi", "Large Bathroom"],
     "Designed for families. Multiple beds or a combination (e.g., 1 double + 2 singles)."),
]


def resolve_timezone(name: Optional[str]):
    """把时区名解析为 tzinfo，未知时区抛出 ValidationError"""
    name = name or settings.DEFAULT_TIMEZONE
    if name in ("UTC", "Etc/UTC"):
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"未知的时区: {name}")


def hotel_local_now(hotel: Optional[Hotel]) -> datetime:
    """酒店本地当前时间（墙上时间，不带时区信息）"""
    tz = resolve_timezone(hotel.timezone if hotel else None)
    return datetime.now(tz).replace(tzinfo=None)


def to_hotel_local(hotel: Optional[Hotel], value: Optional[datetime]) -> datetime:
    """把输入时间转成酒店本地墙上时间；未提供时取当前时间"""
    if value is None:
        return hotel_local_now(hotel)
    if value.tzinfo is not None:
        tz = resolve_timezone(hotel.timezone if hotel else None)
        return value.astimezone(tz).replace(tzinfo=None)
    return value


class HotelService:
    """酒店服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_hotel(self, hotel_id: str) -> Hotel:
        hotel = self.db.query(Hotel).filter(Hotel.id == hotel_id).first()
        if not hotel:
            raise NotFoundError("酒店不存在")
        return hotel

    def get_hotel_for_owner(self, owner_id: str) -> Optional[Hotel]:
        """获取管理员名下的酒店"""
        return self.db.query(Hotel).filter(Hotel.owner_id == owner_id).first()

    def create_hotel(self, owner: HotelAdmin, data: HotelCreate) -> Hotel:
        """
        创建酒店并生成默认房型

        每个管理员只能拥有一个酒店；默认四种房型，房间号从 1 开始连续编号
        """
        if self.get_hotel_for_owner(owner.id):
            raise ValidationError("该账号已创建酒店")

        values = data.model_dump()
        if values.get('email') is not None:
            values['email'] = str(values['email'])
        if values.get('timezone'):
            resolve_timezone(values['timezone'])

        hotel = Hotel(owner_id=owner.id, **values)
        self.db.add(hotel)
        self.db.flush()

        room_types = self._seed_room_types(hotel)
        hotel.total_rooms = sum(rt.total_rooms for rt in room_types)

        commit_or_raise(self.db, "创建酒店")
        self.db.refresh(hotel)
        logger.info(
            f"Created hotel {hotel.name} ({hotel.id}) with {len(room_types)} default room types, "
            f"{hotel.total_rooms} rooms"
        )
        return hotel

    def _seed_room_types(self, hotel: Hotel) -> List[RoomType]:
        per_type = settings.DEFAULT_ROOMS_PER_TYPE
        room_types = []
        next_number = 1
        for name, category, kind, price, amenities, description in DEFAULT_ROOM_TYPES:
            numbers = [str(n) for n in range(next_number, next_number + per_type)]
            next_number += per_type
            room_type = RoomType(
                hotel_id=hotel.id,
                name=name,
                category=category,
                type=kind,
                amenities=list(amenities),
                price=price,
                total_rooms=per_type,
                available_rooms=per_type,
                room_numbers=numbers,
                description=description
            )
            self.db.add(room_type)
            room_types.append(room_type)
        return room_types

    def update_hotel(self, hotel_id: str, owner_id: str, data: HotelUpdate) -> Hotel:
        """更新酒店资料；其他管理员的酒店视为不存在"""
        hotel = self.get_hotel(hotel_id)
        if hotel.owner_id != owner_id:
            raise NotFoundError("酒店不存在")

        values = data.model_dump(exclude_unset=True)
        if values.get('email') is not None:
            values['email'] = str(values['email'])
        if values.get('timezone'):
            resolve_timezone(values['timezone'])

        for field, value in values.items():
            if field == "name" and value is None:
                continue
            setattr(hotel, field, value)

        commit_or_raise(self.db, "更新酒店")
        self.db.refresh(hotel)
        return hotel

    def sync_total_rooms(self, hotel_id: str) -> int:
        """按房型容量之和更新酒店总房数（不提交）"""
        total = self.db.query(func.coalesce(func.sum(RoomType.total_rooms), 0)).filter(
            RoomType.hotel_id == hotel_id
        ).scalar()
        hotel = self.get_hotel(hotel_id)
        hotel.total_rooms = int(total)
        return hotel.total_rooms
