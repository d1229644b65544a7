"""
Pydantic 模式定义
用于 API 请求/响应验证
"""
import re
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional, List
from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from hotelops.models.ontology import (
    RoomCategory, RoomKind, ServiceRequestType, ServiceRequestStatus, ServiceRequestPriority
)

# 国际电话格式：可选 +，首位 1-9，共 2-15 位数字
PHONE_PATTERN = re.compile(r"^[+]?[1-9]\d{1,14}$")
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# 房间号与客人、房间记录上的 room_number 长度一致
RoomLabel = Annotated[str, Field(min_length=1, max_length=20)]


def _check_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not PHONE_PATTERN.match(v):
        raise ValueError("请输入有效的电话号码")
    return v


def _blank_to_none(v):
    """空字符串视为未填写（邮箱可选）"""
    if isinstance(v, str) and not v.strip():
        return None
    return v


# ============== 账号 Schemas ==============

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    hotel_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator('phone', mode='before')
    @classmethod
    def blank_phone(cls, v):
        return _blank_to_none(v)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class LoginRequest(BaseModel):
    username: str
    password: str


class HotelAdminResponse(BaseModel):
    id: str
    username: str
    hotel_name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    is_active: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: HotelAdminResponse


class TokenPayload(BaseModel):
    sub: str
    exp: datetime


# ============== 酒店 Schemas ==============

class HotelBase(BaseModel):
    address: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=20)
    hotel_type: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    amenities: List[str] = []
    check_in_time: str = Field(default="14:00", pattern=TIME_OF_DAY_PATTERN)
    check_out_time: str = Field(default="11:00", pattern=TIME_OF_DAY_PATTERN)
    star_rating: Optional[int] = Field(None, ge=1, le=5)
    website: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    timezone: Optional[str] = Field(None, max_length=64)

    @field_validator('phone', 'email', 'timezone', mode='before')
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class HotelCreate(HotelBase):
    name: str = Field(..., min_length=1, max_length=100)


class HotelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=20)
    hotel_type: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    amenities: Optional[List[str]] = None
    check_in_time: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    check_out_time: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    star_rating: Optional[int] = Field(None, ge=1, le=5)
    website: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    timezone: Optional[str] = Field(None, max_length=64)

    @field_validator('phone', 'email', mode='before')
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class HotelResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    address: Optional[str]
    phone: Optional[str]
    city: Optional[str]
    state: Optional[str]
    country: Optional[str]
    pincode: Optional[str]
    hotel_type: Optional[str]
    description: Optional[str]
    amenities: Optional[List[str]]
    check_in_time: Optional[str]
    check_out_time: Optional[str]
    star_rating: Optional[int]
    website: Optional[str]
    email: Optional[str]
    timezone: Optional[str]
    total_rooms: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== 房型 Schemas ==============

class RoomTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: RoomCategory
    type: RoomKind
    amenities: List[str] = []
    price: Decimal = Field(..., ge=0)
    total_rooms: int = Field(..., ge=1)
    room_numbers: Optional[List[RoomLabel]] = None
    description: Optional[str] = None


class RoomTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[RoomCategory] = None
    type: Optional[RoomKind] = None
    amenities: Optional[List[str]] = None
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    available_rooms_delta: Optional[int] = None  # 可用数增减（正数释放，负数占用）


class RoomTypeResponse(BaseModel):
    id: str
    hotel_id: str
    name: str
    category: RoomCategory
    type: RoomKind
    amenities: Optional[List[str]]
    price: Decimal
    total_rooms: int
    available_rooms: int
    room_numbers: Optional[List[str]]
    description: Optional[str]
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RecalculateResponse(BaseModel):
    message: str
    available_rooms: dict


# ============== 房间二维码 Schemas ==============

class RoomQRCreate(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    room_type_id: str


class RoomResponse(BaseModel):
    id: str
    hotel_id: str
    room_number: str
    room_type_id: str
    room_type_name: str
    qr_code: Optional[str]
    qr_code_url: Optional[str]
    is_occupied: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RoomQRCodeResponse(BaseModel):
    room_number: str
    room_type_name: str
    qr_code: str
    qr_code_url: Optional[str]
    model_config = ConfigDict(from_attributes=True)


class RegenerateResponse(BaseModel):
    message: str
    count: int


# ============== 客人 Schemas ==============

class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str
    email: Optional[EmailStr] = None
    room_type_id: str
    room_number: str = Field(..., min_length=1, max_length=20)
    expected_stay_days: Optional[int] = Field(None, ge=1)
    checkin_time: Optional[datetime] = None

    @field_validator('email', mode='before')
    @classmethod
    def blank_email(cls, v):
        return _blank_to_none(v)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    expected_stay_days: Optional[int] = Field(None, ge=1)
    checkin_time: Optional[datetime] = None
    checkout_time: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator('email', mode='before')
    @classmethod
    def blank_email(cls, v):
        return _blank_to_none(v)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)


class CustomerResponse(BaseModel):
    id: str
    hotel_id: str
    name: str
    email: Optional[str]
    phone: str
    room_number: str
    room_type_id: str
    room_type_name: str
    room_price: Decimal
    checkin_time: datetime
    checkout_time: Optional[datetime]
    expected_stay_days: Optional[int]
    is_active: bool
    qr_code: Optional[str]
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== 服务请求 Schemas ==============

class ServiceRequestCreate(BaseModel):
    hotel_id: str
    room_number: str = Field(..., min_length=1, max_length=20)
    type: ServiceRequestType
    description: str = Field(..., min_length=1)
    customer_id: Optional[str] = None
    guest_name: Optional[str] = Field(None, max_length=100)
    priority: ServiceRequestPriority = ServiceRequestPriority.NORMAL
    notes: Optional[str] = None


class ServiceRequestAssign(BaseModel):
    assigned_to: str = Field(..., min_length=1, max_length=100)
    time_frame: str = Field(..., min_length=1, max_length=100)


class ServiceRequestComplete(BaseModel):
    completed_by: Optional[str] = Field(None, max_length=100)


class ServiceRequestUpdate(BaseModel):
    status: Optional[ServiceRequestStatus] = None
    priority: Optional[ServiceRequestPriority] = None
    description: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None
    guest_name: Optional[str] = Field(None, max_length=100)
    assigned_to: Optional[str] = Field(None, min_length=1, max_length=100)
    time_frame: Optional[str] = Field(None, min_length=1, max_length=100)
    completed_by: Optional[str] = Field(None, max_length=100)


class ServiceRequestResponse(BaseModel):
    id: str
    hotel_id: str
    customer_id: Optional[str]
    guest_name: Optional[str]
    room_number: str
    type: ServiceRequestType
    description: str
    notes: Optional[str]
    status: ServiceRequestStatus
    priority: ServiceRequestPriority
    assigned_to: Optional[str]
    assigned_by: Optional[str]
    completed_by: Optional[str]
    requested_at: datetime
    assigned_at: Optional[datetime]
    completed_at: Optional[datetime]
    model_config = ConfigDict(from_attributes=True)


# ============== 员工指派 Schemas ==============

class StaffAssignmentCreate(BaseModel):
    service_request_id: str
    assigned_to: str = Field(..., min_length=1, max_length=100)
    time_frame: str = Field(..., min_length=1, max_length=100)
    request_type: Optional[str] = Field(None, max_length=50)


class StaffAssignmentUpdate(BaseModel):
    assigned_to: Optional[str] = Field(None, min_length=1, max_length=100)
    time_frame: Optional[str] = Field(None, min_length=1, max_length=100)
    service: Optional[bool] = None


class StaffAssignmentResponse(BaseModel):
    id: str
    hotel_id: str
    service_request_id: str
    request_type: str
    assigned_to: str
    time_frame: str
    service: bool
    assigned_at: datetime
    completed_at: Optional[datetime]
    model_config = ConfigDict(from_attributes=True)
