"""
实体对象定义
酒店是租户边界：除 HotelAdmin 外，所有实体都属于且仅属于一个酒店
"""
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text, Enum as SQLEnum,
    Boolean, Numeric, JSON, Index, UniqueConstraint, text
)
from sqlalchemy.orm import relationship
from hotelops.database import Base, utcnow
from hotelops.services.identifiers import new_identifier


# ============== 枚举定义 ==============

class RoomCategory(str, Enum):
    """房型大类"""
    STANDARD = "standard"
    DELUXE = "deluxe"
    SUITE = "suite"
    STUDIO = "studio"


class RoomKind(str, Enum):
    """房型床型/规格"""
    SINGLE = "single"
    DOUBLE = "double"
    TWIN = "twin"
    TRIPLE = "triple"
    JUNIOR_SUITE = "junior_suite"
    EXECUTIVE_SUITE = "executive_suite"
    PRESIDENTIAL_SUITE = "presidential_suite"


class ServiceRequestType(str, Enum):
    """服务请求类别"""
    MAINTENANCE = "maintenance"
    ROOM_SERVICE = "room_service"
    FOOD_DELIVERY = "food_delivery"
    HOUSEKEEPING = "housekeeping"
    CONCIERGE = "concierge"
    OTHER = "other"


class ServiceRequestStatus(str, Enum):
    """服务请求状态"""
    PENDING = "pending"          # 待处理
    ASSIGNED = "assigned"        # 已分配
    IN_PROGRESS = "in_progress"  # 进行中
    COMPLETED = "completed"      # 已完成
    CANCELLED = "cancelled"      # 已取消


class ServiceRequestPriority(str, Enum):
    """服务请求优先级"""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


# ============== 实体对象 ==============

class HotelAdmin(Base):
    """
    酒店管理员账号
    登录主体，拥有一个酒店
    """
    __tablename__ = "hotel_admins"

    id = Column(String(24), primary_key=True, default=new_identifier)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    hotel_name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    phone = Column(String(20))
    address = Column(Text)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    hotel = relationship("Hotel", back_populates="owner", uselist=False)


class Hotel(Base):
    """
    酒店对象 - 租户边界
    total_rooms 应等于各房型 total_rooms 之和（报表依赖，不强制）
    """
    __tablename__ = "hotels"

    id = Column(String(24), primary_key=True, default=new_identifier)
    owner_id = Column(String(24), ForeignKey("hotel_admins.id"), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    address = Column(Text)
    phone = Column(String(20))
    city = Column(String(100))
    state = Column(String(100))
    country = Column(String(100))
    pincode = Column(String(20))
    hotel_type = Column(String(50))
    description = Column(Text)
    amenities = Column(JSON, default=list)
    check_in_time = Column(String(5), default="14:00")
    check_out_time = Column(String(5), default="11:00")
    star_rating = Column(Integer)
    website = Column(String(255))
    email = Column(String(100))
    timezone = Column(String(64))                       # IANA 时区名，空则使用默认配置
    total_rooms = Column(Integer, default=0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    owner = relationship("HotelAdmin", back_populates="hotel")
    room_types = relationship("RoomType", back_populates="hotel", cascade="all, delete-orphan")


class RoomType(Base):
    """
    房型对象
    available_rooms 是派生计数器，由 InventoryLedger 维护
    room_numbers 是该房型房间号的权威列表（Room 记录可能尚未创建）
    """
    __tablename__ = "room_types"

    id = Column(String(24), primary_key=True, default=new_identifier)
    hotel_id = Column(String(24), ForeignKey("hotels.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    category = Column(SQLEnum(RoomCategory), nullable=False)
    type = Column(SQLEnum(RoomKind), nullable=False)
    amenities = Column(JSON, default=list)
    price = Column(Numeric(10, 2), nullable=False)
    total_rooms = Column(Integer, nullable=False)
    available_rooms = Column(Integer, nullable=False)
    room_numbers = Column(JSON, default=list)
    description = Column(Text)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    hotel = relationship("Hotel", back_populates="room_types")


class Room(Base):
    """
    房间对象 - 生成二维码时才创建
    同一酒店内房间号唯一
    """
    __tablename__ = "rooms"

    id = Column(String(24), primary_key=True, default=new_identifier)
    hotel_id = Column(String(24), ForeignKey("hotels.id"), nullable=False, index=True)
    room_number = Column(String(20), nullable=False)
    room_type_id = Column(String(24), ForeignKey("room_types.id"), nullable=False)
    room_type_name = Column(String(100), nullable=False)
    qr_code = Column(Text)                              # PNG data URL
    qr_code_url = Column(String(500))                   # 二维码编码的原始 URL
    is_occupied = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("hotel_id", "room_number", name="uq_rooms_hotel_room_number"),
    )


class Customer(Base):
    """
    客人住宿记录
    room_type_name / room_price 为入住时快照，房型修改后历史记录不变
    同一酒店同一房间号最多一条在住记录（部分唯一索引保证）
    """
    __tablename__ = "customers"

    id = Column(String(24), primary_key=True, default=new_identifier)
    hotel_id = Column(String(24), ForeignKey("hotels.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100))
    phone = Column(String(20), nullable=False)
    room_number = Column(String(20), nullable=False)
    room_type_id = Column(String(24), nullable=False, index=True)  # 房型删除后历史记录仍保留快照
    room_type_name = Column(String(100), nullable=False)
    room_price = Column(Numeric(10, 2), nullable=False)
    checkin_time = Column(DateTime, nullable=False)
    checkout_time = Column(DateTime)
    expected_stay_days = Column(Integer)
    is_active = Column(Boolean, default=True, nullable=False)
    qr_code = Column(Text)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index(
            "uq_customers_active_room", "hotel_id", "room_number",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active = true"),
        ),
    )


class ServiceRequest(Base):
    """
    客房服务请求
    状态机：pending → assigned → in_progress → completed，非终态可取消
    """
    __tablename__ = "service_requests"

    id = Column(String(24), primary_key=True, default=new_identifier)
    hotel_id = Column(String(24), ForeignKey("hotels.id"), nullable=False, index=True)
    customer_id = Column(String(24), ForeignKey("customers.id"), nullable=True)
    guest_name = Column(String(100))
    room_number = Column(String(20), nullable=False)
    type = Column(SQLEnum(ServiceRequestType), nullable=False)
    description = Column(Text, nullable=False)
    notes = Column(Text)
    status = Column(SQLEnum(ServiceRequestStatus), default=ServiceRequestStatus.PENDING, nullable=False)
    priority = Column(SQLEnum(ServiceRequestPriority), default=ServiceRequestPriority.NORMAL, nullable=False)
    assigned_to = Column(String(100))
    assigned_by = Column(String(100))
    completed_by = Column(String(100))
    requested_at = Column(DateTime, default=utcnow)
    assigned_at = Column(DateTime)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    staff_assignments = relationship(
        "StaffAssignment", back_populates="service_request",
        order_by="StaffAssignment.assigned_at.desc()"
    )


class StaffAssignment(Base):
    """
    员工指派记录
    每次分配新建一条；service=True 表示处理中，False 表示已完成
    当前指派 = assigned_at 最新的一条
    """
    __tablename__ = "staff_assignments"

    id = Column(String(24), primary_key=True, default=new_identifier)
    hotel_id = Column(String(24), ForeignKey("hotels.id"), nullable=False, index=True)
    service_request_id = Column(String(24), ForeignKey("service_requests.id"), nullable=False, index=True)
    request_type = Column(String(50), nullable=False)
    assigned_to = Column(String(100), nullable=False)
    time_frame = Column(String(100), nullable=False)
    service = Column(Boolean, default=True, nullable=False)
    assigned_at = Column(DateTime, default=utcnow)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    service_request = relationship("ServiceRequest", back_populates="staff_assignments")
