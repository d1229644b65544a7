"""
Pytest 配置和共享 fixtures
"""
import os

# 应用模块导入前切换到内存数据库，避免测试生成本地数据库文件
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from hotelops.database import Base, get_db
from hotelops.models import ontology  # noqa
from hotelops.models.ontology import HotelAdmin, RoomType
from hotelops.models.schemas import HotelCreate
from hotelops.security.auth import get_password_hash, create_access_token
from hotelops.services.hotel_service import HotelService
from hotelops.main import app


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== 账号与酒店 Fixtures ==============

def make_admin(db, username="admin1", email="admin1@hotelmail.com"):
    admin = HotelAdmin(
        username=username,
        password_hash=get_password_hash("123456"),
        hotel_name="Sunrise Inn",
        email=email,
        is_active=True
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def admin(db_session):
    """酒店管理员"""
    return make_admin(db_session)


@pytest.fixture
def hotel(db_session, admin):
    """已完成设置的酒店（含四种默认房型）"""
    return HotelService(db_session).create_hotel(admin, HotelCreate(name="Sunrise Inn"))


@pytest.fixture
def auth_headers(admin, hotel):
    """返回带认证的请求头"""
    return {"Authorization": f"Bearer {create_access_token(admin.id)}"}


@pytest.fixture
def other_hotel(db_session):
    """另一个租户的酒店"""
    other = make_admin(db_session, username="admin2", email="admin2@hotelmail.com")
    return HotelService(db_session).create_hotel(other, HotelCreate(name="Harbor Hotel"))


@pytest.fixture
def other_auth_headers(other_hotel):
    return {"Authorization": f"Bearer {create_access_token(other_hotel.owner_id)}"}


def room_type_named(db, hotel_id, name):
    return db.query(RoomType).filter(
        RoomType.hotel_id == hotel_id,
        RoomType.name == name
    ).one()


@pytest.fixture
def standard_type(db_session, hotel):
    """默认房型 Standard Room（房间 1-5）"""
    return room_type_named(db_session, hotel.id, "Standard Room")


@pytest.fixture
def deluxe_type(db_session, hotel):
    """默认房型 Deluxe Room（房间 6-10）"""
    return room_type_named(db_session, hotel.id, "Deluxe Room")
