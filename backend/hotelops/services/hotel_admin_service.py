"""
酒店管理员服务
注册与登录认证
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session
from hotelops.models.ontology import HotelAdmin
from hotelops.models.schemas import RegisterRequest
from hotelops.security.auth import get_password_hash, verify_password, create_access_token
from hotelops.services.errors import ValidationError, commit_or_raise

logger = logging.getLogger(__name__)


class HotelAdminService:
    """酒店管理员服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_admin(self, admin_id: str) -> Optional[HotelAdmin]:
        return self.db.query(HotelAdmin).filter(HotelAdmin.id == admin_id).first()

    def get_admin_by_username(self, username: str) -> Optional[HotelAdmin]:
        """根据用户名获取管理员"""
        return self.db.query(HotelAdmin).filter(HotelAdmin.username == username).first()

    def register(self, data: RegisterRequest) -> HotelAdmin:
        """注册管理员账号"""
        if self.get_admin_by_username(data.username):
            raise ValidationError(f"用户名 '{data.username}' 已存在")

        email = str(data.email).lower()
        if self.db.query(HotelAdmin).filter(HotelAdmin.email == email).first():
            raise ValidationError("该邮箱已注册")

        admin = HotelAdmin(
            username=data.username,
            password_hash=get_password_hash(data.password),
            hotel_name=data.hotel_name,
            email=email,
            phone=data.phone,
            address=data.address
        )
        self.db.add(admin)
        commit_or_raise(self.db, "注册")
        self.db.refresh(admin)
        logger.info(f"Registered hotel admin {admin.username} ({admin.id})")
        return admin

    def authenticate(self, username: str, password: str) -> Optional[dict]:
        """认证登录，用户名或密码错误时返回 None"""
        admin = self.get_admin_by_username(username)
        if not admin:
            return None

        if not admin.is_active:
            raise ValidationError("账号已停用")

        if not verify_password(password, admin.password_hash):
            return None

        return {
            'access_token': create_access_token(admin.id),
            'token_type': 'bearer',
            'admin': admin
        }
