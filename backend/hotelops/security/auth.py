"""
认证模块
只负责给业务层提供已登录的管理员及其酒店，不做细粒度权限控制
"""
import bcrypt
import logging
from datetime import datetime, timedelta, UTC
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from hotelops.config import settings
from hotelops.database import get_db
from hotelops.models.ontology import HotelAdmin, Hotel

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_password_hash(password: str) -> str:
    """密码哈希"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(admin_id: str) -> str:
    """创建 JWT token"""
    expire = datetime.now(UTC) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": admin_id, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """解码 JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="无效的认证凭证"
        )


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> HotelAdmin:
    """获取当前登录的酒店管理员"""
    payload = decode_token(credentials.credentials)

    admin_id = payload.get("sub")
    admin = db.query(HotelAdmin).filter(HotelAdmin.id == admin_id).first() if admin_id else None

    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="用户不存在"
        )

    if not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="账号已停用"
        )

    return admin


async def get_current_hotel(
    current_admin: HotelAdmin = Depends(get_current_admin),
    db: Session = Depends(get_db)
) -> Hotel:
    """获取当前管理员的酒店（租户边界）"""
    hotel = db.query(Hotel).filter(Hotel.owner_id == current_admin.id).first()
    if not hotel:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="请先完成酒店设置"
        )
    return hotel


def scoped_hotel_id(hotel: Hotel, hotel_id: Optional[str]) -> str:
    """请求中显式指定的酒店只能是当前管理员自己的酒店"""
    if hotel_id and hotel_id.lower() != hotel.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="酒店不存在")
    return hotel.id


def admin_for_token(db: Session, token: Optional[str]) -> Optional[HotelAdmin]:
    """WebSocket 等无法走 HTTPBearer 的入口使用：token 无效或账号停用时返回 None"""
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        return None

    admin_id = payload.get("sub")
    if not admin_id:
        return None
    admin = db.query(HotelAdmin).filter(HotelAdmin.id == admin_id).first()
    if not admin or not admin.is_active:
        return None
    return admin
