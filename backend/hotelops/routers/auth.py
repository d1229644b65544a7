"""
认证路由
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelops.database import get_db
from hotelops.models.ontology import HotelAdmin
from hotelops.models.schemas import RegisterRequest, LoginRequest, LoginResponse, HotelAdminResponse
from hotelops.services.errors import HotelOpsError
from hotelops.services.hotel_admin_service import HotelAdminService
from hotelops.security.auth import get_current_admin
from hotelops.routers.errors import http_error

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/register", response_model=HotelAdminResponse)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """注册酒店管理员"""
    try:
        return HotelAdminService(db).register(data)
    except HotelOpsError as e:
        raise http_error(e)


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """登录"""
    service = HotelAdminService(db)
    try:
        result = service.authenticate(data.username, data.password)
    except HotelOpsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="用户名或密码错误"
        )
    return LoginResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        admin=HotelAdminResponse.model_validate(result["admin"])
    )


@router.get("/me", response_model=HotelAdminResponse)
def get_current_admin_info(current_admin: HotelAdmin = Depends(get_current_admin)):
    """获取当前管理员信息"""
    return current_admin
