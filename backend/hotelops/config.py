"""
应用配置
从环境变量读取配置，支持 .env 文件
"""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "HotelOps"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./hotelops.db"

    # Token 配置
    SECRET_KEY: str = "hotelops-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 客房服务二维码指向的前台应用地址
    SERVICE_APP_URL: str = "https://your-service-app.example.com"

    # 酒店未设置时区时使用
    DEFAULT_TIMEZONE: str = "UTC"

    # 默认房型每种房间数
    DEFAULT_ROOMS_PER_TYPE: int = 5

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# 全局设置实例
settings = Settings()
