"""
数据库配置 - 持久化层
所有业务操作通过服务层进行，数据库仅负责存储
"""
from datetime import datetime, UTC
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from hotelops.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

_is_sqlite = SQLALCHEMY_DATABASE_URL.startswith("sqlite")

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def utcnow() -> datetime:
    """当前 UTC 时间（无时区信息，与 SQLite 存储保持一致）"""
    return datetime.now(UTC).replace(tzinfo=None)


def get_db():
    """依赖注入：获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """初始化数据库表"""
    from hotelops.models import ontology  # noqa
    Base.metadata.create_all(bind=engine)

    # 文件型 SQLite 启用 WAL 模式以提高并发性能
    if _is_sqlite and ":memory:" not in SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL != "sqlite://":
        with engine.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.execute(text("PRAGMA synchronous=NORMAL"))
            conn.commit()
