"""
业务异常定义
所有异常继承自 ValueError，调用方仍可按 ValueError 统一捕获
"""
import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class HotelOpsError(ValueError):
    """业务异常基类"""


class ValidationError(HotelOpsError):
    """输入不合法或缺少必填项"""


class RoomUnavailableError(ValidationError):
    """房型已满或房间号已被在住客人占用"""


class InvalidTransitionError(ValidationError):
    """服务请求状态转换不合法"""


class NotFoundError(HotelOpsError):
    """引用的实体不存在"""


class InvalidIdentifierError(HotelOpsError):
    """标识符格式不合法（未访问存储）"""


class StorageError(HotelOpsError):
    """持久化层故障"""


def commit_or_raise(db: Session, action: str, conflict_error: Optional[HotelOpsError] = None) -> None:
    """
    提交事务；失败时回滚并抛出 StorageError

    指定 conflict_error 时，唯一约束冲突改为抛出该业务异常
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if conflict_error is not None:
            logger.warning(f"Constraint conflict during {action}: {e.orig}")
            raise conflict_error from e
        logger.error(f"Storage failure during {action}: {e}", exc_info=True)
        raise StorageError(f"{action}失败：存储层错误") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during {action}: {e}", exc_info=True)
        raise StorageError(f"{action}失败：存储层错误") from e
