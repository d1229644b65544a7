"""
业务异常到 HTTP 状态码的映射
"""
from fastapi import HTTPException, status

from hotelops.services.errors import (
    HotelOpsError, RoomUnavailableError, InvalidTransitionError,
    NotFoundError, InvalidIdentifierError, StorageError
)

# 子类在前
_STATUS_MAP = (
    (RoomUnavailableError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidIdentifierError, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def http_error(e: HotelOpsError) -> HTTPException:
    """把业务异常转换为 HTTPException"""
    for error_type, status_code in _STATUS_MAP:
        if isinstance(e, error_type):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
