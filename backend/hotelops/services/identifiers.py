"""
实体标识符
24 位小写十六进制：4 字节 Unix 秒（大端）+ 8 字节随机数
"""
import os
import re
import time

from hotelops.services.errors import InvalidIdentifierError

_IDENTIFIER_RE = re.compile(r"^[0-9a-f]{24}$")


def new_identifier() -> str:
    """生成新的实体标识符"""
    return int(time.time()).to_bytes(4, "big").hex() + os.urandom(8).hex()


def is_valid_identifier(value) -> bool:
    """检查标识符格式（大小写不敏感）"""
    return isinstance(value, str) and bool(_IDENTIFIER_RE.match(value.lower()))


def ensure_identifier(value, entity: str = "记录") -> str:
    """校验标识符格式，不合法时在访问存储前抛出 InvalidIdentifierError"""
    if not is_valid_identifier(value):
        raise InvalidIdentifierError(f"{entity} ID 格式无效: {value!r}")
    return value.lower()
