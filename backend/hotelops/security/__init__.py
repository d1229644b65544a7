# Security module
from hotelops.security.auth import (
    get_password_hash, verify_password, create_access_token,
    get_current_admin, get_current_hotel
)

__all__ = [
    'get_password_hash', 'verify_password', 'create_access_token',
    'get_current_admin', 'get_current_hotel'
]
