from .sqlite_db import init_db, get_conn
from .models import Role, Gender, User, OTPRecord
from .token_utils import SessionSigner, TokenInvalid, generate_otp, hash_password, verify_password

__all__ = [
    "init_db",
    "get_conn",
    "Role",
    "Gender",
    "User",
    "OTPRecord",
    "SessionSigner",
    "TokenInvalid",
    "generate_otp",
    "hash_password",
    "verify_password",
]
