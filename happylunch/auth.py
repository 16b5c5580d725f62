import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .responses import forbidden, unauthorized

logger = logging.getLogger(__name__)

HASH_ITERATIONS = 100000

# auto_error is off so a missing header reaches our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Identity:
    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    salt = hashed_password[:32]  # First 32 chars are the salt
    stored_hash = hashed_password[32:]
    new_hash = hashlib.pbkdf2_hmac(
        'sha256',
        plain_password.encode('utf-8'),
        salt.encode('utf-8'),
        HASH_ITERATIONS
    ).hex()
    return hmac.compare_digest(new_hash, stored_hash)


def get_password_hash(password: str) -> str:
    """Generate a salted hash for a password"""
    salt = secrets.token_hex(16)
    password_hash = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        HASH_ITERATIONS
    ).hex()
    return salt + password_hash


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying the account's id, email and role"""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.access_token_expire_days)
    claims = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": datetime.utcnow() + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Identity:
    """Verify signature and expiry and return the identity in the claims"""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        raise ValueError(f"Invalid token: {e}")

    try:
        return Identity(id=int(payload["id"]), email=payload["email"], role=payload["role"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid token claims: {e}")


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None:
        raise unauthorized("No token provided, authorization denied")
    try:
        return decode_token(credentials.credentials)
    except ValueError as e:
        logger.info("Rejected bearer token: %s", e)
        raise unauthorized("Token is not valid")


async def get_admin_identity(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise forbidden("Access denied. Admin privileges required.")
    return identity


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials)
    except ValueError:
        # Continue anonymously
        return None
