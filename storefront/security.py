# storefront/security.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Header
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront import config
from storefront.errors import Forbidden, InvalidToken, Unauthenticated
from storefront.models import User
from storefront.schemas import Claim, Role

log = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.BCRYPT_ROUNDS,
)


def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)


def verify_password(raw: str, stored: str) -> bool:
    try:
        return pwd_context.verify(raw, stored)
    except ValueError:
        # hash corrupto o con formato desconocido
        log.warning("No se pudo interpretar el hash de contraseña guardado")
        return False


def create_access_token(user_id: str, email: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Claim:
    """
    Verifica firma y expiración y devuelve la identidad del token.

    Cualquier fallo (firma incorrecta, expirado, mal formado, faltan campos)
    lanza InvalidToken.
    """
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        log.info("Token expirado rechazado")
        raise InvalidToken()
    except jwt.InvalidTokenError:
        raise InvalidToken()

    try:
        return Claim.model_validate(payload)
    except PydanticValidationError:
        raise InvalidToken()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Usuario activo con ese email y contraseña, o None."""
    user = db.scalars(
        select(User).where(User.email == email, User.is_active.is_(True))
    ).first()
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


# ==================== DEPENDENCIAS ====================

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    # "Bearer <token>": lo que va después del primer espacio
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def authenticate(authorization: Optional[str] = Header(None)) -> Claim:
    token = bearer_token(authorization)
    if not token:
        raise Unauthenticated()
    return decode_access_token(token)


def require_user(claim: Optional[Claim] = Depends(authenticate)) -> Claim:
    if claim is None:
        raise Unauthenticated()
    if claim.role not in (Role.USER, Role.ADMIN):
        raise Forbidden("User privileges required")
    return claim


def require_admin(claim: Optional[Claim] = Depends(authenticate)) -> Claim:
    if claim is None:
        raise Unauthenticated()
    if claim.role is not Role.ADMIN:
        raise Forbidden("Admin privileges required")
    return claim
