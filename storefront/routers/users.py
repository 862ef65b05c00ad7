# storefront/routers/users.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.errors import Conflict, InvalidCredentials, NotFound, ValidationError
from storefront.models import ROLES, User
from storefront.responses import success_response
from storefront.schemas import (
    Claim,
    LoginBody,
    ProfileUpdateBody,
    RegisterBody,
    Role,
    UserAdminUpdateBody,
    UserOut,
    UserSummary,
)
from storefront.security import (
    authenticate_user,
    create_access_token,
    hash_password,
    require_admin,
    require_user,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

EMAIL_TAKEN = "User already exists with this email"


def _email_taken(db: Session, email: str) -> bool:
    return db.scalars(select(User.user_id).where(User.email == email)).first() is not None


def _auth_payload(user: User) -> dict:
    token = create_access_token(user.user_id, user.email, user.role)
    return {"user": UserSummary.model_validate(user), "token": token}


# -----------------------------
#   REGISTRO
# -----------------------------
@router.post("/register", status_code=201)
def register(body: RegisterBody, db: Session = Depends(get_db)):
    if not (body.first_name and body.last_name and body.email and body.password):
        raise ValidationError("All required fields must be provided")

    # check-then-act; la restricción UNIQUE de users.email cubre la carrera
    if _email_taken(db, body.email):
        raise Conflict(EMAIL_TAKEN)

    role = Role.ADMIN.value if body.role == Role.ADMIN.value else Role.USER.value
    if role == Role.ADMIN.value:
        log.warning("Auto-registro con rol admin solicitado para %s", body.email)

    user = User(
        first_name=body.first_name.strip(),
        last_name=body.last_name.strip(),
        email=body.email,
        password_hash=hash_password(body.password),
        phone=body.phone or None,
        date_of_birth=body.date_of_birth,
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        log.info("Email duplicado detectado por la restricción UNIQUE: %s", body.email)
        raise Conflict(EMAIL_TAKEN)

    log.info("Usuario registrado %s (%s)", user.user_id, user.role)
    return success_response("User registered successfully", _auth_payload(user), status_code=201)


# -----------------------------
#   LOGIN
# -----------------------------
@router.post("/login")
def login(body: LoginBody, db: Session = Depends(get_db)):
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")

    user = authenticate_user(db, body.email.strip(), body.password)
    if not user:
        raise InvalidCredentials()

    return success_response("Login successful", _auth_payload(user))


# -----------------------------
#   PERFIL PROPIO
# -----------------------------
@router.get("/profile")
def get_profile(claim: Claim = Depends(require_user), db: Session = Depends(get_db)):
    user = db.get(User, claim.user_id)
    if not user:
        raise NotFound("User not found")
    return success_response("Profile retrieved successfully", UserOut.model_validate(user))


@router.put("/profile")
def update_profile(
    body: ProfileUpdateBody,
    claim: Claim = Depends(require_user),
    db: Session = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields provided for update")
    for key in ("first_name", "last_name"):
        if key in changes:
            if not changes[key] or not changes[key].strip():
                raise ValidationError(f"{key} cannot be empty")
            changes[key] = changes[key].strip()

    user = db.get(User, claim.user_id)
    if not user:
        raise NotFound("User not found")

    for key, value in changes.items():
        setattr(user, key, value)
    db.commit()
    return success_response("Profile updated successfully", UserOut.model_validate(user))


# ==================== ADMIN ====================

@router.get("")
def get_all_users(claim: Claim = Depends(require_admin), db: Session = Depends(get_db)):
    users = db.scalars(select(User).order_by(User.created_at.desc())).all()
    return success_response(
        "Users retrieved successfully",
        [UserOut.model_validate(u) for u in users],
    )


@router.put("/{user_id}")
def update_user(
    user_id: str,
    body: UserAdminUpdateBody,
    claim: Claim = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if body.role not in ROLES:
        raise ValidationError("Invalid role. Must be 'user' or 'admin'")

    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    user.role = body.role
    if body.is_active is not None:
        user.is_active = body.is_active
    db.commit()

    # los tokens ya emitidos siguen valiendo hasta expirar
    log.info("Admin %s actualizó usuario %s: role=%s is_active=%s", claim.user_id, user_id, user.role, user.is_active)
    return success_response("User updated successfully", UserOut.model_validate(user))
