"""
Esquemas de entrada y salida de la API.

Los cuerpos de petición dejan todos los campos como Optional: la presencia
se comprueba en los routers, así un campo que falta se responde con un 400
y un mensaje legible en vez del 422 del framework.
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class DeletionMode(str, Enum):
    SOFT = "soft"   # is_active = False, reversible
    HARD = "hard"   # DELETE, irreversible


class Claim(BaseModel):
    """Identidad decodificada del token; vive solo durante la petición."""
    user_id: str
    email: str
    role: Role


# ----------------------- Users -----------------------
class RegisterBody(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: Optional[str] = None

    @field_validator("email")
    @classmethod
    def email_syntax(cls, v):
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        # solo sintaxis; se guarda tal cual lo escribió el usuario
        try:
            validate_email(v, check_deliverability=False, globally_deliverable=False, test_environment=True)
        except EmailNotValidError as exc:
            raise ValueError(str(exc))
        return v


class LoginBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateBody(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None


class UserAdminUpdateBody(BaseModel):
    role: Optional[str] = None
    is_active: Optional[bool] = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    first_name: str
    last_name: str
    email: str
    role: str


class UserOut(UserSummary):
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ----------------------- Products -----------------------
class ProductCreateBody(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, allow_inf_nan=False)
    stock_quantity: Optional[int] = None
    category_id: Optional[int] = Field(None, gt=0)
    sku: Optional[str] = None
    image_url: Optional[str] = None


class ProductUpdateBody(ProductCreateBody):
    is_active: Optional[bool] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    name: str
    description: Optional[str] = None
    price: float
    stock_quantity: int
    category_id: Optional[int] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
