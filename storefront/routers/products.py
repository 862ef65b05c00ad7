# storefront/routers/products.py
import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.errors import Conflict, NotFound, ValidationError
from storefront.models import Category, Product
from storefront.responses import success_response
from storefront.schemas import (
    Claim,
    DeletionMode,
    ProductCreateBody,
    ProductOut,
    ProductUpdateBody,
)
from storefront.security import require_admin

log = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

SKU_TAKEN = "SKU already exists"

_ID_RE = re.compile(r"[0-9]+")

# columnas NOT NULL que un PUT no puede vaciar
_NON_NULLABLE = ("name", "price", "stock_quantity", "is_active")


def parse_id(raw: str, label: str) -> int:
    if not _ID_RE.fullmatch(raw or "") or int(raw) <= 0:
        raise ValidationError(f"Invalid {label} ID")
    return int(raw)


def _active_products():
    return (
        select(Product)
        .where(Product.is_active.is_(True))
        .order_by(Product.created_at.desc(), Product.product_id.desc())
    )


def _check_non_negative(price, stock_quantity) -> None:
    if (price is not None and price < 0) or (stock_quantity is not None and stock_quantity < 0):
        raise ValidationError("Price and stock quantity must be non-negative")


def _check_category(db: Session, category_id) -> None:
    if category_id is not None and db.get(Category, category_id) is None:
        raise ValidationError("Category does not exist")


def _check_sku(db: Session, sku: str, exclude_id: int = None) -> None:
    query = select(Product.product_id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.product_id != exclude_id)
    if db.scalars(query).first() is not None:
        raise Conflict(SKU_TAKEN)


def _commit(db: Session, conflict_message: Optional[str]) -> None:
    # sin mensaje, el IntegrityError sigue hasta el handler de SQLAlchemyError
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        log.info("Error de integridad en products: %s", exc.orig)
        if conflict_message is None:
            raise
        raise Conflict(conflict_message)


# ================== Lectura pública ==================

@router.get("")
def get_all_products(db: Session = Depends(get_db)):
    products = db.scalars(_active_products()).all()
    return success_response(
        "Products retrieved successfully",
        [ProductOut.model_validate(p) for p in products],
    )


@router.get("/category/{category_id}")
def get_products_by_category(category_id: str, db: Session = Depends(get_db)):
    cid = parse_id(category_id, "category")
    products = db.scalars(_active_products().where(Product.category_id == cid)).all()
    return success_response(
        "Products retrieved successfully",
        [ProductOut.model_validate(p) for p in products],
    )


@router.get("/{product_id}")
def get_product_by_id(product_id: str, db: Session = Depends(get_db)):
    pid = parse_id(product_id, "product")
    product = db.scalars(_active_products().where(Product.product_id == pid)).first()
    if not product:
        raise NotFound("Product not found")
    return success_response("Product retrieved successfully", ProductOut.model_validate(product))


# ================== Administración ==================

@router.post("", status_code=201)
def create_product(
    body: ProductCreateBody,
    claim: Claim = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not body.name or body.price is None or body.stock_quantity is None:
        raise ValidationError("Name, price, and stock quantity are required")
    _check_non_negative(body.price, body.stock_quantity)
    _check_category(db, body.category_id)
    if body.sku:
        _check_sku(db, body.sku)

    product = Product(
        name=body.name.strip(),
        description=body.description,
        price=body.price,
        stock_quantity=body.stock_quantity,
        category_id=body.category_id,
        sku=body.sku or None,
        image_url=body.image_url,
        is_active=True,
    )
    db.add(product)
    _commit(db, SKU_TAKEN if product.sku else None)

    log.info("Admin %s creó el producto %s", claim.user_id, product.product_id)
    return success_response(
        "Product created successfully",
        ProductOut.model_validate(product),
        status_code=201,
    )


@router.put("/{product_id}")
def update_product(
    product_id: str,
    body: ProductUpdateBody,
    claim: Claim = Depends(require_admin),
    db: Session = Depends(get_db),
):
    pid = parse_id(product_id, "product")
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields provided for update")
    for key in _NON_NULLABLE:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")
    if "name" in changes:
        if not changes["name"].strip():
            raise ValidationError("name cannot be null")
        changes["name"] = changes["name"].strip()
    _check_non_negative(changes.get("price"), changes.get("stock_quantity"))

    # update alcanza también productos inactivos
    product = db.get(Product, pid)
    if not product:
        raise NotFound("Product not found")

    _check_category(db, changes.get("category_id"))
    if "sku" in changes:
        if changes["sku"]:
            _check_sku(db, changes["sku"], exclude_id=pid)
        else:
            changes["sku"] = None

    for key, value in changes.items():
        setattr(product, key, value)
    _commit(db, SKU_TAKEN if changes.get("sku") else None)

    log.info("Admin %s actualizó el producto %s (%s)", claim.user_id, pid, ", ".join(sorted(changes)))
    return success_response("Product updated successfully", ProductOut.model_validate(product))


def remove_product(db: Session, product_id: int, mode: DeletionMode) -> str:
    """
    SOFT cambia ``is_active`` y solo encuentra filas activas: un segundo
    borrado lógico da 404. HARD elimina la fila para siempre, activa o no.
    """
    if mode is DeletionMode.SOFT:
        product = db.scalars(
            select(Product).where(Product.product_id == product_id, Product.is_active.is_(True))
        ).first()
        if not product:
            raise NotFound("Product not found")
        product.is_active = False
        db.commit()
        return "Product deleted successfully"

    product = db.get(Product, product_id)
    if not product:
        raise NotFound("Product not found")
    db.delete(product)
    _commit(db, "Product is referenced by other records and cannot be removed")
    return "Product permanently deleted"


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    claim: Claim = Depends(require_admin),
    db: Session = Depends(get_db),
):
    pid = parse_id(product_id, "product")
    message = remove_product(db, pid, DeletionMode.SOFT)
    log.info("Admin %s desactivó el producto %s", claim.user_id, pid)
    return success_response(message)


@router.delete("/{product_id}/permanent")
def hard_delete_product(
    product_id: str,
    claim: Claim = Depends(require_admin),
    db: Session = Depends(get_db),
):
    pid = parse_id(product_id, "product")
    message = remove_product(db, pid, DeletionMode.HARD)
    log.warning("Admin %s eliminó definitivamente el producto %s", claim.user_id, pid)
    return success_response(message)
