# storefront/models/__init__.py

# 👤 Usuarios
from .user import User, ROLES

# 🛒 Catálogo
from .product import Category, Product

# 📦 Pedidos, carrito, reseñas (solo tablas por ahora)
from .orders import (
    Address,
    Order,
    OrderItem,
    ShoppingCartItem,
    ProductReview,
)


__all__ = [
    # Usuarios
    "User",
    "ROLES",

    # Catálogo
    "Category",
    "Product",

    # Pedidos y demás
    "Address",
    "Order",
    "OrderItem",
    "ShoppingCartItem",
    "ProductReview",
]
