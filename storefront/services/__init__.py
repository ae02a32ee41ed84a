# storefront/services/__init__.py
from .auth import AdminAuthService
from .catalog import CatalogService
from .images import ImageService
from .orders import OrderService

__all__ = ["AdminAuthService", "CatalogService", "ImageService", "OrderService"]
