"""Shopping domain API package."""

from shopping.api.routes import router

__all__ = ["router"]
