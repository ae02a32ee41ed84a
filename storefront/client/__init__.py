from .routes import client_bp

__all__ = ["client_bp"]
