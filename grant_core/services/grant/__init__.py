from .service import GrantService

__all__ = ["GrantService"]
