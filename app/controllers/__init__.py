"""FastAPI routers acting as controllers in the MVC architecture."""

from . import upload

__all__ = ["upload"]
