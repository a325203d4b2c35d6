"""FastAPI routers acting as controllers in the MVC architecture."""

from . import schools

__all__ = ["schools"]
