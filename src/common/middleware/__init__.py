"""Common middleware for boxoffice."""

from .observability import StructlogContextMiddleware, bind_actor

__all__ = ["StructlogContextMiddleware", "bind_actor"]
