"""Remote control surface."""

from .app import create_app
from .server import ApiServer

__all__ = ["create_app", "ApiServer"]
