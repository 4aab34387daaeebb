# ./app/db/models/__init__.py

from .base import Base, UUIDMixin, TimestampMixin
from .scenario import Scenario

__all__ = ["Base", "UUIDMixin", "TimestampMixin", "Scenario"]
