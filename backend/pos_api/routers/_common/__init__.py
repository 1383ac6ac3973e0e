"""
Common utilities shared across routers.
"""

from .dependencies import get_permission_context
from .pagination import Pagination, get_pagination

__all__ = [
    "get_permission_context",
    "Pagination",
    "get_pagination",
]
