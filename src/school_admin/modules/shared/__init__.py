"""
Shared module - Base model, pagination and delete-result schemas,
and generic repository helpers used by every domain module.
"""

from school_admin.modules.shared.models import BaseModel
from school_admin.modules.shared.schemas import (
    BatchError,
    BatchResult,
    DeleteResult,
    Page,
    PaginationMeta,
)

__all__ = [
    "BaseModel",
    "BatchError",
    "BatchResult",
    "DeleteResult",
    "Page",
    "PaginationMeta",
]
