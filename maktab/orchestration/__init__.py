"""
Orchestration - curriculum progress operations over the kernel stores.
"""

from maktab.orchestration.progress_service import (
    AppliedUpdate,
    OperationResult,
    ProgressService,
)

__all__ = [
    "AppliedUpdate",
    "OperationResult",
    "ProgressService",
]
