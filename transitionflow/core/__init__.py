"""
Core models and exceptions for TransitionFlow
"""

from transitionflow.core.models import (
    TransitionFlowError,
    DocumentLoadError,
    ExportError,
    ValidationError,
    BlockType,
    WriteType,
    ReferenceKind,
    Verdict,
)

__all__ = [
    "TransitionFlowError",
    "DocumentLoadError",
    "ExportError",
    "ValidationError",
    "BlockType",
    "WriteType",
    "ReferenceKind",
    "Verdict",
]
