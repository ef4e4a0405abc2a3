from .diff_engine import DiffEngine
from .models import ChangeKind, DiffEntry, DiffReport, PropertyChange

__all__ = [
    "DiffEngine",
    "ChangeKind",
    "DiffEntry",
    "DiffReport",
    "PropertyChange",
]
