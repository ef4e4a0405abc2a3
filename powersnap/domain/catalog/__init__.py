from .catalog import RecordTypeCatalog, parse_definition
from .descriptors import PropertyDescriptor, RecordTypeDescriptor

__all__ = [
    "RecordTypeCatalog",
    "PropertyDescriptor",
    "RecordTypeDescriptor",
    "parse_definition",
]
