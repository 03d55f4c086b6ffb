"""
OPC UA adapter type definitions and converters.

This package provides:
- Data models for discovered points, schemas and options
- OPC UA to runtime type mapping
- Engineering unit mapping
"""

from .type_converter import TypeConverter, RuntimeType
from .models import Point, EventProperty, GuessSchema, Option, derive_label

__all__ = [
    'TypeConverter',
    'RuntimeType',
    'Point',
    'EventProperty',
    'GuessSchema',
    'Option',
    'derive_label',
]
