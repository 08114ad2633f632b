"""
Declarative column descriptors for query-backed datatables.

Main Components:
- Column: fluent builder for one column definition
- ColumnDescriptor: the attribute map read by the query compiler, renderer and export engine
- RenderContext: per-render-pass state (pagination, row counter, named callbacks)
- DatatableSettings: injected configuration
"""

from .columns import (
    Column,
    ColumnDescriptor,
    ColumnDefinitionError,
    ColumnType,
    AggregateFunction,
    Align,
    Tooltip,
)
from .core.config import DatatableSettings, get_settings
from .rendering.context import RenderContext

__all__ = [
    "Column",
    "ColumnDescriptor",
    "ColumnDefinitionError",
    "ColumnType",
    "AggregateFunction",
    "Align",
    "Tooltip",
    "DatatableSettings",
    "get_settings",
    "RenderContext",
]
