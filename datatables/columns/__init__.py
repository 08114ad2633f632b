"""
Column definitions for datatables.

Main Components:
- Column: named constructors and fluent mutators
- Schemas: the descriptor attribute map and its tag enums
- Naming: parsing of names, aliases, relation paths and aggregate suffixes
- Dimensions: CSS length validation for widths
- Formatters: date/time and row-number callbacks
"""

from .column import Column
from .schemas import (
    # Descriptor
    ColumnDescriptor,
    Tooltip,
    ColumnDefinitionError,
    # Enums
    ColumnType,
    AggregateFunction,
    Align,
    UNSORTABLE_TYPES,
    infer_aggregate,
)
from .naming import ParsedName, parse_name
from .dimensions import normalize_dimension
from .formatters import TemporalFormatter, RowNumber

__all__ = [
    # Builder
    "Column",
    # Descriptor types
    "ColumnDescriptor",
    "Tooltip",
    "ColumnDefinitionError",
    # Enums
    "ColumnType",
    "AggregateFunction",
    "Align",
    "UNSORTABLE_TYPES",
    # Helpers
    "infer_aggregate",
    "ParsedName",
    "parse_name",
    "normalize_dimension",
    "TemporalFormatter",
    "RowNumber",
]
