"""
Column descriptor schemas and types.

This module defines the attribute map that describes one datatable column,
together with the closed tag sets (column types, aggregate functions,
alignments) that the query compiler, renderer and export engine read.
"""

from typing import Dict, List, Optional, Union, Any, Callable
from dataclasses import dataclass, field, fields
from enum import Enum
from sqlalchemy import func


class ColumnDefinitionError(ValueError):
    """Raised when a column is constructed with a malformed argument."""
    pass


class ColumnType(str, Enum):
    """Built-in column types. User-defined types are plain strings."""

    STRING = "string"
    NUMBER = "number"
    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"
    BOOLEAN = "boolean"
    EDITABLE = "editable"
    CHECKBOX = "checkbox"
    LABEL = "label"


# Types the query compiler cannot ORDER BY
UNSORTABLE_TYPES = frozenset({ColumnType.LABEL.value, ColumnType.CHECKBOX.value})

TEMPORAL_TYPES = frozenset({ColumnType.DATETIME.value, ColumnType.DATE.value, ColumnType.TIME.value})


class AggregateFunction(str, Enum):
    """Aggregates used to collapse grouped rows into one value."""

    GROUP_CONCAT = "group_concat"
    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"

    @classmethod
    def from_tag(cls, tag: Any) -> Optional["AggregateFunction"]:
        """Look up an aggregate by tag, case-insensitively. Unknown tags give None."""
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            return None

    def apply(self, expression):
        """Build the SQLAlchemy aggregate call for a select expression."""
        return getattr(func, self.value)(expression)


class Align(str, Enum):
    """Header and cell alignment."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


def type_tag(column_type: Union[ColumnType, str]) -> str:
    """Normalize a ColumnType or user-defined type to its string tag."""
    return column_type.value if isinstance(column_type, ColumnType) else str(column_type)


def infer_aggregate(column_type: Union[ColumnType, str]) -> AggregateFunction:
    """Default aggregate for a column type: textual columns concatenate, others count."""
    if type_tag(column_type) == ColumnType.STRING.value:
        return AggregateFunction.GROUP_CONCAT
    return AggregateFunction.COUNT


@dataclass(frozen=True)
class Tooltip:
    """Header tooltip."""

    text: str
    label: Optional[str] = None


@dataclass
class ColumnDescriptor:
    """
    Everything the query compiler, renderer and export engine need to know
    about one column.

    Built through ``Column`` and treated as read-only once the table
    definition is complete.
    """

    # Identity
    name: Optional[str] = None
    label: Optional[str] = None
    tooltip: Optional[Tooltip] = None
    group: Optional[str] = None

    # Query binding
    type: str = ColumnType.STRING.value
    select: Any = None
    base: Optional[str] = None
    raw: Optional[str] = None
    joins: Optional[List[str]] = None
    scope: Optional[str] = None
    scope_filter: Optional[str] = None
    additional_selects: List[str] = field(default_factory=list)
    params: List[Any] = field(default_factory=list)

    # Sorting
    sortable: bool = True
    sort: Any = None
    default_sort: Union[bool, str, None] = None

    # Filtering & search
    filterable: Union[bool, List[Any], Dict[Any, Any], None] = None
    filter_on: Any = None
    filter_nullable: Optional[str] = None
    filter_searchable: bool = False
    filter_view: Optional[str] = None
    searchable: Optional[bool] = None
    search_closure: Optional[Callable] = None

    # Presentation
    hideable: Optional[bool] = None
    hidden: Optional[bool] = None
    header_align: str = Align.LEFT.value
    content_align: str = Align.LEFT.value
    width: Optional[str] = None
    min_width: Optional[str] = None
    max_width: Optional[str] = None
    wrappable: bool = True
    summary: bool = False

    # Value transform
    callback: Union[Callable, str, None] = None
    export_callback: Optional[Callable] = None
    prevent_export: Optional[bool] = None

    # Bookkeeping
    index: int = 0
    aggregate: Optional[AggregateFunction] = None
    datetime_format_internal: Optional[str] = None
    date_format_internal: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Flat, declaration-ordered mapping of every attribute."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
