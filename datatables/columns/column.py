"""
Fluent builder for datatable column descriptors.

A column is declared once per table definition through one of the named
constructors and configured by chaining mutators, each of which returns the
same ``Column``:

    Column.name("users.email").label("E-mail").searchable().width(240)
    Column.raw("SUM(total) AS Revenue").round(2).align_right()
    Column.callback(["first_name", "last_name"], join_names).unsortable()
    Column.datetime("created_at").format("%Y-%m-%d").datetime_format_internal("U")

The finished ``descriptor`` is read by the query compiler, renderer and
export engine.
"""

import re
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy import literal_column

from datatables.core.config import DatatableSettings, get_settings
from datatables.rendering.context import RenderContext
from datatables.rendering.views import (
    BOOLEAN_FILTER_VIEW, DELETE_VIEW, LINK_VIEW, TOOLTIP_VIEW,
    render_view, substitute_placeholders, url,
)
from .dimensions import normalize_dimension
from .formatters import RowNumber, TemporalFormatter
from .naming import (
    CALLBACK_PREFIX, RELATION_SEPARATOR, parse_name, split_columns,
    split_raw_expression, synthetic_name,
)
from .schemas import (
    TEMPORAL_TYPES, UNSORTABLE_TYPES, AggregateFunction, Align, ColumnDefinitionError,
    ColumnDescriptor, ColumnType, Tooltip, infer_aggregate, type_tag,
)

logger = logging.getLogger(__name__)

CHECKBOX_ALIAS = "checkbox_attribute"

_DOTTED_REFERENCE = re.compile(r"^\w+(\.\w+)+$")


def export_raw(value: Any) -> Any:
    """Export callback that passes the raw value through."""
    return value


def row_attributes(row: Any) -> Mapping[str, Any]:
    """Attribute mapping of a result row (mapping, SQLAlchemy Row or plain object)."""
    if row is None:
        return {}
    if isinstance(row, Mapping):
        return row
    if hasattr(row, "_mapping"):
        return row._mapping
    if hasattr(row, "__dict__"):
        return {k: v for k, v in vars(row).items() if not k.startswith("_")}
    return {}


def _require_callable(value: Any, what: str, allow_none: bool = True) -> None:
    if value is None and allow_none:
        return
    if not callable(value):
        raise ColumnDefinitionError(f"{what} must be callable, got {type(value).__name__}")


class Column:
    """Builder around a single ``ColumnDescriptor``."""

    def __init__(self, settings: Optional[DatatableSettings] = None):
        self.settings = settings or get_settings()
        self.descriptor = ColumnDescriptor(sortable=self.settings.default_sortable)
        self._source_callback = None

    def __repr__(self) -> str:
        return f"Column(name={self.descriptor.name!r}, type={self.descriptor.type!r})"

    # ===== NAMED CONSTRUCTORS =====

    @classmethod
    def name(cls, name: str, settings: Optional[DatatableSettings] = None) -> "Column":
        """
        Column bound to a field, a relation field (``"users.email"``) or an
        aliased expression (``"total as Order Total"``).

        A trailing ``:sum``-style suffix overrides the inferred aggregate.
        """
        column = cls(settings=settings)
        column._apply_name(name)
        return column

    @classmethod
    def raw(cls, expression: str, settings: Optional[DatatableSettings] = None) -> "Column":
        """Column selecting a verbatim SQL expression, e.g. ``"SUM(total) AS Revenue"``."""
        if not expression or not str(expression).strip():
            raise ColumnDefinitionError("Raw column expression cannot be empty")

        column = cls(settings=settings)
        select, name, label = split_raw_expression(str(expression))
        d = column.descriptor
        d.raw = str(expression)
        d.name = name
        d.label = label
        d.select = literal_column(select)
        d.sort = select
        d.aggregate = infer_aggregate(d.type)
        return column

    @classmethod
    def callback(
        cls,
        columns: Union[str, Sequence[str]],
        callback: Union[Callable, str],
        params: Optional[Sequence[Any]] = None,
        callback_name: Optional[str] = None,
        settings: Optional[DatatableSettings] = None,
    ) -> "Column":
        """
        Column computed from one or more source columns.

        Args:
            columns: Source columns to select, as a list or comma separated string.
            callback: Function receiving the source values followed by ``params``,
                or the name of a callback registered on the render context.
            params: Extra positional arguments for the callback.
            callback_name: Stable identifier for the synthetic ``callback_<id>``
                name. Derived from the other arguments when omitted, so the
                same configuration always yields the same name.
        """
        if isinstance(callback, str):
            if not callback.strip():
                raise ColumnDefinitionError("Callback name cannot be empty")
        else:
            _require_callable(callback, "Column callback", allow_none=False)

        if params is not None and (isinstance(params, (str, bytes)) or not isinstance(params, Sequence)):
            raise ColumnDefinitionError(f"Callback params must be a list, got {type(params).__name__}")

        selects = split_columns(columns)
        if not selects:
            raise ColumnDefinitionError("Callback column needs at least one source column")

        column = cls(settings=settings)
        d = column.descriptor
        d.name = synthetic_name(selects, callback, params, callback_name)
        d.callback = callback
        d.additional_selects = selects
        d.params = list(params or [])
        d.aggregate = infer_aggregate(d.type)
        column._source_callback = callback
        return column

    @classmethod
    def scope(cls, scope: str, alias: str, settings: Optional[DatatableSettings] = None) -> "Column":
        """Column whose value comes from a query scope selecting ``alias``."""
        if not alias:
            raise ColumnDefinitionError("Scope column needs an alias")

        column = cls(settings=settings)
        d = column.descriptor
        d.scope = scope
        d.name = alias
        d.label = alias
        d.aggregate = infer_aggregate(d.type)
        return column.sort_by(f'"{alias}"')

    @classmethod
    def index(cls, attribute: str = "id", settings: Optional[DatatableSettings] = None) -> "Column":
        """Running row number; rendered against a ``RenderContext``."""
        column = cls.name(attribute, settings=settings)
        column.descriptor.label = "#"
        column.descriptor.callback = RowNumber()
        return column

    @classmethod
    def checkbox(cls, attribute: str = "id", settings: Optional[DatatableSettings] = None) -> "Column":
        return (
            cls.name(f"{attribute} as {CHECKBOX_ALIAS}", settings=settings)
            .set_type(ColumnType.CHECKBOX)
            .exclude_from_export()
        )

    @classmethod
    def delete(cls, name: str = "id", settings: Optional[DatatableSettings] = None) -> "Column":
        """Delete button posting the row's ``name`` value; honours the injected template dirs."""
        settings = settings or get_settings()

        def render_delete(value):
            return render_view(DELETE_VIEW, settings, value=value)

        return cls.callback(name, render_delete, settings=settings)

    @classmethod
    def datetime(cls, name: str, settings: Optional[DatatableSettings] = None) -> "Column":
        return cls._temporal(ColumnType.DATETIME, name, settings)

    @classmethod
    def date(cls, name: str, settings: Optional[DatatableSettings] = None) -> "Column":
        return cls._temporal(ColumnType.DATE, name, settings)

    @classmethod
    def time(cls, name: str, settings: Optional[DatatableSettings] = None) -> "Column":
        return cls._temporal(ColumnType.TIME, name, settings)

    @classmethod
    def _temporal(cls, column_type: ColumnType, name: str, settings: Optional[DatatableSettings]) -> "Column":
        column = cls(settings=settings)
        column.descriptor.type = column_type.value
        column._apply_name(name)
        return column.format()

    def _apply_name(self, raw: Any) -> None:
        if raw is None or not str(raw).strip():
            raise ColumnDefinitionError("Column name cannot be empty")

        parsed = parse_name(raw)
        d = self.descriptor
        d.name = parsed.name
        d.label = parsed.label
        d.base = parsed.base
        d.aggregate = parsed.aggregate or infer_aggregate(d.type)

        # Only plain dotted references imply joins, not arbitrary expressions
        reference = parsed.base if parsed.base else parsed.name
        if _DOTTED_REFERENCE.match(reference):
            d.joins = reference.split(RELATION_SEPARATOR)[:-1]

    # ===== IDENTITY =====

    def label(self, label: str) -> "Column":
        self.descriptor.label = label
        return self

    def tooltip(self, text: str, label: Optional[str] = None) -> "Column":
        self.descriptor.tooltip = Tooltip(text=text, label=label)
        return self

    def group(self, group: Optional[str]) -> "Column":
        """Assign a visibility group; ``group(None)`` removes the column from its group."""
        self.descriptor.group = group
        return self

    def set_index(self, index: int) -> "Column":
        self.descriptor.index = index
        return self

    # ===== QUERY BINDING =====

    def set_type(self, column_type: Union[ColumnType, str]) -> "Column":
        self.descriptor.type = type_tag(column_type)
        if self.descriptor.type in UNSORTABLE_TYPES:
            self.descriptor.sortable = False
        return self

    def aggregate(self, aggregate: Union[AggregateFunction, str]) -> "Column":
        function = AggregateFunction.from_tag(aggregate)
        if function is None:
            raise ColumnDefinitionError(f"Unknown aggregate function: {aggregate!r}")
        self.descriptor.aggregate = function
        return self

    def additional_selects(self, selects: Union[str, Sequence[str]]) -> "Column":
        self.descriptor.additional_selects = split_columns(selects)
        return self

    def add_params(self, params: Sequence[Any]) -> "Column":
        self.descriptor.params = list(params)
        return self

    # ===== SORTING =====

    def sort_by(self, column: Any) -> "Column":
        self.descriptor.sort = column
        return self

    def default_sort(self, direction: Union[bool, str] = True) -> "Column":
        self.descriptor.default_sort = direction
        return self

    def sortable(self) -> "Column":
        self.descriptor.sortable = True
        return self

    def unsortable(self) -> "Column":
        self.descriptor.sortable = False
        return self

    # ===== FILTERING & SEARCH =====

    def searchable(self, closure: Optional[Callable] = None) -> "Column":
        _require_callable(closure, "Search closure")
        self.descriptor.searchable = True
        self.descriptor.search_closure = closure
        return self

    def filterable(self, options: Any = None, scope_filter: Optional[str] = None) -> "Column":
        self.descriptor.filterable = options if options is not None else True
        self.descriptor.scope_filter = scope_filter
        return self

    def filter_on(self, query: Any) -> "Column":
        self.descriptor.filter_on = query
        return self

    def filter_nullable(self, option_text: str) -> "Column":
        self.descriptor.filter_nullable = option_text
        return self

    def filter_searchable(self) -> "Column":
        self.descriptor.filter_searchable = True
        return self

    def boolean_filterable(self) -> "Column":
        self.descriptor.filterable = True
        self.descriptor.filter_view = BOOLEAN_FILTER_VIEW
        return self

    def filter_view(self, view: str) -> "Column":
        self.descriptor.filter_view = view
        return self

    # ===== EXPORT =====

    def export_callback(self, export_callback: Optional[Callable]) -> "Column":
        _require_callable(export_callback, "Export callback")
        self.descriptor.export_callback = export_callback
        return self

    def exclude_from_export(self) -> "Column":
        self.descriptor.prevent_export = True
        return self

    # ===== VALUE SHORTCUTS =====

    def link_to(self, model: str, pad: Optional[int] = None) -> "Column":
        """Render the value as a link to ``/<model>/<value>``, optionally zero padded."""
        settings = self.settings

        def render_link(value, row=None):
            slot = str(value).rjust(pad, "0") if pad else value
            return render_view(LINK_VIEW, settings, href=url(f"{model}/{value}", settings), slot=slot)

        self.descriptor.callback = render_link
        self.descriptor.export_callback = export_raw
        return self

    def link(self, href: str, slot: Optional[str] = None) -> "Column":
        """
        Render the value as a link built from templates.

        ``{{caption}}`` is replaced by the cell's raw value and
        ``{{attribute}}`` by that attribute of the current row.
        """
        settings = self.settings

        def render_link(caption, row=None):
            substitutes = {"caption": caption}
            substitutes.update(row_attributes(row))
            text = slot if slot else ("" if caption is None else str(caption))
            return render_view(
                LINK_VIEW,
                settings,
                href=substitute_placeholders(href, substitutes),
                slot=substitute_placeholders(text, substitutes),
            )

        self.descriptor.callback = render_link
        self.descriptor.export_callback = export_raw
        return self

    def truncate(self, length: int = 16) -> "Column":
        settings = self.settings

        def render_truncated(value, row=None):
            return render_view(TOOLTIP_VIEW, settings, slot=value, length=length)

        self.descriptor.callback = render_truncated
        self.descriptor.export_callback = export_raw
        return self

    def round(self, precision: int = 0) -> "Column":
        column_name = self.descriptor.name

        def round_value(value, row=None):
            if not value:
                return None
            if isinstance(value, Decimal):
                return round(value, precision)
            try:
                return round(float(value), precision)
            except (TypeError, ValueError):
                logger.warning(f"Cannot round non-numeric value {value!r} in column '{column_name}'")
                return value

        self.descriptor.callback = round_value
        return self

    def view(self, view: str, data: Optional[Dict[str, Any]] = None) -> "Column":
        """
        Render the cell with a template receiving ``value``, ``row`` and ``data``.

        Keys in ``data`` override ``value`` and ``row``.
        """
        settings = self.settings
        extra = dict(data or {})

        def render_template(value, row=None):
            context = {"value": value, "row": row, **extra}
            return render_view(view, settings, **context)

        self.descriptor.callback = render_template
        self.descriptor.export_callback = export_raw
        return self

    def editable(self, editable: bool = True) -> "Column":
        self.descriptor.export_callback = export_raw
        return self.set_type(ColumnType.EDITABLE) if editable else self

    # ===== TEMPORAL FORMATTING =====

    def format(self, fmt: Optional[str] = None) -> "Column":
        """Install the date/time formatter, replacing any previous one."""
        if self.descriptor.type not in TEMPORAL_TYPES:
            raise ColumnDefinitionError(
                f"format() needs a datetime, date or time column, '{self.descriptor.name}' is '{self.descriptor.type}'"
            )
        self.descriptor.callback = TemporalFormatter(self.descriptor, self.settings, fmt)
        return self

    def datetime_format_internal(self, fmt: str) -> "Column":
        """Storage representation of the value; ``"U"`` means Unix epoch seconds."""
        self.descriptor.datetime_format_internal = fmt
        return self

    def date_format_internal(self, fmt: str) -> "Column":
        self.descriptor.date_format_internal = fmt
        return self

    # ===== PRESENTATION =====

    def hideable(self, hideable: bool = True) -> "Column":
        self.descriptor.hideable = hideable
        return self

    def hide(self) -> "Column":
        self.descriptor.hidden = True
        return self

    def show(self) -> "Column":
        self.descriptor.hidden = False
        return self

    def toggle_hidden(self) -> "Column":
        self.descriptor.hidden = not self.descriptor.hidden
        return self

    def wrap(self) -> "Column":
        self.descriptor.wrappable = True
        return self

    def unwrap(self) -> "Column":
        self.descriptor.wrappable = False
        return self

    def enable_summary(self) -> "Column":
        self.descriptor.summary = True
        return self

    def disable_summary(self) -> "Column":
        self.descriptor.summary = False
        return self

    def align_left(self) -> "Column":
        self.descriptor.header_align = Align.LEFT.value
        self.descriptor.content_align = Align.LEFT.value
        return self

    def align_center(self) -> "Column":
        self.descriptor.header_align = Align.CENTER.value
        self.descriptor.content_align = Align.CENTER.value
        return self

    def align_right(self) -> "Column":
        self.descriptor.header_align = Align.RIGHT.value
        self.descriptor.content_align = Align.RIGHT.value
        return self

    def header_align_left(self) -> "Column":
        self.descriptor.header_align = Align.LEFT.value
        return self

    def header_align_center(self) -> "Column":
        self.descriptor.header_align = Align.CENTER.value
        return self

    def header_align_right(self) -> "Column":
        self.descriptor.header_align = Align.RIGHT.value
        return self

    def content_align_left(self) -> "Column":
        self.descriptor.content_align = Align.LEFT.value
        return self

    def content_align_center(self) -> "Column":
        self.descriptor.content_align = Align.CENTER.value
        return self

    def content_align_right(self) -> "Column":
        self.descriptor.content_align = Align.RIGHT.value
        return self

    def width(self, width: Any) -> "Column":
        return self._set_dimension("width", width)

    def min_width(self, min_width: Any) -> "Column":
        return self._set_dimension("min_width", min_width)

    def max_width(self, max_width: Any) -> "Column":
        return self._set_dimension("max_width", max_width)

    def _set_dimension(self, attribute: str, value: Any) -> "Column":
        # Invalid lengths leave the previous value in place
        normalized = normalize_dimension(value)
        if normalized is not None:
            setattr(self.descriptor, attribute, normalized)
        return self

    # ===== DERIVED QUERIES =====

    def is_base_column(self) -> bool:
        """True when the value is read straight from an unqualified field."""
        name = self.descriptor.name or ""
        return (
            not name.startswith(CALLBACK_PREFIX)
            and RELATION_SEPARATOR not in name
            and not self.descriptor.raw
        )

    def relation_path(self) -> Optional[List[str]]:
        """Relations traversed to reach the field, e.g. ``["users"]`` for ``"users.email"``."""
        name = self.descriptor.name or ""
        if self.is_base_column() or self.descriptor.raw or RELATION_SEPARATOR not in name:
            return None
        return name.rsplit(RELATION_SEPARATOR, 1)[0].split(RELATION_SEPARATOR)

    def field(self) -> str:
        return (self.descriptor.name or "").rsplit(RELATION_SEPARATOR, 1)[-1]

    def is_type(self, column_type: Union[ColumnType, str]) -> bool:
        return type_tag(column_type) == self.descriptor.type

    def is_editable(self) -> bool:
        return self.is_type(ColumnType.EDITABLE)

    def is_callback_column(self) -> bool:
        return (self.descriptor.name or "").startswith(CALLBACK_PREFIX)

    def is_exportable(self) -> bool:
        return not self.descriptor.prevent_export

    def to_dict(self) -> Dict[str, Any]:
        return self.descriptor.to_dict()

    # ===== VALUE APPLICATION =====

    def render(self, value: Any, row: Any = None, context: Optional[RenderContext] = None) -> Any:
        """
        Display value of one cell.

        Index columns advance ``context``'s row counter, so each row must be
        rendered exactly once per pass.
        """
        callback = self.descriptor.callback
        if callback is None:
            return value

        if isinstance(callback, RowNumber):
            if context is None:
                raise ValueError(f"Index column '{self.descriptor.name}' needs a RenderContext")
            return callback(context)

        if callback is self._source_callback:
            function = self._resolve_callback(callback, context)
            if row is None:
                values = [value]
            else:
                attributes = row_attributes(row)
                values = [attributes.get(select) for select in self.descriptor.additional_selects]
            return function(*values, *self.descriptor.params)

        return callback(value, row)

    def export_value(self, value: Any) -> Any:
        """Value written by exports; the raw value when no export callback is set."""
        if self.descriptor.export_callback is None:
            return value
        return self.descriptor.export_callback(value)

    def _resolve_callback(self, callback: Union[Callable, str], context: Optional[RenderContext]) -> Callable:
        if not isinstance(callback, str):
            return callback
        registered = context.callbacks.get(callback) if context is not None else None
        if registered is None:
            raise ColumnDefinitionError(f"No callback named '{callback}' is registered for column '{self.descriptor.name}'")
        return registered
