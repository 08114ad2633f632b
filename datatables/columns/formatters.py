"""Value formatting strategies bound into a column's callback slot."""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional, TYPE_CHECKING

from dateutil import parser as date_parser

from datatables.core.config import DatatableSettings
from .schemas import ColumnType, ColumnDescriptor

if TYPE_CHECKING:
    from datatables.rendering.context import RenderContext

logger = logging.getLogger(__name__)

# Storage hint marking values stored as Unix epoch seconds
EPOCH_SECONDS = "U"


def _is_zero(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() == "0"
    return value == 0


class TemporalFormatter:
    """
    Formats datetime, date and time columns.

    The storage hints are read from the descriptor at call time, so
    ``datetime_format_internal("U")`` may be chained before or after
    ``format()``.
    """

    def __init__(self, descriptor: ColumnDescriptor, settings: DatatableSettings, fmt: Optional[str] = None):
        self.descriptor = descriptor
        self.settings = settings
        self.fmt = fmt

    @property
    def output_format(self) -> str:
        if self.fmt:
            return self.fmt
        if self.descriptor.type == ColumnType.DATE.value:
            return self.settings.default_date_format
        if self.descriptor.type == ColumnType.TIME.value:
            return self.settings.default_time_format
        return self.settings.default_datetime_format

    def stores_epoch_seconds(self) -> bool:
        if self.descriptor.type == ColumnType.DATE.value and self.descriptor.date_format_internal:
            return self.descriptor.date_format_internal == EPOCH_SECONDS
        return self.descriptor.datetime_format_internal == EPOCH_SECONDS

    def to_datetime(self, value: Any):
        if isinstance(value, (datetime, date, time)):
            return value
        if self.stores_epoch_seconds():
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        return date_parser.parse(str(value))

    def __call__(self, value: Any, row: Any = None) -> Optional[str]:
        # Epoch zero is a real timestamp, every other empty value renders as nothing
        if value is None or value == "" or (_is_zero(value) and not self.stores_epoch_seconds()):
            return None

        try:
            moment = self.to_datetime(value)
        except (ValueError, OverflowError, TypeError) as e:
            logger.warning(f"Could not parse {value!r} for column '{self.descriptor.name}': {e}")
            return value

        return moment.strftime(self.output_format)

    def __repr__(self) -> str:
        return f"TemporalFormatter(column={self.descriptor.name!r}, fmt={self.fmt!r})"


class RowNumber:
    """Callback of index columns: the running row number of the current render pass."""

    def __call__(self, context: "RenderContext") -> int:
        return context.next_row_number()

    def __repr__(self) -> str:
        return "RowNumber()"
