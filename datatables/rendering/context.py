"""Per-render-pass state handed to column callbacks."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict


@dataclass
class RenderContext:
    """
    Table state for one render pass.

    ``page`` and ``per_page`` come from the caller's pagination state.
    ``row`` is the running row counter used by index columns; it belongs to
    the pass, not to any column, and must be reset before each pass.
    ``callbacks`` resolves callback columns declared by name.
    """

    page: int = 1
    per_page: int = 10
    row: int = 0
    callbacks: Dict[str, Callable[..., Any]] = field(default_factory=dict)

    def reset(self) -> "RenderContext":
        self.row = 0
        return self

    def next_row_number(self) -> int:
        """Advance the counter by one row and return that row's absolute number."""
        self.row += 1
        return self.page * self.per_page - self.per_page + self.row
