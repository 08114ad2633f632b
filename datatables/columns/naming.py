"""
Column name parsing.

Turns the free-form strings handed to the column constructors into the
identity and query-binding fields of a descriptor:

- ``"users.email"``          -> relation column, label "Email"
- ``"total as Order Total"`` -> aliased expression, base "total"
- ``"amount:sum"``           -> explicit aggregate override
- callback columns           -> stable synthetic ``callback_<id>`` names

None of the name parsers raise; malformed input degrades to the whole string
being used as the name. Callback params without a stable encoding are
rejected with ``ColumnDefinitionError``.
"""

import re
import json
import zlib
import logging
import functools
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from .schemas import AggregateFunction, ColumnDefinitionError

logger = logging.getLogger(__name__)

RELATION_SEPARATOR = "."
AGGREGATE_SEPARATOR = ":"
CALLBACK_PREFIX = "callback_"

_ALIAS_SEPARATOR = re.compile(r"\s+as\s+", re.IGNORECASE)
_IDENTIFIER_QUOTES = "`\""


@dataclass(frozen=True)
class ParsedName:
    """Result of parsing a column name expression."""

    name: str
    label: str
    base: Optional[str] = None
    aggregate: Optional[AggregateFunction] = None


def split_alias(expression: str) -> Tuple[str, Optional[str]]:
    """
    Split ``"<expr> as <alias>"`` on the last alias separator.

    Earlier separators stay verbatim inside the expression. Returns
    ``(expression, None)`` when there is no usable alias.
    """
    matches = list(_ALIAS_SEPARATOR.finditer(expression))
    if not matches:
        return expression, None

    last = matches[-1]
    before = expression[:last.start()].strip()
    alias = expression[last.end():].strip()
    if not before or not alias:
        return expression, None
    return before, alias


def split_aggregate_suffix(expression: str) -> Tuple[str, Optional[AggregateFunction]]:
    """Strip a trailing ``:<aggregate>`` suffix when the tag is a known aggregate."""
    if AGGREGATE_SEPARATOR not in expression:
        return expression, None

    head, _, tag = expression.rpartition(AGGREGATE_SEPARATOR)
    aggregate = AggregateFunction.from_tag(tag)
    if aggregate is None or not head.strip():
        logger.debug(f"'{tag}' is not an aggregate, keeping '{expression}' as the column name")
        return expression, None
    return head.strip(), aggregate


def derive_label(name: str) -> str:
    """``"users.created_at"`` -> ``"Created at"``."""
    segment = name.rsplit(RELATION_SEPARATOR, 1)[-1]
    if not segment:
        return ""
    return (segment[0].upper() + segment[1:]).replace("_", " ")


def parse_name(raw: Any) -> ParsedName:
    """Parse the argument of ``Column.name()``."""
    expression = "" if raw is None else str(raw).strip()

    expression, aggregate = split_aggregate_suffix(expression)
    base, alias = split_alias(expression)

    if alias is None:
        return ParsedName(name=expression, label=derive_label(expression), aggregate=aggregate)

    if aggregate is None:
        base, aggregate = split_aggregate_suffix(base)
    return ParsedName(name=alias, label=alias, base=base, aggregate=aggregate)


def split_raw_expression(raw: str) -> Tuple[str, str, str]:
    """
    Split a raw select expression into ``(select, name, label)``.

    Without an alias the whole expression is used for all three.
    """
    select, alias = split_alias(raw.strip())
    if alias is None:
        return select, select, select.strip(_IDENTIFIER_QUOTES)
    label = alias.replace("`", "").replace('"', "")
    return select, alias, label


def split_columns(columns: Union[str, Sequence[str]]) -> List[str]:
    """Accept a list of column names or a comma separated string of them."""
    if isinstance(columns, str):
        return [c.strip() for c in columns.split(",") if c.strip()]
    return [str(c).strip() for c in columns]


def _type_path(cls: type) -> str:
    return f"{cls.__module__}:{cls.__qualname__}"


def _encode_param(value: Any) -> Any:
    """
    ``json.dumps`` hook for callback params that are not plain JSON.

    Values are encoded by content, never by ``repr``, so the resulting
    name does not depend on memory addresses. Objects without a stable
    encoding are rejected.
    """
    if callable(value):
        return callable_identity(value)
    if isinstance(value, Enum):
        return f"{_type_path(type(value))}.{value.name}"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(_dump(item) for item in value)
    state = getattr(value, "__dict__", None)
    if state is not None:
        return {"__type__": _type_path(type(value)), "state": state}
    raise ColumnDefinitionError(
        f"Callback param of type {type(value).__name__} has no stable encoding; "
        f"pass callback_name= to name the column explicitly"
    )


def _dump(value: Any) -> str:
    return json.dumps(value, default=_encode_param, sort_keys=True, separators=(",", ":"))


def callable_identity(callback: Union[Callable, str]) -> str:
    """
    A representation of a callback that is stable across repeated
    construction: its dotted path plus the source location of its code.

    Partials include their bound arguments, and callable instances
    include their class and instance state.
    """
    if isinstance(callback, str):
        return callback

    if isinstance(callback, functools.partial):
        bound = _dump([list(callback.args), callback.keywords])
        return f"partial({callable_identity(callback.func)}){bound}"

    target = getattr(callback, "__func__", callback)
    qualname = getattr(target, "__qualname__", None)
    if qualname is None:
        identity = _type_path(type(target))
        state = getattr(target, "__dict__", None)
        if state:
            identity += _dump(state)
        return identity

    module = getattr(target, "__module__", None) or type(target).__module__
    identity = f"{module}:{qualname}"

    code = getattr(target, "__code__", None)
    if code is not None:
        identity += f"@{code.co_filename}:{code.co_firstlineno}"
    return identity


def callback_identifier(
    columns: Union[str, Sequence[str]],
    callback: Union[Callable, str],
    params: Optional[Sequence[Any]] = None,
    explicit: Optional[str] = None,
) -> str:
    """Deterministic identifier for a callback column."""
    if explicit is not None:
        return str(explicit)

    payload = _dump([split_columns(columns), callable_identity(callback), list(params or [])])
    return str(zlib.crc32(payload.encode("utf-8")))


def synthetic_name(
    columns: Union[str, Sequence[str]],
    callback: Union[Callable, str],
    params: Optional[Sequence[Any]] = None,
    explicit: Optional[str] = None,
) -> str:
    return CALLBACK_PREFIX + callback_identifier(columns, callback, params, explicit)
