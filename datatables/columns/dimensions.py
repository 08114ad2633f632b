"""CSS length validation for column width, min-width and max-width."""

import re
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_UNIT = "px"

LENGTH_UNITS = (
    "cm", "mm", "in", "px", "pt", "pc",
    "em", "ex", "ch", "rem", "vw", "vmin", "vmax",
)

_UNITLESS = re.compile(r"^\d*\.?\d+$")
_CSS_LENGTH = re.compile(
    r"^(\d*\.?\d+)\s?(" + "|".join(LENGTH_UNITS) + r"|%+)$",
    re.IGNORECASE,
)


def normalize_dimension(value: Any) -> Optional[str]:
    """
    Normalize a user supplied CSS length.

    Bare numbers get the default pixel unit ("12.5" -> "12.5px").
    Returns None when the value is not a valid length.
    """
    if value is None or isinstance(value, bool):
        return None

    text = str(value).strip()
    if _UNITLESS.match(text):
        text += DEFAULT_UNIT

    if not _CSS_LENGTH.match(text):
        logger.debug(f"Ignoring invalid CSS length: {value!r}")
        return None

    return text
