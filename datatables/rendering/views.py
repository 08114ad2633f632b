"""
Template rendering for cell shortcuts (links, truncation tooltips, delete buttons).

User template directories from the settings are searched before the
packaged ``datatables`` templates, so any packaged view can be overridden
by placing a file with the same name in one of them.
"""

import re
import logging
from functools import lru_cache
from typing import Any, Mapping, Optional, Tuple

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape
from markupsafe import Markup

from datatables.core.config import DatatableSettings, get_settings

logger = logging.getLogger(__name__)

LINK_VIEW = "link.html"
TOOLTIP_VIEW = "tooltip.html"
DELETE_VIEW = "delete.html"
BOOLEAN_FILTER_VIEW = "boolean"

_PLACEHOLDER = re.compile(r"\{\{([^{}]+)\}\}")


@lru_cache()
def _environment(template_dirs: Tuple[str, ...]) -> Environment:
    loaders = [FileSystemLoader(list(template_dirs))] if template_dirs else []
    loaders.append(PackageLoader("datatables.rendering", "templates"))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(default=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def get_environment(settings: Optional[DatatableSettings] = None) -> Environment:
    settings = settings or get_settings()
    return _environment(tuple(settings.template_dirs))


def render_view(template: str, settings: Optional[DatatableSettings] = None, /, **data: Any) -> Markup:
    """
    Render a template to safe markup. Unknown templates raise TemplateNotFound.

    ``template`` and ``settings`` are positional only, so any key, including
    those two, can be passed through to the template context.
    """
    environment = get_environment(settings)
    logger.debug(f"Rendering view '{template}'")
    return Markup(environment.get_template(template).render(data).strip())


def filter_template(filter_view: str) -> str:
    """Template path of a named filter control, e.g. ``"boolean"`` -> ``"filters/boolean.html"``."""
    return f"filters/{filter_view}.html"


def substitute_placeholders(template: str, substitutes: Mapping[str, Any]) -> str:
    """
    Replace ``{{key}}`` placeholders in a single pass.

    Values are not re-scanned, and placeholders without a substitute are
    left as they are.
    """
    def replace(match):
        key = match.group(1)
        if key not in substitutes:
            return match.group(0)
        value = substitutes[key]
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(replace, str(template))


def url(path: str, settings: Optional[DatatableSettings] = None) -> str:
    """Prefix an application path with the configured base URL."""
    settings = settings or get_settings()
    return f"{settings.base_url}/{str(path).lstrip('/')}"
