"""
Test configuration and shared fixtures for the datatables test suite.
Provides injected settings, render contexts and sample rows.
"""

import pytest
from pathlib import Path
from typing import Dict, Any

from datatables.core.config import DatatableSettings
from datatables.rendering.context import RenderContext


TEMPLATES_DIR = Path(__file__).parent / "templates"


# ===== SETTINGS =====

@pytest.fixture
def settings() -> DatatableSettings:
    """Settings with known formats so output can be asserted exactly"""
    return DatatableSettings(
        _env_file=None,
        default_sortable=True,
        default_datetime_format="%Y-%m-%d %H:%M",
        default_date_format="%d/%m/%Y",
        default_time_format="%H:%M",
        base_url="https://example.test",
        template_dirs=[str(TEMPLATES_DIR)],
    )


@pytest.fixture
def unsortable_settings() -> DatatableSettings:
    """Settings where columns are unsortable unless told otherwise"""
    return DatatableSettings(_env_file=None, default_sortable=False)


# ===== RENDER STATE =====

@pytest.fixture
def render_context() -> RenderContext:
    """Fresh render pass on the first page"""
    return RenderContext(page=1, per_page=10)


@pytest.fixture
def sample_row() -> Dict[str, Any]:
    """A result row as the query compiler would hand it over"""
    return {
        "id": 42,
        "name": "Ada Lovelace",
        "email": "ada@example.test",
        "users.email": "ada@example.test",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "total": 1234.5678,
    }
