"""
Unit tests for settings loading.
"""

import os
import pytest
from pydantic import ValidationError

from datatables.core.config import DatatableSettings, get_settings


class TestDatatableSettings:
    """Test environment driven configuration"""

    @pytest.fixture(autouse=True)
    def clear_environment(self, monkeypatch):
        for key in list(os.environ):
            if key.startswith("DATATABLES_"):
                monkeypatch.delenv(key)
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_defaults(self):
        settings = DatatableSettings(_env_file=None)

        assert settings.default_sortable is True
        assert settings.default_datetime_format == "%d/%m/%Y %H:%M"
        assert settings.template_dirs == []

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DATATABLES_DEFAULT_SORTABLE", "false")
        monkeypatch.setenv("DATATABLES_DEFAULT_DATETIME_FORMAT", "%Y")
        monkeypatch.setenv("DATATABLES_BASE_URL", "https://example.test/")
        monkeypatch.setenv("DATATABLES_TEMPLATE_DIRS", os.pathsep.join(["/a", "/b"]))

        settings = get_settings()

        assert settings.default_sortable is False
        assert settings.default_datetime_format == "%Y"
        assert settings.base_url == "https://example.test"
        assert settings.template_dirs == ["/a", "/b"]

    @pytest.mark.parametrize("raw,expected", [
        ("0", False), ("off", False), ("no", False), ("FALSE", False),
        ("1", True), ("on", True), ("yes", True), ("true", True),
    ])
    def test_boolean_values_are_coerced(self, monkeypatch, raw, expected):
        monkeypatch.setenv("DATATABLES_DEFAULT_SORTABLE", raw)

        assert DatatableSettings(_env_file=None).default_sortable is expected

    def test_invalid_boolean_is_rejected(self, monkeypatch):
        monkeypatch.setenv("DATATABLES_DEFAULT_SORTABLE", "sometimes")

        with pytest.raises(ValidationError):
            DatatableSettings(_env_file=None)

    def test_template_dirs_skip_empty_entries(self, monkeypatch):
        monkeypatch.setenv("DATATABLES_TEMPLATE_DIRS", os.pathsep.join([" /a ", "", "/b"]))

        assert DatatableSettings(_env_file=None).template_dirs == ["/a", "/b"]

    def test_template_dirs_accept_a_list(self):
        assert DatatableSettings(_env_file=None, template_dirs=["/a"]).template_dirs == ["/a"]

    def test_dotenv_file_is_read(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DATATABLES_DEFAULT_TIME_FORMAT=%H.%M\nDATATABLES_DEFAULT_SORTABLE=off\n")

        settings = DatatableSettings(_env_file=env_file)

        assert settings.default_time_format == "%H.%M"
        assert settings.default_sortable is False

    def test_environment_wins_over_dotenv_file(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DATATABLES_BASE_URL=https://file.test\n")
        monkeypatch.setenv("DATATABLES_BASE_URL", "https://env.test")

        assert DatatableSettings(_env_file=env_file).base_url == "https://env.test"

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_unknown_settings_are_rejected(self):
        with pytest.raises(ValidationError):
            DatatableSettings(_env_file=None, default_sortible=False)
