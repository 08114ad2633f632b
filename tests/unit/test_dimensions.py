"""
Unit tests for CSS length validation.
"""

import pytest

from datatables.columns.dimensions import normalize_dimension


class TestNormalizeDimension:
    """Test normalization and rejection of width values"""

    @pytest.mark.parametrize("value,expected", [
        ("120px", "120px"),
        ("12.5", "12.5px"),
        (".5", ".5px"),
        ("50%", "50%"),
        ("2 em", "2 em"),
        ("1.5REM", "1.5REM"),
        ("10vmin", "10vmin"),
        (10, "10px"),
        (7.5, "7.5px"),
    ])
    def test_valid_lengths(self, value, expected):
        assert normalize_dimension(value) == expected

    @pytest.mark.parametrize("value", ["banana", "10xyz", "", "px", "-10px", "10 px px", None, True])
    def test_invalid_lengths(self, value):
        assert normalize_dimension(value) is None

    def test_surrounding_whitespace_is_trimmed(self):
        assert normalize_dimension("  40  ") == "40px"
