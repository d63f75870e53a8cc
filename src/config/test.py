"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    _convert_value,
    _parse_bool,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("FORMTREE_RADIO_MAX_OPTIONS", raising=False)
        result = get_environment(EnvVar.RADIO_MAX_OPTIONS)
        assert result == 3

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("FORMTREE_RADIO_MAX_OPTIONS", "9")
        result = get_environment(EnvVar.RADIO_MAX_OPTIONS, override=5)
        assert result == 5

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("FORMTREE_RADIO_MAX_OPTIONS", "4")
        result = get_environment(EnvVar.RADIO_MAX_OPTIONS)
        assert result == 4
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_bool_type_conversion_true(self, monkeypatch):
        """Boolean type conversion for true values."""
        for value in ("true", "1", "yes", "TRUE", "Yes"):
            monkeypatch.setenv("FORMTREE_ARRAY_SORT_BUTTONS", value)
            assert get_environment(EnvVar.ARRAY_SORT_BUTTONS) is True

    @pytest.mark.unit
    def test_bool_type_conversion_false(self, monkeypatch):
        """Boolean type conversion for false values."""
        for value in ("false", "0", "no", "FALSE", "No"):
            monkeypatch.setenv("FORMTREE_ARRAY_SORT_BUTTONS", value)
            assert get_environment(EnvVar.ARRAY_SORT_BUTTONS) is False

    @pytest.mark.unit
    def test_string_type(self, monkeypatch):
        """String type returns as-is."""
        monkeypatch.setenv("FORMTREE_ID_PREFIX", "node_")
        result = get_environment(EnvVar.ID_PREFIX)
        assert result == "node_"

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("FORMTREE_INDENT", "wide")
        result = get_environment(EnvVar.INDENT)
        assert result == 2


class TestConversionHelpers:
    """Tests for the private conversion helpers."""

    @pytest.mark.unit
    def test_parse_bool_unrecognized(self):
        """Unrecognized strings parse to None."""
        assert _parse_bool("maybe") is None

    @pytest.mark.unit
    def test_invalid_bool_returns_default(self):
        """Unparseable booleans keep the default."""
        assert _convert_value("maybe", bool, True) is True

    @pytest.mark.unit
    def test_every_variable_has_a_converter(self):
        """Each registered variable uses a type the converter handles."""
        assert {var.value.var_type for var in EnvVar} <= {str, int, bool}

    @pytest.mark.unit
    def test_none_returns_default(self):
        """Missing values return the default untouched."""
        assert _convert_value(None, int, 7) == 7


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.RADIO_MAX_OPTIONS)
        assert isinstance(info, EnvConfig)
        assert info.name == "FORMTREE_RADIO_MAX_OPTIONS"
        assert info.default == 3
        assert info.var_type is int
        assert info.category == "import"

    @pytest.mark.unit
    def test_description_present(self):
        """Description field is populated."""
        info = get_environment_info(EnvVar.LOG_LEVEL)
        assert "Log level" in info.description


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        """Returns all EnvVar members when no category."""
        result = list_environment_variables()
        assert len(result) == len(EnvVar)
        assert all(isinstance(v, EnvVar) for v in result)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Filters by category correctly."""
        output_vars = list_environment_variables("output")
        assert EnvVar.INDENT in output_vars
        assert EnvVar.ARRAY_SORT_BUTTONS in output_vars
        assert EnvVar.LOG_LEVEL not in output_vars

    @pytest.mark.unit
    def test_unknown_category_is_empty(self):
        """Unknown categories match nothing."""
        assert list_environment_variables("docker") == []
