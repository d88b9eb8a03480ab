"""
Unit tests for the configuration helpers.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import DEFAULT_CONFIG, get_default_config, get_section, merge_configs


class TestDefaults:
    """Test default configuration values."""

    def test_default_values(self):
        config = get_default_config()
        assert config["trim"]["threshold"] == 10.0
        assert config["trim"]["median_size"] == 0
        assert config["histogram"]["quantize_step"] == 32
        assert config["detector"]["strip_width"] == 10
        assert config["batch"]["max_workers"] == 4

    def test_default_is_a_copy(self):
        config = get_default_config()
        config["trim"]["threshold"] = 99.0
        assert DEFAULT_CONFIG["trim"]["threshold"] == 10.0


class TestMergeConfigs:
    """Test nested merging."""

    def test_nested_override(self):
        merged = merge_configs(get_default_config(), {"trim": {"threshold": 3.0}})
        assert merged["trim"] == {"threshold": 3.0, "median_size": 0}

    def test_new_keys_added(self):
        merged = merge_configs({"a": {"b": 1}}, {"a": {"c": 2}, "d": 3})
        assert merged == {"a": {"b": 1, "c": 2}, "d": 3}

    def test_inputs_untouched(self):
        base = {"a": {"b": 1}}
        override = {"a": {"b": 2}}
        merge_configs(base, override)
        assert base == {"a": {"b": 1}}


class TestGetSection:
    """Test section lookup with defaults."""

    def test_missing_config(self):
        assert get_section(None, "histogram") == {"quantize_step": 32}

    def test_partial_section(self):
        section = get_section({"trim": {"median_size": 3}}, "trim")
        assert section == {"threshold": 10.0, "median_size": 3}

    def test_unknown_section(self):
        with pytest.raises(ValueError):
            get_section({}, "compression")
