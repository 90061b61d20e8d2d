"""Tests for PawSteps configuration loading."""

from __future__ import annotations

import pytest

from pawsteps.config import PawStepsConfig, load_config
from pawsteps.exceptions import ConfigurationError


class TestLoadConfig:
    """Test schema validation of settings."""

    def test_defaults(self):
        """Test an empty mapping yields the defaults."""
        assert load_config() == PawStepsConfig()
        assert load_config({}).as_dict() == {
            "permission_timeout": 10.0,
            "query_timeout": 10.0,
            "max_recent_estimations": 10,
            "auto_resume_daily": True,
            "walk_history_limit": 100,
            "default_step_length_m": 0.65,
        }

    def test_coercion(self):
        """Test string values are coerced."""
        config = load_config(
            {
                "query_timeout": "2.5",
                "walk_history_limit": "20",
                "auto_resume_daily": "off",
            }
        )

        assert config.query_timeout == 2.5
        assert config.walk_history_limit == 20
        assert config.auto_resume_daily is False

    @pytest.mark.parametrize(
        ("setting", "value"),
        [
            ("permission_timeout", 0),
            ("query_timeout", 500),
            ("max_recent_estimations", 2),
            ("walk_history_limit", 0),
            ("default_step_length_m", 3.0),
        ],
    )
    def test_out_of_range(self, setting, value):
        """Test out-of-range values raise a configuration error."""
        with pytest.raises(ConfigurationError) as err:
            load_config({setting: value})

        assert err.value.setting == setting
        assert err.value.value == value
        assert err.value.error_code == "configuration_error"

    def test_unknown_setting(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ConfigurationError) as err:
            load_config({"step_magic": True})

        assert err.value.setting == "step_magic"

    def test_wrong_type(self):
        """Test values that cannot be coerced are rejected."""
        with pytest.raises(ConfigurationError) as err:
            load_config({"query_timeout": "soon"})

        assert err.value.setting == "query_timeout"
