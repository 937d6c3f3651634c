"""
Tests for pipeline configuration and service settings.
"""

import pytest
from pydantic import ValidationError

from app.core.config import DEFAULT_CONFIG, PipelineConfig, Settings


class TestPipelineConfig:

    def test_defaults(self):
        assert DEFAULT_CONFIG.skills_cap == 20
        assert DEFAULT_CONFIG.requirements_cap == 10
        assert DEFAULT_CONFIG.email_relevance_threshold == 30

    @pytest.mark.parametrize("overrides", [
        {"skills_cap": 21},
        {"skills_cap": 0},
        {"requirements_cap": 50},
        {"requirements_cap": 0},
    ])
    def test_caps_bounded(self, overrides):
        with pytest.raises(ValidationError):
            PipelineConfig(**overrides)

    def test_lower_caps_allowed(self):
        config = PipelineConfig(skills_cap=5, requirements_cap=3)
        assert (config.skills_cap, config.requirements_cap) == (5, 3)

    def test_ignores_environment(self, monkeypatch):
        monkeypatch.setenv("JOBTEXT_SKILLS_CAP", "2")
        monkeypatch.setenv("JOBTEXT_PIPELINE__SKILLS_CAP", "2")
        assert PipelineConfig().skills_cap == 20

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_CONFIG.skills_cap = 3


class TestSettings:

    def test_nested_pipeline_variables(self, monkeypatch):
        monkeypatch.setenv("JOBTEXT_PIPELINE__SKILLS_CAP", "5")
        monkeypatch.setenv("JOBTEXT_LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)
        assert settings.pipeline.skills_cap == 5
        assert settings.pipeline.requirements_cap == 10
        assert settings.log_level == "debug"

    def test_out_of_range_cap_rejected(self, monkeypatch):
        monkeypatch.setenv("JOBTEXT_PIPELINE__REQUIREMENTS_CAP", "50")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_defaults_without_environment(self, monkeypatch):
        for name in ("JOBTEXT_PIPELINE__SKILLS_CAP", "JOBTEXT_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.pipeline == DEFAULT_CONFIG
        assert settings.log_level == "INFO"
