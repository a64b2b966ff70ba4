"""Unit tests for core data models (RunConfig, PropertyOutcome)."""

import json

import pytest

from propcheck.models import AppConfig, Falsified, PropertyOutcome, RunConfig, Status


# ============================================================
# RunConfig Tests
# ============================================================


class TestRunConfig:
    """Tests for RunConfig defaults and validation."""

    def test_default_values(self):
        config = RunConfig()
        assert config.trial_count == 100
        assert config.max_size == 100
        assert config.seed is None
        assert config.shrink_step_ceiling == 1000
        assert config.filter_retry_ceiling == 500
        assert config.deadline_seconds is None
        assert config.validate() == []

    @pytest.mark.parametrize(
        "field, value",
        [
            ("trial_count", -1),
            ("trial_count", True),
            ("max_size", "big"),
            ("size_growth", -0.5),
            ("seed", -3),
            ("seed", 1.5),
            ("shrink_step_ceiling", None),
            ("filter_retry_ceiling", -2),
            ("deadline_seconds", 0),
            ("shrink_concurrency", 0),
        ],
    )
    def test_invalid_values(self, field, value):
        config = RunConfig(**{field: value})
        errors = config.validate()
        assert any(field in e for e in errors)

    def test_string_seed_allowed(self):
        assert RunConfig(seed="0xff").validate() == []

    def test_size_for(self):
        config = RunConfig(max_size=10, size_growth=0.5)
        assert [config.size_for(t) for t in (0, 1, 2, 3, 100)] == [0, 0, 1, 1, 10]

    def test_app_config_defaults(self):
        config = AppConfig()
        assert config.run == RunConfig()
        assert config.modules == []


# ============================================================
# PropertyOutcome Tests
# ============================================================


class TestPropertyOutcome:
    """Tests for PropertyOutcome."""

    def test_ok_flag(self):
        assert PropertyOutcome(name="p", status=Status.OK, total_trials=1, seed=1).ok
        assert not PropertyOutcome(name="p", status=Status.INCONCLUSIVE, total_trials=0, seed=1).ok

    def test_to_json(self):
        outcome = PropertyOutcome(
            name="p",
            status=Status.FALSIFIED,
            total_trials=3,
            seed=9,
            falsified=Falsified(original_input=("abc",), shrunk_input=("a",), shrink_steps=2, seed=9),
        )
        data = json.loads(outcome.to_json())
        assert data["status"] == "falsified"
        assert data["seed"] == 9
        assert data["falsified"]["shrunk_input"] == ["'a'"]
        assert data["falsified"]["shrink_steps"] == 2

    def test_to_dict_omits_empty_sections(self):
        data = PropertyOutcome(name="p", status=Status.OK, total_trials=5, seed=1).to_dict()
        assert "falsified" not in data
        assert "reason" not in data
