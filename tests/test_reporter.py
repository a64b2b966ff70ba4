"""Unit tests for the Reporter."""

import logging

from propcheck.models import Falsified, PropertyOutcome, Status
from propcheck.reporter import Reporter


def make_falsified() -> PropertyOutcome:
    return PropertyOutcome(
        name="non_negative",
        status=Status.FALSIFIED,
        total_trials=4,
        seed=777,
        falsified=Falsified(
            original_input=(-57,),
            shrunk_input=(-1,),
            shrink_steps=6,
            seed=777,
            trial_index=3,
            size=3,
            error="returned False",
            original_error="returned False",
        ),
    )


class TestFormat:
    """Tests for Reporter.format()."""

    def test_ok_includes_trials_and_seed(self):
        outcome = PropertyOutcome(name="sums", status=Status.OK, total_trials=100, seed=42)
        text = Reporter().format(outcome)
        assert "sums" in text
        assert "OK" in text
        assert "100 trials" in text
        assert "seed 42" in text

    def test_falsified_includes_everything_needed_to_reproduce(self):
        text = Reporter().format(make_falsified())
        assert "FALSIFIED" in text
        assert "original: (-57)" in text
        assert "shrunk:   (-1)" in text
        assert "6 shrinks" in text
        assert "seed: 777" in text
        assert "returned False" in text

    def test_inconclusive_includes_reason_and_counts(self):
        outcome = PropertyOutcome(
            name="filtered",
            status=Status.INCONCLUSIVE,
            total_trials=0,
            seed=1,
            discarded=501,
            reason="more than 500 trials discarded",
        )
        text = Reporter().format(outcome)
        assert "INCONCLUSIVE" in text
        assert "501 discarded" in text
        assert "more than 500 trials discarded" in text
        assert "seed: 1" in text

    def test_custom_renderer(self):
        text = Reporter(render=lambda v: f"<{v}>").format(make_falsified())
        assert "shrunk:   (<-1>)" in text

    def test_multiple_arguments(self):
        assert Reporter().render_input((1, "a", [2])) == "(1, 'a', [2])"


class TestReport:
    """Tests for Reporter.report() and summarize()."""

    def test_report_writes_and_logs(self, caplog):
        lines = []
        reporter = Reporter(write=lines.append)
        with caplog.at_level(logging.WARNING):
            text = reporter.report(make_falsified())
        assert lines == [text]
        assert "non_negative: FALSIFIED (seed 777)" in caplog.text

    def test_summarize(self):
        ok = PropertyOutcome(name="a", status=Status.OK, total_trials=100, seed=1)
        summary = Reporter().summarize([ok, ok, make_falsified()])
        assert summary == "3 properties: 2 ok, 1 falsified, 0 inconclusive"
