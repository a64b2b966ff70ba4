"""Reporter module.

Renders a PropertyOutcome as text. Every report carries the seed so a run can
be reproduced exactly by passing that seed back in.
"""

import logging
from typing import Callable, Optional

from propcheck.errors import PropertyFalsified, PropertyInconclusive
from propcheck.models import PropertyOutcome, Status

logger = logging.getLogger(__name__)


class Reporter:
    """Formats property outcomes and writes them to the terminal and the log."""

    def __init__(self, render: Callable[[object], str] = repr, write: Optional[Callable[[str], None]] = None):
        """Initialize the Reporter.

        Args:
            render: Renders a single input value; defaults to ``repr``.
            write: Output function for ``report``; defaults to ``print``.
        """
        self.render = render
        self.write = write or print

    def render_input(self, values: tuple) -> str:
        return "(" + ", ".join(self.render(v) for v in values) + ")"

    def format(self, outcome: PropertyOutcome) -> str:
        """Format an outcome as report lines.

        Args:
            outcome: The outcome to render.

        Returns:
            A multi-line string. Falsified outcomes always include the original
            input, the shrunk input, the shrink step count and the seed.
        """
        if outcome.status is Status.OK:
            return f"+ {outcome.name}: OK, passed {outcome.total_trials} trials (seed {outcome.seed})"

        if outcome.status is Status.INCONCLUSIVE:
            return "\n".join(
                [
                    f"? {outcome.name}: INCONCLUSIVE after {outcome.total_trials} trials "
                    f"and {outcome.discarded} discarded",
                    f"  reason: {outcome.reason}",
                    f"  seed: {outcome.seed}",
                ]
            )

        f = outcome.falsified
        lines = [
            f"! {outcome.name}: FALSIFIED after {outcome.total_trials} trials "
            f"and {f.shrink_steps} shrinks",
            f"  original: {self.render_input(f.original_input)}",
        ]
        if f.original_error:
            lines.append(f"    {f.original_error}")
        lines.append(f"  shrunk:   {self.render_input(f.shrunk_input)}")
        if f.error:
            lines.append(f"    {f.error}")
        lines.append(f"  seed: {f.seed} (trial {f.trial_index}, size {f.size})")
        return "\n".join(lines)

    def report(self, outcome: PropertyOutcome) -> str:
        """Write the formatted outcome and log a one-line summary.

        Returns:
            The formatted text.
        """
        text = self.format(outcome)
        self.write(text)
        if outcome.ok:
            logger.info(f"{outcome.name}: OK")
        else:
            logger.warning(f"{outcome.name}: {outcome.status.value.upper()} (seed {outcome.seed})")
        return text

    def summarize(self, outcomes: list[PropertyOutcome]) -> str:
        counts = {status: 0 for status in Status}
        for outcome in outcomes:
            counts[outcome.status] += 1
        return (
            f"{len(outcomes)} properties: {counts[Status.OK]} ok, "
            f"{counts[Status.FALSIFIED]} falsified, {counts[Status.INCONCLUSIVE]} inconclusive"
        )


def assert_ok(outcome: PropertyOutcome, reporter: Optional[Reporter] = None) -> None:
    """Raise an AssertionError subclass unless the property passed.

    Lets any host test runner treat an outcome as a plain assertion; the
    message is the formatted report.

    Raises:
        PropertyFalsified: If the property was falsified.
        PropertyInconclusive: If the run gave up before completing.
    """
    reporter = reporter or Reporter()
    if outcome.status is Status.FALSIFIED:
        raise PropertyFalsified(reporter.format(outcome), outcome=outcome)
    if outcome.status is Status.INCONCLUSIVE:
        raise PropertyInconclusive(reporter.format(outcome), outcome=outcome)
