"""Core data models for property runs.

Defines the run configuration, per-trial results and the final outcome of a
property check.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

DEFAULT_TRIAL_COUNT = 100
DEFAULT_MAX_SIZE = 100
DEFAULT_SHRINK_STEP_CEILING = 1000
DEFAULT_FILTER_RETRY_CEILING = 500


@dataclass
class RunConfig:
    """Options recognized by the property runner.

    Attributes:
        trial_count: Number of non-discarded trials a passing run must complete.
        max_size: Upper bound of the size hint handed to generators.
        size_growth: Size increase per counted trial; ``size = min(max_size,
            int(trial * size_growth))``.
        seed: Explicit run seed, or None to derive one from the clock.
        shrink_step_ceiling: Maximum number of shrink candidates evaluated.
        filter_retry_ceiling: Maximum number of discarded trials before the
            run is reported inconclusive.
        deadline_seconds: Optional wall-clock budget for the whole run.
        shrink_concurrency: Shrink candidates evaluated together by the async
            runner. The sync runner ignores it.
    """

    trial_count: int = DEFAULT_TRIAL_COUNT
    max_size: int = DEFAULT_MAX_SIZE
    size_growth: float = 1.0
    seed: Optional[Union[int, str]] = None
    shrink_step_ceiling: int = DEFAULT_SHRINK_STEP_CEILING
    filter_retry_ceiling: int = DEFAULT_FILTER_RETRY_CEILING
    deadline_seconds: Optional[float] = None
    shrink_concurrency: int = 1

    def validate(self) -> list[str]:
        """Validate the configuration.

        Returns:
            A list of error messages. An empty list means validation passed.
        """
        errors: list[str] = []

        for name in ("trial_count", "max_size", "shrink_step_ceiling", "filter_retry_ceiling"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                errors.append(f"{name} must be an integer")
            elif value < 0:
                errors.append(f"{name} must not be negative")

        if not isinstance(self.size_growth, (int, float)) or isinstance(self.size_growth, bool):
            errors.append("size_growth must be a number")
        elif self.size_growth < 0:
            errors.append("size_growth must not be negative")

        if self.seed is not None:
            if isinstance(self.seed, bool) or not isinstance(self.seed, (int, str)):
                errors.append("seed must be an integer or a string")
            elif isinstance(self.seed, int) and self.seed < 0:
                errors.append("seed must not be negative")

        if self.deadline_seconds is not None:
            if not isinstance(self.deadline_seconds, (int, float)) or isinstance(
                self.deadline_seconds, bool
            ):
                errors.append("deadline_seconds must be a number")
            elif self.deadline_seconds <= 0:
                errors.append("deadline_seconds must be positive")

        if not isinstance(self.shrink_concurrency, int) or isinstance(self.shrink_concurrency, bool):
            errors.append("shrink_concurrency must be an integer")
        elif self.shrink_concurrency < 1:
            errors.append("shrink_concurrency must be at least 1")

        return errors

    def size_for(self, trial: int) -> int:
        """Size hint for the given counted trial index."""
        return min(self.max_size, int(trial * self.size_growth))


@dataclass
class AppConfig:
    """Configuration of the command-line property script.

    Attributes:
        run: Options passed to the runner for every property.
        modules: Importable module names whose Property objects are checked.
    """

    run: RunConfig = field(default_factory=RunConfig)
    modules: list[str] = field(default_factory=list)


# ============================================================
# Trial results
# ============================================================


@dataclass(frozen=True)
class Passed:
    """The predicate held for the generated input."""

    input: tuple


@dataclass(frozen=True)
class Failed:
    """The predicate returned False or raised for the generated input.

    Attributes:
        input: The argument tuple the predicate was called with.
        error: Description of the failure: the raised exception rendered as
            ``"TypeName: message"``, or ``"returned False"``.
    """

    input: tuple
    error: str


@dataclass(frozen=True)
class Discarded:
    """No verdict: a filter gave up or the predicate rejected its precondition."""

    reason: str = ""


TrialResult = Union[Passed, Failed, Discarded]


# ============================================================
# Outcome
# ============================================================


class Status(str, Enum):
    OK = "ok"
    FALSIFIED = "falsified"
    INCONCLUSIVE = "inconclusive"


@dataclass
class Falsified:
    """Details of a falsified property.

    Attributes:
        original_input: The first generated argument tuple that failed.
        shrunk_input: The locally minimal failing tuple found by shrinking.
            Always re-verified against the predicate.
        shrink_steps: Number of accepted shrinks between the two.
        seed: Seed of the run; re-running with it reproduces this failure.
        trial_index: Counted trial index at which the failure occurred.
        size: Size hint used for the failing trial.
        error: Failure description for the shrunk input.
        original_error: Failure description for the original input.
        trial_state: RandomSource state at the start of the failing trial.
        shrink_path: Every accepted shrunk tuple, in order.
    """

    original_input: tuple
    shrunk_input: tuple
    shrink_steps: int
    seed: int
    trial_index: int = 0
    size: int = 0
    error: str = ""
    original_error: str = ""
    trial_state: str = ""
    shrink_path: list[tuple] = field(default_factory=list)


@dataclass
class PropertyOutcome:
    """Result of running one property.

    Attributes:
        name: Property name used in reports.
        status: OK, FALSIFIED or INCONCLUSIVE.
        total_trials: Counted (non-discarded) trials evaluated.
        discarded: Trials discarded along the way.
        seed: Seed of the run, echoed even on success.
        falsified: Failure details when ``status`` is FALSIFIED.
        reason: Why an INCONCLUSIVE run stopped.
    """

    name: str
    status: Status
    total_trials: int
    seed: int
    discarded: int = 0
    falsified: Optional[Falsified] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary; inputs are rendered with repr()."""
        data: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "total_trials": self.total_trials,
            "discarded": self.discarded,
            "seed": self.seed,
        }
        if self.reason:
            data["reason"] = self.reason
        if self.falsified is not None:
            f = self.falsified
            data["falsified"] = {
                "original_input": [repr(v) for v in f.original_input],
                "shrunk_input": [repr(v) for v in f.shrunk_input],
                "shrink_steps": f.shrink_steps,
                "trial_index": f.trial_index,
                "size": f.size,
                "error": f.error,
                "trial_state": f.trial_state,
            }
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
