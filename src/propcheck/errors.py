"""Exception types raised by the property engine.

Falsification and inconclusive runs are *outcomes*, returned by the runner.
The exceptions here are either construction-time failures (raised before any
trial runs) or the assertion errors raised on request for host test runners.
"""


class ConstructionError(ValueError):
    """A generator, arbitrary or run configuration was specified incorrectly."""


class InvalidSeedError(ConstructionError):
    """A seed or random-source state string could not be parsed."""


class UnknownArbitraryError(ConstructionError, KeyError):
    """No arbitrary is registered for the requested tag."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class DiscardTrial(Exception):
    """Signals that the current trial should be discarded rather than judged.

    Raised by exhausted filters and by ``assume()``. The runner catches it and
    records a ``Discarded`` trial; it never escapes ``for_all``.
    """


class PropertyFalsified(AssertionError):
    """Raised by ``reporter.assert_ok()`` for a falsified property."""

    def __init__(self, message: str, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class PropertyInconclusive(AssertionError):
    """Raised by ``reporter.assert_ok()`` when a run gave up."""

    def __init__(self, message: str, outcome=None):
        super().__init__(message)
        self.outcome = outcome
