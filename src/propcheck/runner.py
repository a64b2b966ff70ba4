"""Property Runner module.

Drives generated inputs through a predicate, detects falsification and shrinks
the failing input to a locally minimal counterexample.

Predicate semantics:
- returning True, None or any truthy value passes the trial;
- returning a falsy value, or raising any exception, fails it;
- calling ``assume(False)`` (or raising ``DiscardTrial``) discards it;
- returning a ``Passed``/``Failed``/``Discarded`` result is taken as-is.
"""

import asyncio
import contextlib
import dataclasses
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from propcheck.arbitrary import Arbitrary, ArbitraryLike, ArbitraryRegistry, default_registry
from propcheck.errors import ConstructionError, DiscardTrial
from propcheck.models import (
    Discarded,
    Failed,
    Falsified,
    Passed,
    PropertyOutcome,
    RunConfig,
    Status,
    TrialResult,
)
from propcheck.random_source import RandomSource, derive_seed
from propcheck.shrinkers import ShrinkBudget, ShrinkTree, minimize, minimize_async

logger = logging.getLogger(__name__)


class _DeadlineReached(Exception):
    pass


def assume(condition: bool) -> None:
    """Discard the current trial unless ``condition`` holds.

    Discarded trials are replaced by new ones and do not count toward the
    requested trial count.
    """
    if not condition:
        raise DiscardTrial("assumption not satisfied")


def describe_error(error: BaseException) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


def _judge(args: tuple, result: Any) -> TrialResult:
    if isinstance(result, Failed):
        return dataclasses.replace(result, input=args)
    if isinstance(result, (Passed, Discarded)):
        return result
    if result is not None and not result:
        return Failed(args, f"returned {result!r}")
    return Passed(args)


@dataclass
class _TrialContext:
    seed: int
    deadline: Optional[float]
    trials: int = 0
    discarded: int = 0


class PropertyRunner:
    """Runs properties synchronously.

    One RandomSource is created per run from the configured (or clock-derived)
    seed. Every trial draws from a child stream split off that source, so the
    whole run, including the shrink search, is reproducible from the seed.
    """

    def __init__(self, config: Optional[RunConfig] = None, registry: Optional[ArbitraryRegistry] = None):
        """Initialize the PropertyRunner.

        Args:
            config: Run options; defaults to ``RunConfig()``.
            registry: Registry used to resolve type tags; defaults to a fresh
                ``default_registry()``.

        Raises:
            ConstructionError: If the configuration is invalid.
        """
        self.config = config or RunConfig()
        errors = self.config.validate()
        if errors:
            raise ConstructionError("invalid run configuration: " + "; ".join(errors))
        self.registry = registry if registry is not None else default_registry()

    # ------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------

    def resolve(self, arbitraries: Sequence[ArbitraryLike]) -> list[Arbitrary]:
        """Resolve every argument before any trial runs."""
        return [self.registry.resolve(arb) for arb in arbitraries]

    def _start(self, name: str) -> tuple[_TrialContext, RandomSource]:
        seed = derive_seed(self.config.seed)
        deadline = None
        if self.config.deadline_seconds is not None:
            deadline = time.monotonic() + self.config.deadline_seconds
        logger.debug(f"Checking {name} with seed {seed}")
        return _TrialContext(seed=seed, deadline=deadline), RandomSource.from_seed(seed)

    @staticmethod
    def _generate(arbitraries: Sequence[Arbitrary], source: RandomSource, size: int) -> tuple:
        return tuple(arb.generator.generate(source.split(), size) for arb in arbitraries)

    def _past_deadline(self, ctx: _TrialContext) -> bool:
        return ctx.deadline is not None and time.monotonic() >= ctx.deadline

    def _ok(self, name: str, ctx: _TrialContext) -> PropertyOutcome:
        logger.info(f"{name}: passed {ctx.trials} trials (seed {ctx.seed})")
        return PropertyOutcome(
            name=name, status=Status.OK, total_trials=ctx.trials, seed=ctx.seed, discarded=ctx.discarded
        )

    def _inconclusive(self, name: str, ctx: _TrialContext, reason: str) -> PropertyOutcome:
        logger.warning(f"{name}: gave up after {ctx.trials} trials, {ctx.discarded} discarded: {reason}")
        return PropertyOutcome(
            name=name,
            status=Status.INCONCLUSIVE,
            total_trials=ctx.trials,
            seed=ctx.seed,
            discarded=ctx.discarded,
            reason=reason,
        )

    def _falsified(self, name: str, ctx: _TrialContext, falsified: Falsified) -> PropertyOutcome:
        logger.warning(
            f"{name}: falsified after {ctx.trials + 1} trials and {falsified.shrink_steps} shrinks "
            f"(seed {ctx.seed}): {falsified.shrunk_input!r}"
        )
        return PropertyOutcome(
            name=name,
            status=Status.FALSIFIED,
            total_trials=ctx.trials + 1,
            seed=ctx.seed,
            discarded=ctx.discarded,
            falsified=falsified,
        )

    def _shrink_budget(self, ctx: _TrialContext) -> ShrinkBudget:
        return ShrinkBudget(self.config.shrink_step_ceiling, ctx.deadline)

    # ------------------------------------------------------------
    # Synchronous run
    # ------------------------------------------------------------

    def evaluate(self, predicate: Callable[..., Any], args: tuple) -> TrialResult:
        """Run the predicate once and classify the result."""
        try:
            result = predicate(*args)
        except DiscardTrial as e:
            return Discarded(str(e))
        except Exception as e:
            return Failed(args, describe_error(e))
        return _judge(args, result)

    def run(
        self, arbitraries: Sequence[ArbitraryLike], predicate: Callable[..., Any], name: Optional[str] = None
    ) -> PropertyOutcome:
        """Check ``predicate`` against inputs drawn from ``arbitraries``.

        Args:
            arbitraries: One Arbitrary, Generator or registry tag per argument.
            predicate: Function taking one argument per arbitrary.
            name: Name used in logs and reports; defaults to the predicate's name.

        Returns:
            The PropertyOutcome. Falsification and giving up are outcomes, not
            exceptions.

        Raises:
            ConstructionError: If an argument cannot be resolved.
        """
        name = name or getattr(predicate, "__name__", "property")
        arbs = self.resolve(arbitraries)
        ctx, source = self._start(name)

        while ctx.trials < self.config.trial_count:
            if self._past_deadline(ctx):
                return self._inconclusive(name, ctx, "deadline reached")
            size = self.config.size_for(ctx.trials)
            trial_source = source.split()
            trial_state = trial_source.state
            try:
                args = self._generate(arbs, trial_source, size)
            except DiscardTrial as e:
                result: TrialResult = Discarded(str(e))
            else:
                result = self.evaluate(predicate, args)

            if isinstance(result, Discarded):
                ctx.discarded += 1
                if ctx.discarded > self.config.filter_retry_ceiling:
                    return self._inconclusive(
                        name, ctx, f"more than {self.config.filter_retry_ceiling} trials discarded"
                    )
                continue

            if isinstance(result, Failed):
                logger.debug(f"{name}: trial {ctx.trials} failed with {result.input!r}, shrinking")
                falsified = self._shrink(arbs, predicate, result, ctx)
                falsified.trial_index, falsified.size, falsified.trial_state = ctx.trials, size, trial_state
                return self._falsified(name, ctx, falsified)

            ctx.trials += 1

        return self._ok(name, ctx)

    def _shrink(
        self, arbs: Sequence[Arbitrary], predicate: Callable[..., Any], failed: Failed, ctx: _TrialContext
    ) -> Falsified:
        """Shrink each argument in turn, holding the others fixed.

        Rounds over all arguments repeat until a full round accepts nothing or
        the budget runs out.
        """
        budget = self._shrink_budget(ctx)
        current = list(failed.input)
        last = failed
        steps = 0
        path: list[tuple] = []
        improved = True
        while improved and not budget.exhausted:
            improved = False
            for i, arb in enumerate(arbs):
                def check(candidate: Any, i: int = i) -> Optional[Failed]:
                    result = self.evaluate(predicate, tuple(current[:i]) + (candidate,) + tuple(current[i + 1:]))
                    return result if isinstance(result, Failed) else None

                found = minimize(ShrinkTree(current[i], arb.shrink), check, budget, last)
                if found.steps:
                    path.extend(tuple(current[:i]) + (v,) + tuple(current[i + 1:]) for v in found.path)
                    current[i] = found.value
                    last = found.failure
                    steps += found.steps
                    improved = True

        return Falsified(
            original_input=failed.input,
            shrunk_input=tuple(current),
            shrink_steps=steps,
            seed=ctx.seed,
            error=last.error,
            original_error=failed.error,
            shrink_path=path,
        )


class AsyncPropertyRunner(PropertyRunner):
    """Runs properties whose predicates may be coroutine functions.

    Synchronous predicates work too. With ``shrink_concurrency > 1`` sibling
    shrink candidates are checked together and joined in priority order, so
    the outcome matches the sequential search for deterministic predicates.
    A configured deadline also bounds each individual predicate call.
    """

    async def _await_within_deadline(self, awaitable: Any, ctx: _TrialContext) -> Any:
        if ctx.deadline is None:
            return await awaitable
        remaining = max(0.0, ctx.deadline - time.monotonic())
        task = asyncio.ensure_future(awaitable)
        done, _ = await asyncio.wait({task}, timeout=remaining)
        if not done:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            raise _DeadlineReached()
        return task.result()

    async def evaluate_async(self, predicate: Callable[..., Any], args: tuple, ctx: _TrialContext) -> TrialResult:
        try:
            result = predicate(*args)
            if inspect.isawaitable(result):
                result = await self._await_within_deadline(result, ctx)
        except _DeadlineReached:
            raise
        except DiscardTrial as e:
            return Discarded(str(e))
        except Exception as e:
            return Failed(args, describe_error(e))
        return _judge(args, result)

    async def run_async(
        self, arbitraries: Sequence[ArbitraryLike], predicate: Callable[..., Any], name: Optional[str] = None
    ) -> PropertyOutcome:
        """Async counterpart of ``run``; same outcome for the same seed."""
        name = name or getattr(predicate, "__name__", "property")
        arbs = self.resolve(arbitraries)
        ctx, source = self._start(name)

        while ctx.trials < self.config.trial_count:
            if self._past_deadline(ctx):
                return self._inconclusive(name, ctx, "deadline reached")
            size = self.config.size_for(ctx.trials)
            trial_source = source.split()
            trial_state = trial_source.state
            try:
                args = self._generate(arbs, trial_source, size)
                result: TrialResult = await self.evaluate_async(predicate, args, ctx)
            except DiscardTrial as e:
                result = Discarded(str(e))
            except _DeadlineReached:
                return self._inconclusive(name, ctx, "deadline reached")

            if isinstance(result, Discarded):
                ctx.discarded += 1
                if ctx.discarded > self.config.filter_retry_ceiling:
                    return self._inconclusive(
                        name, ctx, f"more than {self.config.filter_retry_ceiling} trials discarded"
                    )
                continue

            if isinstance(result, Failed):
                falsified = await self._shrink_async(arbs, predicate, result, ctx)
                falsified.trial_index, falsified.size, falsified.trial_state = ctx.trials, size, trial_state
                return self._falsified(name, ctx, falsified)

            ctx.trials += 1
            # Let other tasks (signal handlers, cancellation) run between trials.
            await asyncio.sleep(0)

        return self._ok(name, ctx)

    async def _shrink_async(
        self, arbs: Sequence[Arbitrary], predicate: Callable[..., Any], failed: Failed, ctx: _TrialContext
    ) -> Falsified:
        budget = self._shrink_budget(ctx)
        current = list(failed.input)
        last = failed
        steps = 0
        path: list[tuple] = []
        improved = True
        while improved and not budget.exhausted:
            improved = False
            for i, arb in enumerate(arbs):
                async def check(candidate: Any, i: int = i) -> Optional[Failed]:
                    args = tuple(current[:i]) + (candidate,) + tuple(current[i + 1:])
                    try:
                        result = await self.evaluate_async(predicate, args, ctx)
                    except _DeadlineReached:
                        budget.exhausted = True
                        return None
                    return result if isinstance(result, Failed) else None

                found = await minimize_async(
                    ShrinkTree(current[i], arb.shrink), check, budget, last, self.config.shrink_concurrency
                )
                if found.steps:
                    path.extend(tuple(current[:i]) + (v,) + tuple(current[i + 1:]) for v in found.path)
                    current[i] = found.value
                    last = found.failure
                    steps += found.steps
                    improved = True

        return Falsified(
            original_input=failed.input,
            shrunk_input=tuple(current),
            shrink_steps=steps,
            seed=ctx.seed,
            error=last.error,
            original_error=failed.error,
            shrink_path=path,
        )


# ============================================================
# Declaration surface
# ============================================================


@dataclass
class Property:
    """A named, reusable property declaration.

    Attributes:
        name: Name used in reports.
        arbitraries: One Arbitrary, Generator or registry tag per argument.
        predicate: The function under check.
        config: Optional per-property run options.
    """

    name: str
    arbitraries: tuple
    predicate: Callable[..., Any]
    config: Optional[RunConfig] = None

    def check(self, config: Optional[RunConfig] = None, registry: Optional[ArbitraryRegistry] = None) -> PropertyOutcome:
        """Run the property synchronously.

        For coroutine predicates this drives an event loop; from async code
        use ``check_async`` instead.
        """
        if inspect.iscoroutinefunction(self.predicate):
            return asyncio.run(self.check_async(config, registry))
        runner = PropertyRunner(config or self.config, registry)
        return runner.run(self.arbitraries, self.predicate, self.name)

    async def check_async(
        self, config: Optional[RunConfig] = None, registry: Optional[ArbitraryRegistry] = None
    ) -> PropertyOutcome:
        runner = AsyncPropertyRunner(config or self.config, registry)
        return await runner.run_async(self.arbitraries, self.predicate, self.name)


def prop(*arbitraries: ArbitraryLike, name: Optional[str] = None, config: Optional[RunConfig] = None):
    """Decorator turning a predicate into a ``Property``.

    Example::

        @prop(arbitrary_int(-100, 100))
        def non_negative(x):
            return x >= 0

        assert_ok(non_negative.check())
    """

    def decorator(predicate: Callable[..., Any]) -> Property:
        return Property(name or predicate.__name__, tuple(arbitraries), predicate, config)

    return decorator


def for_all(
    *args: Any,
    config: Optional[RunConfig] = None,
    registry: Optional[ArbitraryRegistry] = None,
    name: Optional[str] = None,
) -> PropertyOutcome:
    """Check a predicate against generated inputs: ``for_all(arb1, ..., predicate)``.

    Args:
        *args: Arguments (Arbitrary, Generator or registry tag) followed
            by the predicate.
        config: Run options.
        registry: Registry used to resolve tags.
        name: Name used in reports.

    Returns:
        The PropertyOutcome.

    Raises:
        ConstructionError: If no predicate is given, or an argument or the
            configuration is invalid.
    """
    if not args or not callable(args[-1]) or isinstance(args[-1], type):
        raise ConstructionError("for_all: the last argument must be the predicate")
    *arbitraries, predicate = args
    return Property(name or getattr(predicate, "__name__", "property"), tuple(arbitraries), predicate, config).check(
        config, registry
    )
