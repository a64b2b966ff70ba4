"""Shrinkers module.

A shrinker maps a value to a lazy, finite sequence of strictly smaller values
of the same type, ordered largest reduction first. ``minimize`` walks the
resulting shrink tree depth-first: the first candidate that still fails
becomes the new current value.

The minimum found is *local*: no candidate one step below it fails, but a
smaller failing value reachable only through a passing one will not be found.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Iterator, Optional, Sequence, TypeVar

T = TypeVar("T")

Shrink = Callable[[Any], Iterator[Any]]

logger = logging.getLogger(__name__)


# ============================================================
# Type-specific shrinkers
# ============================================================


def no_shrink(value: Any) -> Iterator[Any]:
    return iter(())


def shrink_int(value: int, target: int = 0) -> Iterator[int]:
    """Shrink an integer toward ``target``.

    Yields ``target`` first, then values that halve the remaining distance
    repeatedly, ending one step away from ``value``. Every candidate lies
    between ``target`` and ``value`` and is strictly closer to ``target``.
    """
    diff = value - target
    sign = 1 if diff > 0 else -1
    step = abs(diff)
    while step > 0:
        yield value - sign * step
        step //= 2


def int_shrinker(low: Optional[int] = None, high: Optional[int] = None) -> Shrink:
    """Integer shrinker that stays inside ``[low, high]``.

    The target is the in-range value nearest zero.
    """
    target = 0
    if low is not None and low > 0:
        target = low
    elif high is not None and high < 0:
        target = high
    return lambda value: shrink_int(value, target)


def shrink_bool(value: bool) -> Iterator[bool]:
    if value:
        yield False


def shrink_float(value: float) -> Iterator[float]:
    """Shrink a float toward 0.0: zero, then the truncated integer, then half."""
    if value == 0.0:
        return
    yield 0.0
    if math.isnan(value) or math.isinf(value):
        return
    truncated = float(int(value))
    if truncated != value and truncated != 0.0:
        yield truncated
    half = value / 2.0
    if half != 0.0 and abs(half) < abs(value):
        yield half


def list_shrinker(element: Shrink = no_shrink, min_length: int = 0) -> Shrink:
    """Shrink lists by removing chunks, then by shrinking single elements.

    Chunks of length n, n/2, n/4, ..., 1 are removed at each aligned offset.
    Lists never shrink below ``min_length``.
    """

    def shrink(value: list) -> Iterator[list]:
        n = len(value)
        k = n - min_length
        while k > 0:
            for start in range(0, n - k + 1, k):
                yield value[:start] + value[start + k:]
            k //= 2
        for i, item in enumerate(value):
            for smaller in element(item):
                yield value[:i] + [smaller] + value[i + 1:]

    return shrink


def text_shrinker(alphabet: Optional[str] = None) -> Shrink:
    """Shrink strings like lists of characters.

    Characters shrink toward earlier characters of ``alphabet``; characters
    outside it, or every character when no alphabet is given, are only removed.
    """

    def shrink_char(char: str) -> Iterator[str]:
        if alphabet is None:
            return
        index = alphabet.find(char)
        if index > 0:
            yield from alphabet[:index]

    shrink_chars = list_shrinker(shrink_char)

    def shrink(value: str) -> Iterator[str]:
        for chars in shrink_chars(list(value)):
            yield "".join(chars)

    return shrink


def tuple_shrinker(shrinkers: Sequence[Shrink]) -> Shrink:
    """Shrink one component at a time, holding the others fixed."""

    def shrink(value: tuple) -> Iterator[tuple]:
        for i, shrink_component in enumerate(shrinkers):
            for smaller in shrink_component(value[i]):
                yield value[:i] + (smaller,) + value[i + 1:]

    return shrink


# ============================================================
# Shrink tree and search
# ============================================================


class ShrinkTree(Generic[T]):
    """Lazy rose tree rooted at a value.

    Children are computed on demand from the shrinker, so the tree can be
    arbitrarily large without being materialized.
    """

    def __init__(self, value: T, shrink: Shrink):
        self.value = value
        self._shrink = shrink

    def children(self) -> Iterator["ShrinkTree[T]"]:
        for candidate in self._shrink(self.value):
            yield ShrinkTree(candidate, self._shrink)

    def __repr__(self) -> str:
        return f"ShrinkTree({self.value!r})"


class ShrinkBudget:
    """Shared ceiling on shrink candidate evaluations and wall-clock time."""

    def __init__(self, max_steps: int, deadline: Optional[float] = None):
        """Initialize the ShrinkBudget.

        Args:
            max_steps: Maximum number of candidates that may be evaluated.
            deadline: Optional ``time.monotonic()`` value after which no more
                candidates are evaluated.
        """
        self.max_steps = max_steps
        self.deadline = deadline
        self.used = 0
        self.exhausted = False

    def take(self) -> bool:
        """Reserve one evaluation. Returns False once the budget is spent."""
        if self.used >= self.max_steps or (
            self.deadline is not None and time.monotonic() >= self.deadline
        ):
            self.exhausted = True
            return False
        self.used += 1
        return True


@dataclass
class ShrinkResult(Generic[T]):
    """Outcome of a shrink search.

    Attributes:
        value: Smallest failing value found.
        failure: Payload returned by the failure check for ``value``, or the
            initial payload if no shrink was accepted.
        steps: Number of accepted shrinks.
        path: Accepted values, in order.
    """

    value: T
    failure: Any
    steps: int = 0
    path: list = field(default_factory=list)


def minimize(
    tree: ShrinkTree[T],
    check: Callable[[T], Any],
    budget: ShrinkBudget,
    failure: Any = None,
) -> ShrinkResult[T]:
    """Depth-first search for a locally minimal failing value.

    Args:
        tree: Shrink tree rooted at a value known to fail.
        check: Re-runs the property on a candidate; returns a truthy failure
            payload when the candidate still fails, otherwise a falsy value.
        budget: Evaluation ceiling shared across searches.
        failure: Failure payload of the root value.

    Returns:
        A ShrinkResult. Every accepted value was verified by ``check``.
    """
    result = ShrinkResult(tree.value, failure)
    current = tree
    while True:
        for child in current.children():
            if not budget.take():
                logger.debug(f"Shrink budget exhausted after {budget.used} evaluations")
                return result
            payload = check(child.value)
            if payload:
                result.value, result.failure = child.value, payload
                result.steps += 1
                result.path.append(child.value)
                current = child
                break
        else:
            return result


async def minimize_async(
    tree: ShrinkTree[T],
    check: Callable[[T], Awaitable[Any]],
    budget: ShrinkBudget,
    failure: Any = None,
    concurrency: int = 1,
) -> ShrinkResult[T]:
    """Async variant of ``minimize`` that checks candidates in batches.

    Up to ``concurrency`` sibling candidates are checked together; the
    accepted one is the first failing candidate in shrinker order, never the
    first to finish, so the search path matches the sequential search.
    """
    result = ShrinkResult(tree.value, failure)
    current = tree
    while True:
        children = current.children()
        accepted = None
        while accepted is None:
            batch: list[ShrinkTree[T]] = []
            for child in children:
                if not budget.take():
                    break
                batch.append(child)
                if len(batch) >= concurrency:
                    break
            if not batch:
                return result
            payloads = await asyncio.gather(*(check(child.value) for child in batch))
            for index, (child, payload) in enumerate(zip(batch, payloads)):
                if payload:
                    accepted = (child, payload)
                    # Only candidates up to the accepted one count against the budget.
                    budget.used -= len(batch) - index - 1
                    budget.exhausted = False
                    break
            else:
                if budget.exhausted:
                    return result
        child, payload = accepted
        result.value, result.failure = child.value, payload
        result.steps += 1
        result.path.append(child.value)
        current = child
