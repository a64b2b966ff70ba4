"""Generators module.

A Generator wraps a function ``(RandomSource, size) -> value``. Generators are
stateless values: all randomness comes from the source handed in, so the same
source state and size always produce the same value.

Combinators compose generators without any special syntax; ``map`` and
``bind`` cover what query-comprehension style builders do elsewhere.
"""

import string
from typing import Any, Callable, Generic, Iterable, Optional, Sequence, TypeVar

from propcheck import shrinkers
from propcheck.errors import ConstructionError, DiscardTrial
from propcheck.random_source import RandomSource
from propcheck.shrinkers import Shrink

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_FILTER_RETRIES = 100
DEFAULT_ALPHABET = string.ascii_lowercase + string.digits + " "


class Generator(Generic[T]):
    """A composable, size-aware producer of random values.

    A generator may carry a default shrinker for the values it produces.
    Primitive generators do; ``map`` and ``bind`` drop it because they have
    no way back to the original value.
    """

    def __init__(
        self, fn: Callable[[RandomSource, int], T], label: str = "generator", shrink: Optional[Shrink] = None
    ):
        """Initialize the Generator.

        Args:
            fn: Function drawing one value from a RandomSource at a given size.
            label: Short description used in repr() and log messages.
            shrink: Default shrinker for the produced values; none when omitted.
        """
        self._fn = fn
        self.label = label
        self.shrink = shrink or shrinkers.no_shrink

    def generate(self, source: RandomSource, size: int) -> T:
        """Draw one value.

        Args:
            source: Random stream owned by the caller for the duration of the call.
            size: Non-negative complexity hint; 0 biases toward degenerate values.

        Returns:
            The generated value.

        Raises:
            DiscardTrial: If a filter inside this generator exhausted its retries.
        """
        return self._fn(source, max(0, size))

    def map(self, f: Callable[[T], U]) -> "Generator[U]":
        """Apply a pure transform to each generated value. Draws nothing extra."""
        return Generator(lambda source, size: f(self.generate(source, size)), f"{self.label}.map")

    def bind(self, f: Callable[[T], "Generator[U]"]) -> "Generator[U]":
        """Generate a value, build a dependent generator from it, and draw from that."""

        def generate(source: RandomSource, size: int) -> U:
            value = self.generate(source, size)
            return f(value).generate(source, size)

        return Generator(generate, f"{self.label}.bind")

    def filter(
        self, predicate: Callable[[T], bool], max_retries: int = DEFAULT_FILTER_RETRIES
    ) -> "Generator[T]":
        """Keep only values satisfying ``predicate``.

        The value is regenerated at the same size up to ``max_retries`` times.
        When every attempt is rejected the trial is discarded, not failed.

        Raises:
            ConstructionError: If ``max_retries`` is negative.
        """
        if max_retries < 0:
            raise ConstructionError(f"max_retries must not be negative, got {max_retries}")

        def generate(source: RandomSource, size: int) -> T:
            for _ in range(max_retries + 1):
                value = self.generate(source, size)
                if predicate(value):
                    return value
            raise DiscardTrial(f"{self.label}.filter gave up after {max_retries} retries")

        shrink = self.shrink

        def filtered_shrink(value: T):
            return (candidate for candidate in shrink(value) if predicate(candidate))

        return Generator(generate, f"{self.label}.filter", filtered_shrink)

    def __repr__(self) -> str:
        return f"Generator({self.label})"


# ============================================================
# Primitive generators
# ============================================================


def constant(value: T) -> Generator[T]:
    """Always produce ``value``."""
    return Generator(lambda source, size: value, f"constant({value!r})")


def choose_int(low: int, high: int) -> Generator[int]:
    """Uniform integer in ``[low, high]`` inclusive, independent of size.

    Raises:
        ConstructionError: If ``low > high``.
    """
    if low > high:
        raise ConstructionError(f"choose_int: low ({low}) must be <= high ({high})")
    return Generator(
        lambda source, size: source.next_in_range(low, high),
        f"choose_int({low}, {high})",
        shrinkers.int_shrinker(low, high),
    )


def elements(items: Iterable[T]) -> Generator[T]:
    """Uniform choice from a finite, non-empty collection; shrinks toward earlier items.

    Raises:
        ConstructionError: If ``items`` is empty.
    """
    choices = list(items)
    if not choices:
        raise ConstructionError("elements: the collection must not be empty")

    def shrink(value: T):
        # Index lookup by equality; unknown values do not shrink.
        for index, item in enumerate(choices):
            if item == value:
                yield from choices[:index]
                return

    return Generator(
        lambda source, size: choices[source.next(len(choices))], f"elements({len(choices)})", shrink
    )


def booleans() -> Generator[bool]:
    return Generator(lambda source, size: source.next(2) == 1, "booleans", shrinkers.shrink_bool)


def integers() -> Generator[int]:
    """Integers in ``[-size, size]``; size 0 yields 0."""
    return Generator(
        lambda source, size: source.next_in_range(-size, size), "integers", shrinkers.int_shrinker()
    )


def floats() -> Generator[float]:
    """Floats in ``[-size, size)``; size 0 yields 0.0."""

    def generate(source: RandomSource, size: int) -> float:
        if size == 0:
            return 0.0
        return (source.next_float() * 2.0 - 1.0) * size

    return Generator(generate, "floats", shrinkers.shrink_float)


# ============================================================
# Combinators
# ============================================================


def frequency(choices: Sequence[tuple[int, Generator[T]]]) -> Generator[T]:
    """Pick a branch with probability proportional to its weight, then delegate.

    A single bounded draw selects the branch. Zero-weight branches are never
    selected.

    Raises:
        ConstructionError: If there are no branches, a weight is negative or
            not an integer, or every weight is zero.
    """
    branches = list(choices)
    if not branches:
        raise ConstructionError("frequency: at least one branch is required")
    for weight, _ in branches:
        if not isinstance(weight, int) or isinstance(weight, bool) or weight < 0:
            raise ConstructionError(f"frequency: weights must be non-negative integers, got {weight!r}")
    total = sum(weight for weight, _ in branches)
    if total == 0:
        raise ConstructionError("frequency: at least one weight must be positive")

    def generate(source: RandomSource, size: int) -> T:
        pick = source.next(total)
        for weight, gen in branches[:-1]:
            if pick < weight:
                return gen.generate(source, size)
            pick -= weight
        return branches[-1][1].generate(source, size)

    return Generator(generate, f"frequency({len(branches)})")


def one_of(*gens: Generator[T]) -> Generator[T]:
    """Pick one of ``gens`` uniformly, then delegate.

    Raises:
        ConstructionError: If no generators are given.
    """
    if not gens:
        raise ConstructionError("one_of: at least one generator is required")
    return frequency([(1, gen) for gen in gens])


def tuple_of(*gens: Generator[Any]) -> Generator[tuple]:
    """Tuple with one component from each generator.

    Each component draws from its own split stream, so adding or reordering
    components does not change the values the others produce.
    """
    return Generator(
        lambda source, size: tuple(gen.generate(source.split(), size) for gen in gens),
        f"tuple_of({len(gens)})",
        shrinkers.tuple_shrinker([gen.shrink for gen in gens]),
    )


def lists_of(
    gen: Generator[T], min_length: int = 0, max_length: Optional[int] = None
) -> Generator[list[T]]:
    """Lists whose length grows with size; size 0 yields the shortest list allowed.

    Raises:
        ConstructionError: If the length bounds are negative or inverted.
    """
    if min_length < 0:
        raise ConstructionError(f"lists_of: min_length must not be negative, got {min_length}")
    if max_length is not None and max_length < min_length:
        raise ConstructionError(
            f"lists_of: max_length ({max_length}) must be >= min_length ({min_length})"
        )

    def generate(source: RandomSource, size: int) -> list[T]:
        upper = min_length + size
        if max_length is not None:
            upper = min(upper, max_length)
        length = source.next_in_range(min_length, upper)
        return [gen.generate(source, size) for _ in range(length)]

    return Generator(generate, f"lists_of({gen.label})", shrinkers.list_shrinker(gen.shrink, min_length))


def text(alphabet: str = DEFAULT_ALPHABET, max_length: Optional[int] = None) -> Generator[str]:
    """Strings over ``alphabet`` whose length grows with size.

    Raises:
        ConstructionError: If ``alphabet`` is empty.
    """
    if not alphabet:
        raise ConstructionError("text: alphabet must not be empty")
    chars = lists_of(elements(alphabet), max_length=max_length)
    return Generator(
        lambda source, size: "".join(chars.generate(source, size)),
        "text",
        shrinkers.text_shrinker(alphabet),
    )


def sized(f: Callable[[int], Generator[T]]) -> Generator[T]:
    """Build a generator from the current size hint."""
    return Generator(lambda source, size: f(size).generate(source, size), "sized")


def resize(gen: Generator[T], size: int) -> Generator[T]:
    """Run ``gen`` at a fixed size, ignoring the size the runner passes."""
    if size < 0:
        raise ConstructionError(f"resize: size must not be negative, got {size}")
    return Generator(lambda source, _: gen.generate(source, size), f"resize({gen.label}, {size})", gen.shrink)


def sample(gen: Generator[T], count: int = 10, size: int = 10, seed: int = 0) -> list[T]:
    """Draw ``count`` values for inspection, each from its own split stream."""
    source = RandomSource.from_seed(seed)
    return [gen.generate(source.split(), size) for _ in range(count)]
