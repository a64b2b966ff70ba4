"""Arbitrary module.

An Arbitrary pairs a Generator with a shrinker for one semantic type. The
ArbitraryRegistry maps explicit tags to default arbitraries so composite
shapes can be defined once and reused across properties. A registry is an
ordinary object: build one per test session and pass it to the runner.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, Optional, TypeVar, Union

from propcheck import generators as gen
from propcheck import shrinkers
from propcheck.errors import ConstructionError, UnknownArbitraryError
from propcheck.generators import Generator

T = TypeVar("T")
U = TypeVar("U")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Arbitrary(Generic[T]):
    """Default generation and shrinking behavior for a type.

    Attributes:
        generator: Produces random values.
        shrink: Maps a value to a lazy sequence of smaller values of the same type.
    """

    generator: Generator[T]
    shrink: Callable[[T], Iterator[T]] = shrinkers.no_shrink

    def filter(self, predicate: Callable[[T], bool], max_retries: int = gen.DEFAULT_FILTER_RETRIES) -> "Arbitrary[T]":
        """Restrict both generation and shrinking to values satisfying ``predicate``."""
        shrink = self.shrink

        def filtered_shrink(value: T) -> Iterator[T]:
            return (candidate for candidate in shrink(value) if predicate(candidate))

        return Arbitrary(self.generator.filter(predicate, max_retries), filtered_shrink)

    def convert(self, to: Callable[[T], U], back: Callable[[U], T]) -> "Arbitrary[U]":
        """Derive an arbitrary for another type through a pair of conversions.

        Generation maps forward with ``to``; shrinking maps a value back with
        ``back``, shrinks it as a ``T`` and maps each candidate forward again.
        """
        shrink = self.shrink

        def converted_shrink(value: U) -> Iterator[U]:
            return (to(candidate) for candidate in shrink(back(value)))

        return Arbitrary(self.generator.map(to), converted_shrink)


ArbitraryLike = Union[Arbitrary, Generator, Hashable]


# ============================================================
# Built-in arbitraries
# ============================================================


def arbitrary_int(low: Optional[int] = None, high: Optional[int] = None) -> Arbitrary[int]:
    """Integers in ``[low, high]`` shrinking toward the in-range value nearest zero.

    Without bounds the range follows the size hint: ``[-size, size]``.

    Raises:
        ConstructionError: If only one bound is given or ``low > high``.
    """
    if low is None and high is None:
        return Arbitrary(gen.integers(), shrinkers.int_shrinker())
    if low is None or high is None:
        raise ConstructionError("arbitrary_int: give both low and high, or neither")
    return Arbitrary(gen.choose_int(low, high), shrinkers.int_shrinker(low, high))


def arbitrary_bool() -> Arbitrary[bool]:
    return Arbitrary(gen.booleans(), shrinkers.shrink_bool)


def arbitrary_float() -> Arbitrary[float]:
    return Arbitrary(gen.floats(), shrinkers.shrink_float)


def arbitrary_text(alphabet: str = gen.DEFAULT_ALPHABET, max_length: Optional[int] = None) -> Arbitrary[str]:
    return Arbitrary(gen.text(alphabet, max_length), shrinkers.text_shrinker(alphabet))


def arbitrary_elements(items: Iterable[T]) -> Arbitrary[T]:
    """Uniform choice from ``items``; shrinks toward earlier items."""
    generator = gen.elements(items)
    return Arbitrary(generator, generator.shrink)


def arbitrary_list(
    element: "Arbitrary[T]", min_length: int = 0, max_length: Optional[int] = None
) -> Arbitrary[list[T]]:
    return Arbitrary(
        gen.lists_of(element.generator, min_length, max_length),
        shrinkers.list_shrinker(element.shrink, min_length),
    )


def arbitrary_tuple(*elements: Arbitrary[Any]) -> Arbitrary[tuple]:
    return Arbitrary(
        gen.tuple_of(*(a.generator for a in elements)),
        shrinkers.tuple_shrinker([a.shrink for a in elements]),
    )


# ============================================================
# Registry
# ============================================================


class ArbitraryRegistry:
    """Maps explicit type tags to default arbitraries.

    Tags are any hashable value: a Python type such as ``int`` or a string such
    as ``"currency"``. Lookup is by tag only; nothing is inferred from values.
    A later registration for a tag replaces the earlier one.
    """

    def __init__(self, entries: Optional[dict] = None):
        self._entries: dict[Hashable, Arbitrary] = dict(entries or {})

    def register(self, tag: Hashable, arbitrary: Arbitrary) -> None:
        """Register ``arbitrary`` as the default for ``tag``.

        Raises:
            ConstructionError: If ``arbitrary`` is not an Arbitrary.
        """
        if not isinstance(arbitrary, Arbitrary):
            raise ConstructionError(f"register: expected an Arbitrary for {tag!r}, got {arbitrary!r}")
        if tag in self._entries:
            logger.debug(f"Replacing arbitrary registered for {tag!r}")
        self._entries[tag] = arbitrary

    def get(self, tag: Hashable) -> Arbitrary:
        """Return the arbitrary registered for ``tag``.

        Raises:
            UnknownArbitraryError: If nothing is registered for ``tag``.
        """
        try:
            return self._entries[tag]
        except (KeyError, TypeError):
            raise UnknownArbitraryError(f"no arbitrary registered for {tag!r}") from None

    def resolve(self, target: ArbitraryLike) -> Arbitrary:
        """Turn an Arbitrary, a bare Generator or a registry tag into an Arbitrary.

        Bare generators shrink with their own default shrinker, if any.
        """
        if isinstance(target, Arbitrary):
            return target
        if isinstance(target, Generator):
            return Arbitrary(target, target.shrink)
        return self.get(target)

    def tags(self) -> list:
        return list(self._entries)

    def copy(self) -> "ArbitraryRegistry":
        return ArbitraryRegistry(self._entries)

    def __contains__(self, tag: Hashable) -> bool:
        try:
            return tag in self._entries
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._entries)


def default_registry() -> ArbitraryRegistry:
    """Build a fresh registry holding the built-in arbitraries.

    Registered tags: ``int``, ``bool``, ``float``, ``str`` and ``list`` (lists
    of size-bounded integers).
    """
    registry = ArbitraryRegistry()
    registry.register(int, arbitrary_int())
    registry.register(bool, arbitrary_bool())
    registry.register(float, arbitrary_float())
    registry.register(str, arbitrary_text())
    registry.register(list, arbitrary_list(arbitrary_int()))
    return registry
