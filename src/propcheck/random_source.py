"""Random Source module.

A seeded, splittable pseudo-random stream (SplitMix64). Every draw made during
a run flows through one of these, so a run is reproducible from its seed.
"""

import time
from typing import Optional, Union

from propcheck.errors import InvalidSeedError

MASK_64 = (1 << 64) - 1
GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def _mix64(z: int) -> int:
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & MASK_64
    return z ^ (z >> 31)


def _mix_gamma(z: int) -> int:
    z = ((z ^ (z >> 33)) * 0xFF51AFD7ED558CCD) & MASK_64
    z = ((z ^ (z >> 33)) * 0xC4CEB9FE1A85EC53) & MASK_64
    z = (z ^ (z >> 33)) | 1
    # Gammas with too few bit transitions produce poorly mixed streams.
    if bin(z ^ (z >> 1)).count("1") < 24:
        z ^= 0xAAAAAAAAAAAAAAAA
    return z


class RandomSource:
    """Deterministic, splittable random stream.

    Two sources built from the same seed and driven by the same sequence of
    calls produce identical values. ``split()`` derives an independent child
    stream, which lets composite generators give each component its own
    stream so that reordering components does not change their draws.

    Instances are not thread-safe; one owner advances a source at a time.
    """

    def __init__(self, seed: int, gamma: int = GOLDEN_GAMMA):
        """Initialize the RandomSource.

        Args:
            seed: Initial 64-bit state. Larger values are truncated.
            gamma: Stream increment; forced odd.
        """
        self._seed = seed & MASK_64
        self._gamma = (gamma & MASK_64) | 1

    @classmethod
    def from_seed(cls, seed: Union[int, str, None] = None) -> "RandomSource":
        """Build a source from an explicit seed, a state string, or the clock.

        Args:
            seed: An int, a decimal/hex string, a ``"<seed>:<gamma>"`` state
                string as produced by ``state``, or None for a time-derived seed.

        Returns:
            A new RandomSource.

        Raises:
            InvalidSeedError: If ``seed`` is a string that cannot be parsed.
        """
        if seed is None:
            return cls(time.time_ns())
        if isinstance(seed, bool) or not isinstance(seed, (int, str)):
            raise InvalidSeedError(f"seed must be an int or a string, got {seed!r}")
        if isinstance(seed, int):
            if seed < 0:
                raise InvalidSeedError(f"seed must be non-negative, got {seed}")
            return cls(seed)
        if ":" in seed:
            return cls.from_state(seed)
        return cls(_parse_word(seed))

    @classmethod
    def from_state(cls, state: str) -> "RandomSource":
        """Restore a source from a ``"<seed>:<gamma>"`` state string.

        Raises:
            InvalidSeedError: If the string is malformed.
        """
        parts = state.strip().split(":")
        if len(parts) != 2:
            raise InvalidSeedError(f"state must look like '<seed>:<gamma>', got {state!r}")
        return cls(_parse_word(parts[0]), _parse_word(parts[1]))

    @property
    def seed(self) -> int:
        """Current 64-bit state word."""
        return self._seed

    @property
    def state(self) -> str:
        """Opaque string that ``from_state`` turns back into an identical source."""
        return f"{self._seed}:{self._gamma}"

    def _next_u64(self) -> int:
        self._seed = (self._seed + self._gamma) & MASK_64
        return _mix64(self._seed)

    def next(self, bound: int) -> int:
        """Return a uniformly distributed int in ``[0, bound)``.

        Uses rejection sampling over the smallest covering bit width, so there
        is no modulo bias, and bounds wider than 64 bits are supported.

        Raises:
            ValueError: If ``bound`` is not positive.
        """
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        if bound == 1:
            return 0
        bits = (bound - 1).bit_length()
        words = (bits + 63) // 64
        mask = (1 << bits) - 1
        while True:
            value = 0
            for _ in range(words):
                value = (value << 64) | self._next_u64()
            value &= mask
            if value < bound:
                return value

    def next_in_range(self, low: int, high: int) -> int:
        """Return a uniformly distributed int in ``[low, high]`` inclusive."""
        if low > high:
            raise ValueError(f"low ({low}) must be <= high ({high})")
        return low + self.next(high - low + 1)

    def next_float(self) -> float:
        """Return a float in ``[0.0, 1.0)`` with 53 bits of precision."""
        return (self._next_u64() >> 11) * (1.0 / (1 << 53))

    def split(self) -> "RandomSource":
        """Derive an independent child stream and advance this one."""
        child_seed = self._next_u64()
        self._seed = (self._seed + self._gamma) & MASK_64
        return RandomSource(child_seed, _mix_gamma(self._seed))

    def copy(self) -> "RandomSource":
        """Return a source in the same state that advances independently."""
        return RandomSource(self._seed, self._gamma)

    def __repr__(self) -> str:
        return f"RandomSource(state={self.state!r})"


def _parse_word(text: str) -> int:
    try:
        value = int(text.strip(), 0)
    except ValueError as e:
        raise InvalidSeedError(f"invalid seed value {text!r}") from e
    if value < 0 or value > MASK_64:
        raise InvalidSeedError(f"seed value out of range: {text!r}")
    return value


def derive_seed(seed: Optional[Union[int, str]]) -> int:
    """Resolve a configured seed into the integer echoed in reports.

    Args:
        seed: An explicit int or string seed, or None to derive one from the clock.

    Returns:
        The 64-bit integer seed used to build the run's RandomSource.

    Raises:
        InvalidSeedError: If the seed cannot be parsed or is a state string.
    """
    if seed is None:
        return time.time_ns() & MASK_64
    if isinstance(seed, str):
        if ":" in seed:
            raise InvalidSeedError(f"a run seed must be a single integer, got {seed!r}")
        return _parse_word(seed)
    if isinstance(seed, bool) or not isinstance(seed, int) or seed < 0:
        raise InvalidSeedError(f"seed must be a non-negative integer, got {seed!r}")
    return seed & MASK_64
