"""Unit tests for RandomSource: reproducibility, bounds, splitting and seeds."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from propcheck.errors import ConstructionError, InvalidSeedError
from propcheck.random_source import MASK_64, RandomSource, derive_seed


class TestReproducibility:
    """Same seed and same calls must give the same values."""

    def test_same_seed_same_sequence(self):
        a = RandomSource.from_seed(42)
        b = RandomSource.from_seed(42)
        assert [a.next(1000) for _ in range(50)] == [b.next(1000) for _ in range(50)]

    def test_different_seeds_differ(self):
        a = RandomSource.from_seed(1)
        b = RandomSource.from_seed(2)
        assert [a.next(2**32) for _ in range(10)] != [b.next(2**32) for _ in range(10)]

    def test_state_round_trip(self):
        """from_state(state) continues exactly where the original would."""
        source = RandomSource.from_seed(7)
        source.next(100)
        restored = RandomSource.from_state(source.state)
        assert [source.next(10**9) for _ in range(20)] == [restored.next(10**9) for _ in range(20)]

    def test_copy_advances_independently(self):
        source = RandomSource.from_seed(99)
        clone = source.copy()
        first = source.next(10**6)
        assert clone.next(10**6) == first

    @given(st.integers(min_value=0, max_value=MASK_64))
    def test_reproducible_for_all_seeds(self, seed):
        a = RandomSource(seed)
        b = RandomSource(seed)
        assert [a.next(97) for _ in range(5)] == [b.next(97) for _ in range(5)]


class TestNext:
    """Tests for next() and its helpers."""

    def test_values_within_bound(self):
        source = RandomSource.from_seed(3)
        for bound in (1, 2, 3, 10, 1000, 2**63, 2**64, 2**80):
            for _ in range(200):
                assert 0 <= source.next(bound) < bound

    def test_bound_one_is_always_zero(self):
        source = RandomSource.from_seed(5)
        assert all(source.next(1) == 0 for _ in range(20))

    def test_every_value_reachable(self):
        source = RandomSource.from_seed(11)
        seen = {source.next(6) for _ in range(1000)}
        assert seen == {0, 1, 2, 3, 4, 5}

    @pytest.mark.parametrize("bound", [0, -1])
    def test_non_positive_bound_rejected(self, bound):
        with pytest.raises(ValueError):
            RandomSource.from_seed(1).next(bound)

    @given(st.integers(min_value=0, max_value=MASK_64), st.integers(min_value=1, max_value=2**70))
    def test_next_below_bound_for_any_seed(self, seed, bound):
        assert 0 <= RandomSource(seed).next(bound) < bound

    def test_next_in_range_inclusive(self):
        source = RandomSource.from_seed(8)
        values = {source.next_in_range(-2, 2) for _ in range(500)}
        assert values == {-2, -1, 0, 1, 2}

    def test_next_float_in_unit_interval(self):
        source = RandomSource.from_seed(8)
        assert all(0.0 <= source.next_float() < 1.0 for _ in range(1000))


class TestSplit:
    """Tests for split()."""

    def test_split_is_deterministic(self):
        a = RandomSource.from_seed(21).split()
        b = RandomSource.from_seed(21).split()
        assert [a.next(10**9) for _ in range(10)] == [b.next(10**9) for _ in range(10)]

    def test_children_are_distinct_streams(self):
        parent = RandomSource.from_seed(21)
        first = parent.split()
        second = parent.split()
        assert [first.next(2**32) for _ in range(10)] != [second.next(2**32) for _ in range(10)]

    def test_child_use_does_not_disturb_parent(self):
        """Draws from a child never change what the parent produces next."""
        a = RandomSource.from_seed(4)
        b = RandomSource.from_seed(4)
        child = a.split()
        for _ in range(100):
            child.next(1000)
        b.split()
        assert a.next(10**9) == b.next(10**9)


class TestSeeds:
    """Tests for seed parsing."""

    def test_string_seeds(self):
        assert RandomSource.from_seed("16").state == RandomSource.from_seed(16).state
        assert RandomSource.from_seed("0x10").state == RandomSource.from_seed(16).state

    def test_state_string_seed(self):
        source = RandomSource.from_seed(5)
        assert RandomSource.from_seed(source.state).state == source.state

    def test_clock_seed(self):
        assert isinstance(RandomSource.from_seed(None).seed, int)

    @pytest.mark.parametrize("seed", ["abc", "", "1:2:3", "-5", "x:1", str(2**64), -1, True, 1.5])
    def test_invalid_seeds_rejected(self, seed):
        with pytest.raises(InvalidSeedError):
            RandomSource.from_seed(seed)

    def test_invalid_seed_is_construction_error(self):
        with pytest.raises(ConstructionError):
            RandomSource.from_state("nonsense")

    def test_derive_seed(self):
        assert derive_seed(123) == 123
        assert derive_seed("0xff") == 255
        assert 0 <= derive_seed(None) <= MASK_64

    def test_derive_seed_rejects_state_strings(self):
        with pytest.raises(InvalidSeedError):
            derive_seed("1:2")
