"""Unit tests for Arbitrary and ArbitraryRegistry."""

import pytest

from propcheck.arbitrary import (
    Arbitrary,
    ArbitraryRegistry,
    arbitrary_bool,
    arbitrary_elements,
    arbitrary_float,
    arbitrary_int,
    arbitrary_list,
    arbitrary_text,
    arbitrary_tuple,
    default_registry,
)
from propcheck.errors import ConstructionError, UnknownArbitraryError
from propcheck.generators import choose_int, constant, elements, tuple_of
from propcheck.random_source import RandomSource


class TestArbitrary:
    """Tests for Arbitrary construction and derivation."""

    def test_range_int_generates_and_shrinks_in_range(self):
        arb = arbitrary_int(5, 10)
        source = RandomSource.from_seed(1)
        for _ in range(100):
            value = arb.generator.generate(source, 50)
            assert 5 <= value <= 10
            assert all(5 <= c <= 10 for c in arb.shrink(value))

    def test_int_needs_both_bounds(self):
        with pytest.raises(ConstructionError):
            arbitrary_int(low=1)

    def test_filter_applies_to_shrinking(self):
        """Shrink candidates never leave the filtered value space."""
        arb = arbitrary_int(-100, 100).filter(lambda x: x % 2 == 1)
        source = RandomSource.from_seed(2)
        value = arb.generator.generate(source, 50)
        assert value % 2 == 1
        assert all(c % 2 == 1 for c in arb.shrink(99))

    def test_convert_maps_both_ways(self):
        arb = arbitrary_int(0, 100).convert(str, int)
        value = arb.generator.generate(RandomSource.from_seed(3), 10)
        assert isinstance(value, str)
        assert list(arb.shrink("10")) == ["0", "5", "8", "9"]

    def test_elements_shrink_toward_earlier_items(self):
        arb = arbitrary_elements(["small", "medium", "large"])
        assert list(arb.shrink("large")) == ["small", "medium"]
        assert list(arb.shrink("small")) == []
        assert list(arb.shrink("unknown")) == []

    def test_list_and_tuple(self):
        arb = arbitrary_tuple(arbitrary_list(arbitrary_int(0, 9), max_length=3), arbitrary_bool())
        xs, flag = arb.generator.generate(RandomSource.from_seed(4), 20)
        assert len(xs) <= 3
        assert isinstance(flag, bool)
        assert list(arb.shrink(([1], True)))[0] == ([], True)

    def test_text_and_float(self):
        source = RandomSource.from_seed(5)
        assert isinstance(arbitrary_text("ab").generator.generate(source, 10), str)
        assert isinstance(arbitrary_float().generator.generate(source, 10), float)

    def test_default_shrink_is_empty(self):
        assert list(Arbitrary(choose_int(0, 10)).shrink(5)) == []


class TestArbitraryRegistry:
    """Tests for ArbitraryRegistry."""

    def test_register_and_get(self):
        registry = ArbitraryRegistry()
        arb = arbitrary_int(0, 1)
        registry.register("bit", arb)
        assert registry.get("bit") is arb
        assert "bit" in registry
        assert len(registry) == 1

    def test_later_registration_replaces(self):
        registry = ArbitraryRegistry()
        registry.register(int, arbitrary_int(0, 1))
        replacement = arbitrary_int(5, 6)
        registry.register(int, replacement)
        assert registry.get(int) is replacement
        assert registry.tags() == [int]

    def test_unknown_tag(self):
        registry = ArbitraryRegistry()
        with pytest.raises(UnknownArbitraryError, match="currency"):
            registry.get("currency")

    def test_unknown_tag_is_construction_and_key_error(self):
        with pytest.raises(ConstructionError):
            ArbitraryRegistry().get(int)
        with pytest.raises(KeyError):
            ArbitraryRegistry().get(int)

    def test_unhashable_tag(self):
        with pytest.raises(UnknownArbitraryError):
            ArbitraryRegistry().get([1, 2])

    def test_unhashable_tag_is_not_contained(self, registry):
        assert [1, 2] not in registry

    def test_register_rejects_non_arbitrary(self):
        with pytest.raises(ConstructionError):
            ArbitraryRegistry().register(int, choose_int(0, 1))

    def test_resolve(self, registry):
        arb = arbitrary_int(0, 3)
        assert registry.resolve(arb) is arb
        wrapped = registry.resolve(choose_int(0, 3))
        assert isinstance(wrapped, Arbitrary)
        assert list(wrapped.shrink(3)) == [0, 2]
        assert list(registry.resolve(constant(3)).shrink(3)) == []
        assert registry.resolve(int) is registry.get(int)

    def test_resolve_keeps_composite_generator_shrinking(self, registry):
        wrapped = registry.resolve(tuple_of(choose_int(5, 10), elements(["a", "b"])))
        assert list(wrapped.shrink((7, "b"))) == [(5, "b"), (6, "b"), (7, "a")]

    def test_default_registry_contents(self, registry):
        for tag in (int, bool, float, str, list):
            assert tag in registry

    def test_registries_are_isolated(self):
        """Registering in one registry never affects another."""
        first = default_registry()
        second = default_registry()
        first.register("currency", arbitrary_elements(["USD"]))
        assert "currency" in first
        assert "currency" not in second

    def test_copy_is_independent(self, registry):
        clone = registry.copy()
        clone.register("extra", arbitrary_bool())
        assert "extra" not in registry

    def test_composite_shape_defined_once(self, registry):
        """A composite arbitrary registered under a tag is reusable everywhere."""
        registry.register(
            "currency",
            arbitrary_tuple(arbitrary_elements(["USD", "EUR", "TWD"]), arbitrary_int(0, 10_000)),
        )
        code, amount = registry.get("currency").generator.generate(RandomSource.from_seed(6), 10)
        assert code in {"USD", "EUR", "TWD"}
        assert 0 <= amount <= 10_000
