"""propcheck: property-based testing with reproducible generation and shrinking."""

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
from propcheck.errors import (
    ConstructionError,
    DiscardTrial,
    InvalidSeedError,
    PropertyFalsified,
    PropertyInconclusive,
    UnknownArbitraryError,
)
from propcheck.generators import (
    Generator,
    booleans,
    choose_int,
    constant,
    elements,
    floats,
    frequency,
    integers,
    lists_of,
    one_of,
    resize,
    sized,
    text,
    tuple_of,
)
from propcheck.models import Discarded, Failed, Falsified, Passed, PropertyOutcome, RunConfig, Status
from propcheck.random_source import RandomSource
from propcheck.reporter import Reporter, assert_ok
from propcheck.runner import AsyncPropertyRunner, Property, PropertyRunner, assume, for_all, prop
from propcheck.shrinkers import ShrinkTree

__version__ = "0.1.0"
