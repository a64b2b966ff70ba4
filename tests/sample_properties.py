"""Property declarations used by the command-line script tests."""

from propcheck.arbitrary import arbitrary_int, arbitrary_list
from propcheck.runner import prop


@prop(arbitrary_int(1, 100), arbitrary_int(1, 100))
def sum_at_least_two(a, b):
    return a + b >= 2


@prop(arbitrary_list(arbitrary_int(-10, 10)))
def reverse_twice_is_identity(xs):
    return list(reversed(list(reversed(xs)))) == xs


@prop(arbitrary_int(-100, 100))
def always_non_negative(x):
    return x >= 0
