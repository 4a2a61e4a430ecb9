from __future__ import annotations

from rng import XorShift32


def test_known_sequence_from_seed_one() -> None:
    rng = XorShift32(1)
    assert rng.next_uint32() == 270369
    assert rng.next_uint32() == 67634689


def test_zero_seed_is_replaced_by_one() -> None:
    a = XorShift32(0)
    b = XorShift32(1)
    assert a.state == 1
    assert [a.next_uint32() for _ in range(5)] == [b.next_uint32() for _ in range(5)]


def test_seed_is_coerced_to_unsigned_32_bits() -> None:
    assert XorShift32(2**32 + 7).state == 7
    assert XorShift32(-1).state == 0xFFFFFFFF
    # 2**32 wraps to zero, which is then replaced
    assert XorShift32(2**32).state == 1


def test_same_seed_same_stream() -> None:
    a = XorShift32(987654321)
    b = XorShift32(987654321)
    assert [a.next_float() for _ in range(1000)] == [b.next_float() for _ in range(1000)]


def test_state_stays_within_32_bits_and_never_zero() -> None:
    rng = XorShift32(42)
    for _ in range(10_000):
        x = rng.next_uint32()
        assert 0 < x <= 0xFFFFFFFF


def test_next_float_is_uint_over_two_pow_32() -> None:
    a = XorShift32(5)
    b = XorShift32(5)
    assert a.next_float() == b.next_uint32() / 2**32


def test_uniform_and_bernoulli_bounds() -> None:
    rng = XorShift32(2024)
    for _ in range(5000):
        v = rng.uniform(2.0, 3.0)
        assert 2.0 <= v < 3.0
    assert not any(rng.bernoulli(0.0) for _ in range(1000))
    assert all(rng.bernoulli(1.0) for _ in range(1000))


def test_uniform_degenerate_range_returns_lower_bound() -> None:
    rng = XorShift32(3)
    assert rng.uniform(0.0, 0.0) == 0.0
