from __future__ import annotations

_MASK32 = 0xFFFFFFFF
_TWO_32 = float(2 ** 32)


class XorShift32:
    """
    32-bit xorshift generator (13/17/5).

    The draw sequence is part of the simulator's observable behaviour: the same
    seed must give the same customers on every platform, so numpy's generators
    are not used here.
    """

    __slots__ = ("state",)

    def __init__(self, seed: int):
        # all-zero state never advances
        self.state = (int(seed) & _MASK32) or 1

    def next_uint32(self) -> int:
        x = self.state
        x ^= (x << 13) & _MASK32
        x ^= x >> 17
        x ^= (x << 5) & _MASK32
        self.state = x
        return x

    def next_float(self) -> float:
        return self.next_uint32() / _TWO_32

    def uniform(self, lo: float, hi: float) -> float:
        return lo + (hi - lo) * self.next_float()

    def bernoulli(self, p: float) -> bool:
        return self.next_float() < p
