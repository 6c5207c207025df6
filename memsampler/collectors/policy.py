"""
memsampler.collectors.policy
AUTHOR: carter-vin

Derived "used" memory formula

The key set a policy names is the reader's RequiredKeys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol


class _Stats(Protocol):
    total: int
    free: int
    used: int


@dataclass(frozen=True)
class UsedPolicy:
    """
    used = total - free - sum(subtract_keys)

    - name: reported in sample meta
    - total_key / free_key: copied into total / free
    """

    name: str
    total_key: str
    free_key: str
    subtract_keys: tuple[str, ...] = ()

    @property
    def required_keys(self) -> tuple[str, ...]:
        return (self.total_key, self.free_key, *self.subtract_keys)

    def apply(self, cache: Mapping[str, int], stats: _Stats) -> None:
        """
        Overwrite stats in place from cached values
        """
        # reader seeded every required key, KeyError here is a bug
        total = cache[self.total_key]
        free = cache[self.free_key]

        stats.total = total
        stats.free = free
        stats.used = total - free - sum(cache[key] for key in self.subtract_keys)


# free(1): used = MemTotal - MemFree - Buffers - Cached - SReclaimable
FREE_POLICY = UsedPolicy(
    name="free",
    total_key="MemTotal",
    free_key="MemFree",
    subtract_keys=("Buffers", "Cached", "SReclaimable"),
)
