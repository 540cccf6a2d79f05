"""
Fare & Settlement Arithmetic  (Strategy Pattern)
================================================

Fare
----
Fare = Distance x Rate   (integer credit units, default rate 10)

Fares are fixed when a ride is requested and never recomputed.

Earnings split
--------------
Owner_Share   = floor(Earnings x Owner_Percent / 100)
Network_Share = Earnings - Owner_Share

The network share is taken by subtraction so the two shares always add
up to the settled earnings exactly.

Complexity: O(1) per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, distance: int) -> int: ...


class FlatRatePricing(PricingStrategy):
    def __init__(self, rate: int = 10):
        self.rate = rate

    def calculate(self, distance: int) -> int:
        return distance * self.rate


# ── Earnings split ────────────────────────────────────────────────────


@dataclass(frozen=True)
class EarningsSplit:
    owner_share: int
    network_share: int

    @property
    def total(self) -> int:
        return self.owner_share + self.network_share


def split_earnings(earnings: int, owner_share_percent: int = 80) -> EarningsSplit:
    if earnings < 0:
        raise ValueError(f"earnings must be non-negative, got {earnings}")
    owner_share = earnings * owner_share_percent // 100
    return EarningsSplit(owner_share=owner_share, network_share=earnings - owner_share)
