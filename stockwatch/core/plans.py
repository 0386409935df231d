"""
Plan tiers and the quotas derived from them.

A plan's product limit is either a positive int or the ``UNLIMITED`` sentinel.
Unlimited is never represented as a large number so that slicing and counting
code can't silently truncate a store's catalog.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Union

from stockwatch.core.enums import PlanFeature, PlanTier


class _Unlimited:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNLIMITED"

    def __reduce__(self):
        return (_Unlimited, ())


UNLIMITED = _Unlimited()

ProductLimit = Union[int, _Unlimited]


@dataclass(frozen=True)
class PlanQuota:
    tier: PlanTier
    name: str
    max_products: ProductLimit
    features: FrozenSet[PlanFeature] = field(default_factory=frozenset)

    @property
    def is_unlimited(self) -> bool:
        return self.max_products is UNLIMITED

    def allows(self, feature: PlanFeature) -> bool:
        return feature in self.features

    def has_room_for(self, active_count: int) -> bool:
        if self.is_unlimited:
            return True
        return active_count < self.max_products


PLAN_QUOTAS = {
    PlanTier.FREE: PlanQuota(
        tier=PlanTier.FREE,
        name="Free",
        max_products=10,
    ),
    PlanTier.PRO: PlanQuota(
        tier=PlanTier.PRO,
        name="Professional",
        max_products=UNLIMITED,
        features=frozenset({PlanFeature.CHAT_NOTIFICATIONS, PlanFeature.RESTOCK_ALERTS}),
    ),
}


def get_plan_quota(tier) -> PlanQuota:
    return PLAN_QUOTAS[PlanTier.parse(tier)]
