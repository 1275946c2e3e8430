"""
Low-balance alerting.

A tenant's balance is classified by its available credits against two
thresholds; critical wins when both apply.
"""

from dataclasses import dataclass

from src.domain.entities.enums import BalanceStatus

DEFAULT_LOW_BALANCE_THRESHOLD = 10
DEFAULT_CRITICAL_BALANCE_THRESHOLD = 5


@dataclass(frozen=True)
class BalanceThresholds:
    low: int = DEFAULT_LOW_BALANCE_THRESHOLD
    critical: int = DEFAULT_CRITICAL_BALANCE_THRESHOLD

    def __post_init__(self):
        if self.critical < 0 or self.low < self.critical:
            raise ValueError("Balance thresholds need low >= critical >= 0")

    def status(self, available: int) -> BalanceStatus:
        """Thresholds are inclusive: `available == low` is already low"""
        if available <= self.critical:
            return BalanceStatus.critical
        if available <= self.low:
            return BalanceStatus.low
        return BalanceStatus.healthy


DEFAULT_BALANCE_THRESHOLDS = BalanceThresholds()
