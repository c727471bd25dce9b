"""Local persistence collaborators."""

from .history import SummaryHistory, SummaryStore
from .usage import SubscriptionTier, UsageLedger

__all__ = ["SubscriptionTier", "SummaryHistory", "SummaryStore", "UsageLedger"]
