"""Usage ledger for free and subscription quotas."""

from __future__ import annotations

import json
import logging
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError

from cardnews.config import settings
from cardnews.models.summary import OutputStyle

logger = logging.getLogger(__name__)


class SubscriptionTier(str, Enum):
    NONE = "none"
    BASIC = "basic"
    PRO = "pro"
    PREMIUM = "premium"


class UsageState(BaseModel):
    free_used: int = 0
    subscription_active: bool = False
    tier: SubscriptionTier = SubscriptionTier.NONE
    month: str = ""
    text_count: int = 0
    image_count: int = 0


def _month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


class UsageLedger:
    """Answers "may this caller request style X?" and records usage.

    State is read once at construction and only written by ``save``.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        free_limit: Optional[int] = None,
        monthly_text_limit: Optional[int] = None,
        monthly_image_limit: Optional[int] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.path = Path(path or settings.usage_path_obj)
        self.free_limit = free_limit if free_limit is not None else settings.free_usage_limit
        self.monthly_text_limit = (
            monthly_text_limit if monthly_text_limit is not None else settings.monthly_text_limit
        )
        self.monthly_image_limit = (
            monthly_image_limit if monthly_image_limit is not None else settings.monthly_image_limit
        )
        self._today = today
        self.state = self._load()
        self._roll_month()

    @property
    def remaining_free(self) -> int:
        return max(0, self.free_limit - self.state.free_used)

    def can_create(self, style: OutputStyle) -> bool:
        self._roll_month()
        if style is OutputStyle.IMAGE:
            return self._can_create_image()
        return self._can_create_text()

    def record(self, style: OutputStyle) -> None:
        self._roll_month()
        if style is OutputStyle.IMAGE:
            self.state.image_count += 1
            return
        if not self.state.subscription_active:
            self.state.free_used += 1
            logger.info("Free usage %s/%s", self.state.free_used, self.free_limit)
        self.state.text_count += 1

    def update_subscription(self, active: bool, tier: SubscriptionTier) -> None:
        self.state.subscription_active = active
        self.state.tier = tier if active else SubscriptionTier.NONE

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.state.model_dump_json(), encoding="utf-8")

    def _can_create_text(self) -> bool:
        if not self.state.subscription_active or self.state.tier is SubscriptionTier.NONE:
            return self.remaining_free > 0
        if self.state.tier is SubscriptionTier.BASIC:
            return self.state.text_count < self.monthly_text_limit
        return True

    def _can_create_image(self) -> bool:
        if not self.state.subscription_active:
            return False
        if self.state.tier is SubscriptionTier.PRO:
            return self.state.image_count < self.monthly_image_limit
        return self.state.tier is SubscriptionTier.PREMIUM

    def _roll_month(self) -> None:
        current = _month_key(self._today())
        if self.state.month != current:
            if self.state.month:
                logger.info("Resetting monthly usage for %s", current)
            self.state.month = current
            self.state.text_count = 0
            self.state.image_count = 0

    def _load(self) -> UsageState:
        if not self.path.exists():
            return UsageState()
        try:
            return UsageState.model_validate(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.error("Could not read usage ledger %s: %s", self.path, exc)
            return UsageState()
