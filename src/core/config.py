"""Process-wide forecasting settings.

Category tables, lever constants and the augmentation endpoint live here so
that tests and alternative deployments can swap them without touching the
engine.
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_FIXED_CATEGORIES = frozenset({
    "Rent", "Mortgage", "Loan", "Utilities", "Internet",
    "Phone", "Insurance", "Tuition", "Subscriptions",
})

DEFAULT_DISCRETIONARY_CATEGORIES = frozenset({
    "Dining", "Restaurants", "Shopping", "Rideshare",
    "Entertainment", "Travel", "Hobbies",
})

SUBSCRIPTIONS_CATEGORY = "Subscriptions"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ForecastSettings:
    fixed_categories: frozenset[str] = DEFAULT_FIXED_CATEGORIES
    discretionary_categories: frozenset[str] = DEFAULT_DISCRETIONARY_CATEGORIES
    baseline_months: int = 3
    variable_trim_fraction: float = 0.20
    subscription_category: str = SUBSCRIPTIONS_CATEGORY
    subscription_cleanup_fraction: float = 0.25
    subscription_cleanup_floor: float = 15.0
    subscription_cleanup_cap: float = 30.0
    timeline_extension_months: int = 1
    income_boost: float = 100.0
    suggestion_api_url: Optional[str] = None
    suggestion_api_key: Optional[str] = None
    suggestion_api_timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "ForecastSettings":
        """Build settings from ``SUGGESTION_API_*`` environment variables."""
        url = os.environ.get("SUGGESTION_API_URL", "").strip() or None
        key = os.environ.get("SUGGESTION_API_KEY", "").strip() or None
        timeout = os.environ.get("SUGGESTION_API_TIMEOUT", "").strip()
        return cls(
            suggestion_api_url=url,
            suggestion_api_key=key,
            suggestion_api_timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )
