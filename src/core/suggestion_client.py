"""Client for an external suggestion-generation service.

Sends a plain-text prompt describing the goal and recent spending to a
configurable endpoint and reads back a JSON array of suggestions. The
service is optional: when no endpoint is configured, or anything goes
wrong, the client contributes no suggestions.
"""

import json
import logging
import threading
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from src.core.analyzers import median, sample_variance
from src.core.config import DEFAULT_TIMEOUT, SUBSCRIPTIONS_CATEGORY, ForecastSettings
from src.models.results import SuggestionContext
from src.models.schemas import Suggestion

logger = logging.getLogger("goal_forecast")

PROMPT_TEMPLATE = """\
Role: You are a financial wellness assistant focused on supportive, non-judgmental guidance.

Goal:
Target: ${target:,.2f}
Deadline: {months} months
Monthly gap to close: ${gap:,.2f}

Spending summary (median per month, last {history_months} months):
{breakdown}

Detected patterns:
High-variance categories: {high_variance}
Recurring subscriptions: {subscriptions}

User preferences:
Protected categories: {protected}

Constraints:
- Avoid shaming, judgment, or absolute language.
- Avoid generic advice like "spend less" or "cap category".
- Do not recommend cuts to essentials (rent, groceries, utilities) or to protected categories.
- No financial or investment advice.
- Suggest small, concrete behavior changes framed as optional tradeoffs.
- Quantify the estimated monthly impact and be transparent about assumptions.

Task:
Generate 3-5 personalized suggestions that could realistically help close the monthly gap.

Output: a JSON array, each item shaped like
{{"title": "...", "action": "...", "impactPerMonth": 0.00, "rationale": "...",
 "leverType": "variable_trim|subscription_cleanup|income|timeline",
 "newMonthsToDeadline": null, "newRequiredMonthly": null}}
"""


class SuggestionGenerator(Protocol):
    """Anything that can contribute extra suggestions for a goal."""

    def generate(self, context: SuggestionContext) -> list[Suggestion]:
        ...


class NullSuggestionGenerator:
    """Generator that never suggests anything."""

    def generate(self, context: SuggestionContext) -> list[Suggestion]:
        return []


def build_prompt(context: SuggestionContext) -> str:
    history = context.category_spend_history
    by_median = sorted(history.items(), key=lambda item: median(item[1]), reverse=True)
    breakdown = "\n".join(
        f"{cat or 'Uncategorized'}: ${median(values):,.2f}" for cat, values in by_median
    ) or "No spending recorded"

    by_variance = sorted(history.items(), key=lambda item: sample_variance(item[1]), reverse=True)
    high_variance = ", ".join(cat or "Uncategorized" for cat, _ in by_variance[:5]) or "None"

    protected = ", ".join(sorted(context.goal.protected_categories)) or "None"
    return PROMPT_TEMPLATE.format(
        target=context.goal.target_amount,
        months=context.goal.months_to_deadline,
        gap=context.gap,
        history_months=len(context.baseline_months),
        breakdown=breakdown,
        high_variance=high_variance,
        subscriptions="Subscriptions present" if SUBSCRIPTIONS_CATEGORY in history else "None detected",
        protected=protected,
    )


class SuggestionClient:
    """Synchronous HTTP client for the suggestion service."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._client: Optional[httpx.Client] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: ForecastSettings) -> "SuggestionClient":
        return cls(
            api_url=settings.suggestion_api_url,
            api_key=settings.suggestion_api_key,
            timeout=settings.suggestion_api_timeout,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_url)

    @property
    def client(self) -> httpx.Client:
        # Tool calls run in worker threads; build one shared client.
        with self._lock:
            if self._client is None or self._client.is_closed:
                headers = {"Content-Type": "application/json"}
                if self.api_key:
                    headers["Authorization"] = f"Bearer {self.api_key}"
                self._client = httpx.Client(headers=headers, timeout=self.timeout)
            return self._client

    def close(self):
        """Close the HTTP client."""
        with self._lock:
            if self._client and not self._client.is_closed:
                self._client.close()

    def generate(self, context: SuggestionContext) -> list[Suggestion]:
        """Ask the service for suggestions; any failure yields ``[]``."""
        if not self.enabled:
            return []

        try:
            response = self.client.post(self.api_url, json={"prompt": build_prompt(context)})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Suggestion service returned %s", e.response.status_code)
            return []
        except httpx.HTTPError as e:
            logger.warning("Suggestion service request failed: %s", e)
            return []
        except json.JSONDecodeError:
            logger.warning("Suggestion service returned a non-JSON body")
            return []

        if not isinstance(body, list):
            logger.warning("Suggestion service returned %s, expected a list", type(body).__name__)
            return []

        suggestions: list[Suggestion] = []
        for item in body:
            try:
                suggestions.append(Suggestion.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed suggestion: %s error(s)", e.error_count())
        return suggestions
