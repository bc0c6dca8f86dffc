"""Shared test fixtures for goal forecast tests."""

from src.models.results import ResolvedGoal
from src.models.schemas import GoalRequest, Transaction


def make_transaction(
    merchant: str = "Chipotle",
    amount: float = -45.0,
    category: str | None = "Dining",
    account: str = "Checking",
    date: str = "2025-01-15",
) -> Transaction:
    return Transaction(
        date=date,
        amount=amount,
        merchant=merchant,
        category=category,
        account=account,
    )


def make_month(
    month: str = "2025-01",
    income: float = 4000.0,
    spending: dict[str, float] | None = None,
) -> list[Transaction]:
    """One paycheck plus one outflow per category, all in *month*."""
    txns = [make_transaction("Employer", income, "Income", date=f"{month}-01")]
    if spending is None:
        spending = {"Rent": 2000.0, "Dining": 400.0, "Shopping": 200.0, "Subscriptions": 40.0}
    for i, (cat, amount) in enumerate(spending.items()):
        txns.append(make_transaction(
            merchant=f"{cat} merchant",
            amount=-amount,
            category=cat,
            date=f"{month}-{10 + i:02d}",
        ))
    return txns


def make_goal(
    target_amount: float | None = 12000.0,
    months_to_deadline: int | None = 12,
    current_savings: float = 0.0,
    buffer: float = 0.0,
    protected_categories: list[str] | None = None,
    goal_text: str | None = None,
) -> GoalRequest:
    return GoalRequest(
        target_amount=target_amount,
        months_to_deadline=months_to_deadline,
        current_savings=current_savings,
        buffer=buffer,
        protected_categories=protected_categories or [],
        goal_text=goal_text,
    )


def make_resolved_goal(
    target_amount: float = 1200.0,
    months_to_deadline: int = 12,
    current_savings: float = 0.0,
    buffer: float = 0.0,
    protected_categories: set[str] | None = None,
) -> ResolvedGoal:
    return ResolvedGoal(
        target_amount=target_amount,
        months_to_deadline=months_to_deadline,
        current_savings=current_savings,
        buffer=buffer,
        protected_categories=frozenset(protected_categories or ()),
    )
