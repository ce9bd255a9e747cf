"""
Billing models — typed facts extracted from the financial agent's answers.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    """How the account pays."""

    CREDIT_CARD = "credit_card"
    WIRE = "wire"
    ACH = "ach"
    PAYPAL = "paypal"
    INVOICE = "invoice"
    PREPAID = "prepaid"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> PaymentMethod:
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class BillingFacts(BaseModel):
    """Billing state of one account.

    Every field is independently optional: ``None`` means the agent did not
    answer or the answer held no recognizable value, never zero or "no".
    ``has_autorecharge`` is tri-state for the same reason.
    """

    balance: float | None = None
    credit_limit: float | None = None
    payment_method: PaymentMethod = PaymentMethod.UNKNOWN
    current_month_usage: float | None = None
    next_month_mrc: float | None = None
    daily_run_rate: float | None = None
    has_autorecharge: bool | None = None
    contract_end_date: date | None = None

    # Debugging aids: the raw answers and the text each field was read from.
    answers: dict[str, str | None] = Field(default_factory=dict)
    spans: dict[str, str] = Field(default_factory=dict)

    @property
    def credit_utilization(self) -> float | None:
        """Balance as a percentage of the credit limit (absolute value)."""
        if self.balance is None or self.credit_limit is None or self.credit_limit == 0:
            return None
        return abs(self.balance / self.credit_limit) * 100

    @property
    def known_fields(self) -> int:
        """Number of typed fields with a value."""
        values = [
            self.balance,
            self.credit_limit,
            self.current_month_usage,
            self.next_month_mrc,
            self.daily_run_rate,
            self.has_autorecharge,
            self.contract_end_date,
        ]
        known = sum(1 for v in values if v is not None)
        if self.payment_method != PaymentMethod.UNKNOWN:
            known += 1
        return known
