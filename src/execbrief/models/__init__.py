"""Data models — accounts, billing facts, and per-account records."""
from execbrief.models.account import Account
from execbrief.models.billing import BillingFacts, PaymentMethod
from execbrief.models.record import (
    DEFAULT_SECTIONS,
    AccountRecord,
    RevenueResult,
    RevenueSource,
    RiskAssessment,
    RiskFlag,
    RiskKind,
    RiskSeverity,
    TicketSet,
)

__all__ = [
    "DEFAULT_SECTIONS",
    "Account",
    "AccountRecord",
    "BillingFacts",
    "PaymentMethod",
    "RevenueResult",
    "RevenueSource",
    "RiskAssessment",
    "RiskFlag",
    "RiskKind",
    "RiskSeverity",
    "TicketSet",
]
