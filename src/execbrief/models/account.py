"""
Account model — one configured customer and its provider-specific aliases.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Account(BaseModel):
    """A customer account as configured for the brief.

    The BI provider and the ticketing provider know the same customer under
    different names, so each alias is carried alongside the display name.
    Immutable once loaded.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name, also used by --customer filtering")
    org_id: str = Field(description="Billing org identifier used by the financial agent")
    tableau_name: str | None = Field(default=None, description="Account name in the BI revenue view")
    zendesk_org: str | None = Field(default=None, description="Ticketing organization alias")

    @property
    def bi_name(self) -> str:
        """Name to filter the BI revenue view by."""
        return self.tableau_name or self.name

    @property
    def has_ticketing(self) -> bool:
        """Whether a ticketing organization is configured for this account."""
        return bool(self.zendesk_org) and self.zendesk_org != "null"
