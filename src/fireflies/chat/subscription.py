# Profiles and subscription status.
# Created: 2026-10-05
#
# Profiles come from the auth collaborator; anything missing defaults to the
# free plan.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

FREE_PLAN = "free"
PRO_PLAN = "pro"


@dataclass(frozen=True)
class Profile:
    user_id: str
    email: str | None = None
    full_name: str | None = None
    subscription_plan: str | None = None
    subscription_status: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        return cls(
            user_id=str(data.get("user_id") or data.get("id") or ""),
            email=data.get("email"),
            full_name=data.get("full_name"),
            subscription_plan=data.get("subscription_plan"),
            subscription_status=data.get("subscription_status"),
        )

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "User"


def resolve_subscription(profile: Profile | None) -> dict[str, Any]:
    """Subscription summary in the shape the frontend expects."""
    plan = (profile.subscription_plan if profile else None) or FREE_PLAN
    status = (profile.subscription_status if profile else None) or "active"
    return {
        "subscription_plan": plan,
        "subscription_status": status,
        "isProUser": plan == PRO_PLAN,
    }
