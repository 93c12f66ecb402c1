"""Plan-limit check evaluated before a rental request is approved."""

from dataclasses import dataclass
from typing import Optional

from gym_office.core.config import MISSING_PLAN_DENY, MISSING_PLAN_UNRESTRICTED
from gym_office.core.exceptions import PlanLimitExceededError, PlanNotFoundError
from gym_office.domain.entities import ClientPlan


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    reason: str
    limit: Optional[int] = None
    current_count: int = 0


def check_plan_quota(
    client_plan_id: Optional[int],
    plan: Optional[ClientPlan],
    approved_count: int,
    on_missing_plan: str = MISSING_PLAN_UNRESTRICTED,
) -> QuotaDecision:
    """Decide whether one more approval fits the client's plan.

    Args:
        client_plan_id: plan id referenced by the client (None: no plan)
        plan: the resolved plan, or None when the id does not resolve
        approved_count: the client's approved, undeleted rental requests
        on_missing_plan: 'unrestricted' or 'deny' for a dangling plan id

    Raises:
        PlanLimitExceededError: approved_count has reached the plan limit
        PlanNotFoundError: plan id does not resolve and policy is 'deny'
    """
    if client_plan_id is None:
        return QuotaDecision(True, "no_plan", None, approved_count)

    if plan is None:
        if on_missing_plan == MISSING_PLAN_DENY:
            raise PlanNotFoundError(client_plan_id)
        return QuotaDecision(True, "plan_not_found", None, approved_count)

    if approved_count >= plan.max_equipment_access:
        raise PlanLimitExceededError(approved_count, plan.max_equipment_access)

    return QuotaDecision(True, "within_limit", plan.max_equipment_access, approved_count)
