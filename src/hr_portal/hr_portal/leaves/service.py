from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from .model import LeaveType
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(
        self,
        leaves: LeaveRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._leaves = leaves
        self._policy = policy or AccessPolicy()
        self._clock = clock

    def list_types(self) -> Sequence[LeaveType]:
        return self._leaves.list_types()

    def apply(
        self,
        actor: Actor,
        *,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
    ) -> int:
        self._policy.require(actor, "leaves", Action.CREATE, owner_profile_id=actor.profile_id)

        if not any(t.leave_type_id == int(leave_type_id) for t in self._leaves.list_types()):
            raise ValidationError("Unknown leave type")

        total_days = (end_date - start_date).days + 1
        if total_days < 1:
            raise ValidationError("End date must be on or after start date")

        leave_id = self._leaves.create_leave(
            profile_id=actor.profile_id,
            leave_type_id=int(leave_type_id),
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=optional_text(reason),
        )
        logger.info("Profile %s applied for %d day(s) of leave (%s)", actor.profile_id, total_days, leave_id)
        return leave_id

    def approve(self, actor: Actor, leave_id: int) -> None:
        leave = self._get_decidable(actor, leave_id)
        if not self._leaves.approve_leave(leave_id=leave.leave_id, decided_by=actor.profile_id, decided_at=self._clock()):
            raise ValidationError("Leave request has already been processed")
        logger.info("Leave %s approved by profile %s", leave_id, actor.profile_id)

    def reject(self, actor: Actor, leave_id: int, *, reason: Optional[str] = None) -> None:
        leave = self._get_decidable(actor, leave_id)
        ok = self._leaves.reject_leave(
            leave_id=leave.leave_id,
            decided_by=actor.profile_id,
            decided_at=self._clock(),
            rejection_reason=optional_text(reason),
        )
        if not ok:
            raise ValidationError("Leave request has already been processed")
        logger.info("Leave %s rejected by profile %s", leave_id, actor.profile_id)

    def cancel(self, actor: Actor, leave_id: int) -> None:
        leave = self._leaves.get_leave(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        self._policy.require(actor, "leaves", Action.UPDATE, owner_profile_id=leave.profile_id, status=leave.status)
        if not self._leaves.cancel_leave(leave_id=leave.leave_id):
            raise ValidationError("Leave request has already been processed")
        logger.info("Leave %s cancelled by profile %s", leave_id, actor.profile_id)

    def list_leaves(self, actor: Actor, *, status: Optional[LeaveStatus] = None) -> List[dict]:
        scope = self._policy.read_scope(actor, "leaves")
        self._policy.require(actor, "leaves", Action.READ, owner_profile_id=scope)
        return list(self._leaves.list_leaves(profile_id=scope, status=status, limit=DEFAULT_LIST_LIMIT))

    def list_my_leaves(self, actor: Actor) -> List[dict]:
        self._policy.require(actor, "leaves", Action.READ, owner_profile_id=actor.profile_id)
        return list(self._leaves.list_leaves(profile_id=actor.profile_id, limit=DEFAULT_LIST_LIMIT))

    def count_pending(self, actor: Actor) -> int:
        self._policy.require(actor, "leaves", Action.READ, owner_profile_id=actor.profile_id)
        return self._leaves.count_leaves(profile_id=actor.profile_id, status=LeaveStatus.PENDING)

    def balances(self, actor: Actor, *, profile_id: Optional[int] = None, year: Optional[int] = None) -> List[dict]:
        profile_id = int(profile_id) if profile_id is not None else actor.profile_id
        self._policy.require(actor, "leave_balances", Action.READ, owner_profile_id=profile_id)
        year = year or self._clock().year
        names = {t.leave_type_id: t.name for t in self._leaves.list_types()}
        return [
            {
                "leave_type_id": b.leave_type_id,
                "leave_type": names.get(b.leave_type_id, "-"),
                "year": b.year,
                "total_days": b.total_days,
                "used_days": b.used_days,
                "remaining_days": b.remaining_days,
            }
            for b in self._leaves.list_balances(profile_id=profile_id, year=year)
        ]

    def _get_decidable(self, actor: Actor, leave_id: int):
        self._policy.require(actor, "leaves", Action.UPDATE)
        leave = self._leaves.get_leave(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        if int(leave.profile_id) == int(actor.profile_id):
            raise ValidationError("You cannot decide on your own leave request")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been processed")
        return leave
