"""Role-and-ownership access rules.

Every service asks ``AccessPolicy.require`` before touching a resource, so the
rules for who may read or write which rows live in this one table instead of
being repeated per call site.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from .enums import LeaveStatus, Role
from .exceptions import AuthorizationError


class Actor(Protocol):
    role: Role
    profile_id: int


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


Rule = Callable[[Actor, Optional[int], Dict[str, Any]], bool]


def anyone(actor: Actor, owner: Optional[int], ctx: Dict[str, Any]) -> bool:
    return True


def admin(actor: Actor, owner: Optional[int], ctx: Dict[str, Any]) -> bool:
    return actor.role == Role.ADMIN


def admin_or_hr(actor: Actor, owner: Optional[int], ctx: Dict[str, Any]) -> bool:
    return actor.role in {Role.ADMIN, Role.HR}


def owner(actor: Actor, owner_profile_id: Optional[int], ctx: Dict[str, Any]) -> bool:
    return owner_profile_id is not None and int(owner_profile_id) == int(actor.profile_id)


def pending_owner(actor: Actor, owner_profile_id: Optional[int], ctx: Dict[str, Any]) -> bool:
    return owner(actor, owner_profile_id, ctx) and ctx.get("status") == LeaveStatus.PENDING


def user_creator(actor: Actor, owner_profile_id: Optional[int], ctx: Dict[str, Any]) -> bool:
    # HR may only create employee accounts.
    if actor.role == Role.ADMIN:
        return True
    return actor.role == Role.HR and ctx.get("target_role") == Role.EMPLOYEE


def either(*rules: Rule) -> Rule:
    def rule(actor: Actor, owner_profile_id: Optional[int], ctx: Dict[str, Any]) -> bool:
        return any(r(actor, owner_profile_id, ctx) for r in rules)

    return rule


_staff_or_owner = either(admin_or_hr, owner)

DEFAULT_RULES: Dict[Tuple[str, Action], Rule] = {
    ("profiles", Action.READ): anyone,
    ("profiles", Action.CREATE): admin_or_hr,
    ("profiles", Action.UPDATE): _staff_or_owner,
    ("profiles", Action.DELETE): admin,
    ("users", Action.CREATE): user_creator,
    ("users", Action.DELETE): admin,
    ("employment", Action.UPDATE): admin_or_hr,
    ("departments", Action.READ): anyone,
    ("departments", Action.CREATE): admin_or_hr,
    ("departments", Action.UPDATE): admin_or_hr,
    ("departments", Action.DELETE): admin,
    ("designations", Action.READ): anyone,
    ("designations", Action.CREATE): admin_or_hr,
    ("designations", Action.UPDATE): admin_or_hr,
    ("designations", Action.DELETE): admin,
    ("attendance", Action.READ): _staff_or_owner,
    ("attendance", Action.CREATE): _staff_or_owner,
    ("attendance", Action.UPDATE): _staff_or_owner,
    ("attendance", Action.DELETE): admin,
    ("timesheets", Action.READ): _staff_or_owner,
    ("timesheets", Action.CREATE): _staff_or_owner,
    ("timesheets", Action.UPDATE): either(admin, owner),
    ("timesheets", Action.DELETE): admin,
    ("leaves", Action.READ): _staff_or_owner,
    ("leaves", Action.CREATE): _staff_or_owner,
    ("leaves", Action.UPDATE): either(admin_or_hr, pending_owner),
    ("leaves", Action.DELETE): admin,
    ("leave_balances", Action.READ): _staff_or_owner,
    ("leave_balances", Action.CREATE): admin_or_hr,
    ("leave_balances", Action.UPDATE): admin_or_hr,
    ("leave_balances", Action.DELETE): admin_or_hr,
    ("tasks", Action.READ): _staff_or_owner,
    ("tasks", Action.CREATE): admin_or_hr,
    ("tasks", Action.UPDATE): _staff_or_owner,
    ("tasks", Action.DELETE): admin,
    ("training", Action.READ): _staff_or_owner,
    ("training", Action.CREATE): owner,
    ("training", Action.UPDATE): owner,
    ("training", Action.DELETE): admin,
    ("goalsheets", Action.READ): _staff_or_owner,
    ("goalsheets", Action.CREATE): admin_or_hr,
    ("goalsheets", Action.UPDATE): _staff_or_owner,
    ("goalsheets", Action.DELETE): admin,
    ("payroll", Action.READ): _staff_or_owner,
    ("payroll", Action.CREATE): admin_or_hr,
    ("payroll", Action.UPDATE): admin_or_hr,
    ("payroll", Action.DELETE): admin_or_hr,
    ("announcements", Action.READ): anyone,
    ("announcements", Action.CREATE): admin_or_hr,
    ("announcements", Action.UPDATE): admin_or_hr,
    ("announcements", Action.DELETE): admin,
}

# Resources whose rows everyone on staff (admin/HR) may list without an owner filter.
_STAFF_WIDE_READ = {"attendance", "timesheets", "leaves", "leave_balances", "tasks", "training", "goalsheets", "payroll"}


class AccessPolicy:
    def __init__(self, rules: Optional[Dict[Tuple[str, Action], Rule]] = None):
        self._rules = dict(rules or DEFAULT_RULES)

    def allows(
        self,
        actor: Actor,
        resource: str,
        action: Action,
        *,
        owner_profile_id: Optional[int] = None,
        **context: Any,
    ) -> bool:
        rule = self._rules.get((resource, action))
        if rule is None:
            return False
        return bool(rule(actor, owner_profile_id, context))

    def require(
        self,
        actor: Actor,
        resource: str,
        action: Action,
        *,
        owner_profile_id: Optional[int] = None,
        **context: Any,
    ) -> None:
        if not self.allows(actor, resource, action, owner_profile_id=owner_profile_id, **context):
            raise AuthorizationError("You do not have permission for this action")

    def read_scope(self, actor: Actor, resource: str) -> Optional[int]:
        """Profile filter for list queries: ``None`` means every row is visible."""

        if resource in _STAFF_WIDE_READ and actor.role in {Role.ADMIN, Role.HR}:
            return None
        return int(actor.profile_id)
