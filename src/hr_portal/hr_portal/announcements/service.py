from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_enum, require_non_empty
from ..core.enums import AnnouncementPriority, Role
from ..core.exceptions import NotFoundError
from ..core.policies import AccessPolicy, Action, Actor
from .model import Announcement
from .repository import AnnouncementRepository

logger = logging.getLogger(__name__)

# Fetch window before the role filter is applied.
_ACTIVE_WINDOW = 50


class AnnouncementService:
    def __init__(
        self,
        announcements: AnnouncementRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._announcements = announcements
        self._policy = policy or AccessPolicy()
        self._clock = clock

    def create(
        self,
        actor: Actor,
        *,
        title: str,
        content: str,
        priority: str = AnnouncementPriority.NORMAL.value,
        target_roles: Iterable[str] = (),
    ) -> int:
        self._policy.require(actor, "announcements", Action.CREATE)
        roles = [require_enum(Role, r, "Target role") for r in target_roles if r]
        announcement_id = self._announcements.create(
            title=require_non_empty(title, "Title"),
            content=require_non_empty(content, "Content"),
            priority=require_enum(AnnouncementPriority, priority or AnnouncementPriority.NORMAL.value, "Priority"),
            target_roles=roles,
            published_at=self._clock(),
            created_by=actor.profile_id,
        )
        logger.info("Announcement %s published by profile %s", announcement_id, actor.profile_id)
        return announcement_id

    def deactivate(self, actor: Actor, announcement_id: int) -> None:
        self._policy.require(actor, "announcements", Action.UPDATE)
        if not self._announcements.deactivate(int(announcement_id)):
            raise NotFoundError("Announcement not found")

    def list_for(self, actor: Actor, *, limit: int = 5) -> List[dict]:
        visible = [a for a in self._announcements.list_active(limit=_ACTIVE_WINDOW) if a.visible_to(actor.role)]
        return [self._to_ui(a) for a in visible[: int(limit)]]

    def _to_ui(self, a: Announcement) -> dict:
        return {
            "announcement_id": a.announcement_id,
            "title": a.title,
            "content": a.content,
            "priority": a.priority.value,
            "target_roles": [r.value for r in a.target_roles],
            "published_at": a.published_at.strftime("%Y-%m-%d %H:%M") if a.published_at else "-",
        }
