from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from ..core.enums import AnnouncementPriority, Role
from .model import Announcement


class AnnouncementRepository(Protocol):
    def create(
        self,
        *,
        title: str,
        content: str,
        priority: AnnouncementPriority,
        target_roles: Sequence[Role],
        published_at: datetime,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def list_active(self, *, limit: int) -> Sequence[Announcement]:
        raise NotImplementedError

    def deactivate(self, announcement_id: int) -> bool:
        raise NotImplementedError
