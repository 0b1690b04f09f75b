from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import AnnouncementPriority, Role


@dataclass(frozen=True)
class Announcement:
    announcement_id: int
    title: str
    content: str
    priority: AnnouncementPriority
    target_roles: Tuple[Role, ...]
    is_active: bool
    published_at: Optional[datetime]
    created_by: Optional[int] = None

    def visible_to(self, role: Role) -> bool:
        # No target roles means everyone.
        return self.is_active and (not self.target_roles or role in self.target_roles)
