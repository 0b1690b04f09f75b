from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Sequence

from ..core.enums import AnnouncementPriority, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Announcement
from .repository import AnnouncementRepository


def _to_announcement(r: Dict[str, Any]) -> Announcement:
    roles = [x.strip() for x in (r.get("target_roles") or "").split(",") if x.strip()]
    return Announcement(
        announcement_id=int(r["announcement_id"]),
        title=r["title"],
        content=r["content"],
        priority=AnnouncementPriority(r.get("priority") or AnnouncementPriority.NORMAL.value),
        target_roles=tuple(Role(x) for x in roles),
        is_active=bool(r.get("is_active", True)),
        published_at=r.get("published_at"),
        created_by=r.get("created_by"),
    )


class MySQLAnnouncementRepository(AnnouncementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO announcements(title, content, priority, target_roles, is_active, published_at, created_by)
                VALUES(%s,%s,%s,%s,1,%s,%s)
                """,
                (
                    title,
                    content,
                    priority.value,
                    ",".join(r.value for r in target_roles),
                    published_at,
                    int(created_by),
                ),
            )
            return int(cur.lastrowid)

    def list_active(self, *, limit: int) -> Sequence[Announcement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT announcement_id, title, content, priority, target_roles, is_active, published_at, created_by
                FROM announcements
                WHERE is_active=1
                ORDER BY published_at DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [_to_announcement(r) for r in fetchall(cur)]

    def deactivate(self, announcement_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE announcements SET is_active=0 WHERE announcement_id=%s", (int(announcement_id),))
            return cur.rowcount > 0
