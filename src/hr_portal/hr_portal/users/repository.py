from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EmploymentStatus, Role
from .model import NewProfile, Profile, User


class UserRepository(Protocol):
    """Repository interface for users and their profiles.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, email: str, password_hash: str, role: Role, profile: NewProfile) -> Profile:
        """Insert the login user and its profile in one transaction."""

        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def admin_exists(self) -> bool:
        raise NotImplementedError

    def get_profile(self, profile_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_profile_for_user(self, user_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def list_profiles(self, *, exclude_role: Optional[Role] = None) -> Sequence[Profile]:
        raise NotImplementedError

    def list_birthdays(self, *, month: int) -> Sequence[Profile]:
        raise NotImplementedError

    def update_profile(
        self,
        profile_id: int,
        *,
        first_name: str,
        last_name: str,
        phone: Optional[str],
        date_of_birth: Optional[date],
        department_id: Optional[int],
        designation_id: Optional[int],
        reporting_manager: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def set_employment_status(self, profile_id: int, status: EmploymentStatus) -> bool:
        raise NotImplementedError
