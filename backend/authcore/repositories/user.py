"""User repository for account lookup during authentication."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from authcore.models.user import User
from authcore.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never issues tokens or checks passwords; it only reads accounts and
    stamps login metadata.
    """

    model = User

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        stmt = self._default_eagerload(stmt)
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def touch_last_login(self, user_id: int, at: datetime) -> bool:
        """Set ``last_login_at`` for ``user_id``.

        :returns: ``True`` when a row was updated.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(last_login_at=at)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)
