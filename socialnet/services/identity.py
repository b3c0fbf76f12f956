from typing import Iterable, List

from sqlalchemy.orm import Session

from socialnet import crud
from socialnet.crud.friends import storage_guard
from socialnet.errors import UnknownUserError
from socialnet.models import User

DELETED_USER = "DELETED_USER"


class IdentityResolver:
    """Maps usernames to stable user IDs and back again for display."""

    def resolve(self, db: Session, username: str) -> str:
        """Return the ID for ``username`` or raise ``UnknownUserError``."""
        return self.get_user(db, username).id

    @storage_guard("look up a user")
    def get_user(self, db: Session, username: str) -> User:
        user = crud.get_user_by_username(db, username)
        if user is None:
            raise UnknownUserError(username)
        return user

    @storage_guard("look up a user")
    def exists(self, db: Session, user_id: str) -> bool:
        return crud.user_exists(db, user_id)

    @storage_guard("look up usernames")
    def ids_to_usernames(self, db: Session, user_ids: Iterable[str]) -> List[str]:
        """
        Usernames for ``user_ids`` in the same order.

        Accounts that have been deleted (or never picked a username) show up as
        ``DELETED_USER`` rather than failing the whole response.
        """
        user_ids = list(user_ids)
        names = crud.get_usernames_by_ids(db, user_ids)
        return [names.get(user_id) or DELETED_USER for user_id in user_ids]
