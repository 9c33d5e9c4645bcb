import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Favorites, Users
from utils.errors import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class FavoritesStore:
    """
    Per-user favorite countries.

    ``add`` is the only operation that is not safe to retry: a second add of
    the same country fails with ``DuplicateError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def list(self, user: Users) -> List[Favorites]:
        return (
            self.db.query(Favorites)
            .filter(Favorites.user_id == user.id)
            .order_by(Favorites.id)
            .all()
        )

    def _get(self, user: Users, country_code: str):
        return (
            self.db.query(Favorites)
            .filter_by(user_id=user.id, country_code=country_code)
            .first()
        )

    def add(self, user: Users, country_code: str, country_name: str, flag_url: str) -> Favorites:
        if self._get(user, country_code):
            raise DuplicateError("Country already in favorites")

        favorite = Favorites(
            user_id=user.id,
            country_code=country_code,
            country_name=country_name,
            flag_url=flag_url,
        )
        self.db.add(favorite)
        try:
            self.db.commit()
        except IntegrityError as e:
            # lost a race against a concurrent add
            self.db.rollback()
            raise DuplicateError("Country already in favorites") from e
        self.db.refresh(favorite)
        logger.info("User %s added %s to favorites", user.id, country_code)
        return favorite

    def remove(self, user: Users, country_code: str) -> None:
        favorite = self._get(user, country_code)
        if not favorite:
            raise NotFoundError("Favorite not found")
        self.db.delete(favorite)
        self.db.commit()
        logger.info("User %s removed %s from favorites", user.id, country_code)

    def is_favorite(self, user: Users, country_code: str) -> bool:
        return any(f.country_code == country_code for f in self.list(user))
