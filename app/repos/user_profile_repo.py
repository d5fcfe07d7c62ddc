# app/repos/user_profile_repo.py
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.user_profile import UserProfileModel
from app.repos.upsert import dialect_insert


class UserProfileRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: str) -> UserProfileModel | None:
        return self.db.execute(
            select(UserProfileModel)
            .where(UserProfileModel.user_id == user_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def upsert(self, user_id: str, fields: Dict[str, Any], now: datetime) -> None:
        """
        Nadpisuje tylko przekazane pola, reszta profilu zostaje.
        Bez commita, checkout zapisuje profil w swojej transakcji.
        """
        stmt = dialect_insert(self.db, UserProfileModel).values(
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **fields,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserProfileModel.user_id],
            set_={
                **{name: stmt.excluded[name] for name in fields},
                "updated_at": stmt.excluded.updated_at,
            },
        )
        self.db.execute(stmt)

    def create_if_missing(self, user_id: str, now: datetime) -> None:
        stmt = dialect_insert(self.db, UserProfileModel).values(
            user_id=user_id,
            created_at=now,
            updated_at=now,
        ).on_conflict_do_nothing(index_elements=[UserProfileModel.user_id])
        self.db.execute(stmt)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
