# app/services/user_profile_service.py
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.models.user_profile import UserProfileModel
from app.repos.user_profile_repo import UserProfileRepo
from app.utils.retry import db_retry
from app.utils.logging import get_logger

logger = get_logger(__name__)

ADDRESS_FIELDS = (
    "delivery_house_type",
    "delivery_house_number",
    "delivery_street_name",
    "delivery_apt_number",
    "delivery_city",
    "delivery_state",
    "delivery_zip_code",
    "delivery_instructions",
)


def checkout_profile_fields(address, payment_method: str | None = None, phone_number: str | None = None) -> Dict[str, Any]:
    """Pola profilu z formularza checkoutu; brakujace wartosci nie nadpisuja profilu."""
    fields = {name: getattr(address, name) for name in ADDRESS_FIELDS}
    fields["delivery_state"] = address.delivery_state.upper()
    if payment_method:
        fields["preferred_payment_method"] = payment_method
    if phone_number:
        fields["phone_number"] = phone_number
    return fields


class UserProfileService:
    """
    Zapamietane dane dostawy klienta (telefon, adres, preferowana platnosc).
    Profil tworzony leniwie przy pierwszym odczycie albo zapisie.
    """

    def __init__(self, db: Session):
        self.repo = UserProfileRepo(db)

    def get_profile(self, user_id: str) -> Dict[str, Any] | None:
        profile = self.repo.get_by_user(user_id)
        return self._to_dict(profile) if profile else None

    @db_retry()
    def get_or_create_profile(self, user_id: str) -> Dict[str, Any]:
        try:
            self.repo.create_if_missing(user_id, datetime.now(timezone.utc))
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        return self.get_profile(user_id)

    @db_retry()
    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if fields.get("delivery_state"):
            fields = {**fields, "delivery_state": fields["delivery_state"].upper()}

        try:
            self.repo.upsert(user_id, fields, datetime.now(timezone.utc))
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Updated profile of user {user_id}: {sorted(fields)}")
        return self.get_profile(user_id)

    @staticmethod
    def _to_dict(profile: UserProfileModel) -> Dict[str, Any]:
        return {
            "user_id": profile.user_id,
            "phone_number": profile.phone_number,
            **{name: getattr(profile, name) for name in ADDRESS_FIELDS},
            "preferred_payment_method": profile.preferred_payment_method,
            "created_at": profile.created_at,
            "updated_at": profile.updated_at,
        }
