#app/data/models/user_profile.py
from sqlalchemy import Column, Integer, String, DateTime, Text

from app.data.database import Base
from app.data.models.cart import utcnow


class UserProfileModel(Base):
    """Dane do wypelnienia kolejnego checkoutu, zapisywane na zyczenie klienta."""

    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(128), nullable=False, unique=True, index=True)

    phone_number = Column(String(20), nullable=True)

    delivery_house_type = Column(String(32), nullable=True)
    delivery_house_number = Column(String(32), nullable=True)
    delivery_street_name = Column(String(200), nullable=True)
    delivery_apt_number = Column(String(32), nullable=True)
    delivery_city = Column(String(100), nullable=True)
    delivery_state = Column(String(2), nullable=True)
    delivery_zip_code = Column(String(10), nullable=True)
    delivery_instructions = Column(Text, nullable=True)

    preferred_payment_method = Column(String(32), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
