from datetime import datetime, timezone
import secrets
import string

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text
from sqlalchemy.orm import relationship

from app.data.database import Base
from app.data.models.cart import utcnow

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)
    order_number = Column(String(64), nullable=False, unique=True, index=True)

    # pending_contact, pending, confirmed, preparing, out_for_delivery, delivered, cancelled
    status = Column(String(32), nullable=False, default="pending")

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False)
    tip = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    delivery_house_type = Column(String(32), nullable=False)
    delivery_house_number = Column(String(32), nullable=False)
    delivery_street_name = Column(String(200), nullable=False)
    delivery_apt_number = Column(String(32), nullable=True)
    delivery_city = Column(String(100), nullable=False)
    delivery_state = Column(String(2), nullable=False)
    delivery_zip_code = Column(String(10), nullable=False)
    delivery_instructions = Column(Text, nullable=True)

    payment_method = Column(String(32), nullable=False)
    contact_phone = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

    @staticmethod
    def generate_order_number(prefix: str) -> str:
        """ORD-/TXT- + znacznik czasu w ms + losowy sufiks."""
        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(9))
        return f"{prefix}-{timestamp}-{suffix}"
