# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from app.domain.order_status import OrderStatus
from app.utils.settings import MAX_ITEM_QUANTITY, MAX_GUEST_CART_ITEMS

T = TypeVar("T")

PaymentMethod = Literal["card", "apple_pay", "google_pay", "cash"]
PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"


# =====================================================
# ENVELOPE
# =====================================================
class Meta(BaseModel):
    timestamp: datetime


class ErrorBody(BaseModel):
    code: str
    message: str
    status_code: int
    details: Optional[dict] = None


class ApiResponse(BaseModel, Generic[T]):
    """Wspolna koperta odpowiedzi: success + data albo error."""

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorBody] = None
    meta: Meta


# =====================================================
# CART
# =====================================================
class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1, max_length=50)
    product_name: str = Field(..., min_length=1, max_length=200)
    product_price: Decimal = Field(..., gt=0, le=Decimal("9999.99"), decimal_places=2)
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)


class CartItemUpdate(BaseModel):
    # 0 usuwa pozycje
    quantity: int = Field(..., ge=0, le=MAX_ITEM_QUANTITY)


class MergeCartIn(BaseModel):
    guest_items: List[CartItemIn] = Field(default_factory=list, max_length=MAX_GUEST_CART_ITEMS)
    strategy: Literal["merge", "replace"] = "merge"


class CartItemOut(BaseModel):
    product_id: str
    product_name: str
    product_price: Decimal
    quantity: int


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    id: int
    user_id: str
    items: List[CartItemOut]
    subtotal: Decimal
    estimated_tax: Decimal
    delivery_fee: Decimal
    total: Decimal
    item_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CartValidationOut(BaseModel):
    valid: bool
    errors: List[str]


class CartCountOut(BaseModel):
    count: int


# =====================================================
# CHECKOUT
# =====================================================
class DeliveryAddressIn(BaseModel):
    delivery_house_type: str = Field(..., min_length=1, max_length=32)
    delivery_house_number: str = Field(..., min_length=1, max_length=32)
    delivery_street_name: str = Field(..., min_length=1, max_length=200)
    delivery_apt_number: Optional[str] = Field(None, max_length=32)
    delivery_city: str = Field(..., min_length=1, max_length=100)
    delivery_state: str = Field(..., pattern=r"^[A-Za-z]{2}$")
    delivery_zip_code: str = Field(..., pattern=r"^\d{5}(-\d{4})?$")
    delivery_instructions: Optional[str] = Field(None, max_length=500)


class CheckoutIn(DeliveryAddressIn):
    """Zamowienie oplacane od razu."""

    payment_method: PaymentMethod
    tip: Decimal = Field(Decimal("0.00"), ge=0, le=Decimal("999.99"), decimal_places=2)
    #adres i metoda platnosci trafiaja do profilu
    save_profile: bool = False


class TextOrderIn(DeliveryAddressIn):
    """Zamowienie przez SMS/telefon, bez platnosci i napiwku."""

    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    save_profile: bool = False


# =====================================================
# PROFILE
# =====================================================
class ProfileUpdateIn(BaseModel):
    """Czesciowa aktualizacja, pominiete pola zostaja bez zmian."""

    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    delivery_house_type: Optional[str] = Field(None, min_length=1, max_length=32)
    delivery_house_number: Optional[str] = Field(None, min_length=1, max_length=32)
    delivery_street_name: Optional[str] = Field(None, min_length=1, max_length=200)
    delivery_apt_number: Optional[str] = Field(None, max_length=32)
    delivery_city: Optional[str] = Field(None, min_length=1, max_length=100)
    delivery_state: Optional[str] = Field(None, pattern=r"^[A-Za-z]{2}$")
    delivery_zip_code: Optional[str] = Field(None, pattern=r"^\d{5}(-\d{4})?$")
    delivery_instructions: Optional[str] = Field(None, max_length=500)
    preferred_payment_method: Optional[PaymentMethod] = None


class ProfileOut(BaseModel):
    user_id: str
    phone_number: Optional[str] = None
    delivery_house_type: Optional[str] = None
    delivery_house_number: Optional[str] = None
    delivery_street_name: Optional[str] = None
    delivery_apt_number: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_state: Optional[str] = None
    delivery_zip_code: Optional[str] = None
    delivery_instructions: Optional[str] = None
    preferred_payment_method: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# =====================================================
# ORDERS
# =====================================================
class OrderItemOut(BaseModel):
    id: int
    product_id: str
    product_name: str
    product_price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamowienia (response)."""

    id: int
    user_id: str
    order_number: str
    status: str
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    tip: Decimal
    total: Decimal
    delivery_house_type: str
    delivery_house_number: str
    delivery_street_name: str
    delivery_apt_number: Optional[str] = None
    delivery_city: str
    delivery_state: str
    delivery_zip_code: str
    delivery_instructions: Optional[str] = None
    payment_method: str
    contact_phone: Optional[str] = None
    can_cancel: bool = False
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class CheckoutOut(BaseModel):
    order: OrderOut
    message: str
    redirect_url: str


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class OrderListOut(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class CancelOut(BaseModel):
    order: OrderOut
    message: str


class StatusUpdateIn(BaseModel):
    status: OrderStatus


class TrackingLine(BaseModel):
    name: str
    quantity: int
    price: Decimal


class TrackingOut(BaseModel):
    order_id: int
    order_number: str
    order_status: str
    status: str
    items: List[TrackingLine]
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    tip: Decimal
    total: Decimal
    updated_at: datetime


class HealthOut(BaseModel):
    status: str
    database: str
    details: Optional[Any] = None
