# app/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.domain.errors import (
    CartEmptyError,
    CheckoutInProgressError,
    InvalidStatusTransitionError,
    OrderNotCancellableError,
    OrderNotFoundError,
    PersistenceError,
)
from app.domain.order_status import OrderStatus, can_transition, is_cancellable, tracking_step
from app.domain.schemas import CheckoutIn, TextOrderIn
from app.domain.totals import calculate_order_totals, line_items_subtotal, to_money, ZERO
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.repos.user_profile_repo import UserProfileRepo
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.user_profile_service import checkout_profile_fields
from app.utils.retry import db_retry
from app.utils.settings import ORDER_STATUS_STRICT
from app.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_PREFIX = "ORD"
TEXT_ORDER_PREFIX = "TXT"


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Zamowienie to kopia koszyka z chwili checkoutu, pozniejsze zmiany koszyka
    go nie dotycza.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
        strict_transitions: bool = ORDER_STATUS_STRICT,
    ):
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.profile_repo = UserProfileRepo(db)
        self.lock_service = lock_service or LockService()
        self.notification_service = notification_service or NotificationService()
        self.strict_transitions = strict_transitions

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_order(self, user_id: str, payload: CheckoutIn) -> Dict[str, Any]:
        """
        Use Case: zamowienie oplacane od razu.

        1. Blokada checkoutu dla uzytkownika
        2. Koszyk -> totals, total = total koszyka + napiwek
        3. Zamowienie ORD- + pozycje, czyszczenie koszyka, opcjonalnie profil, jeden commit
        4. Powiadomienie (async)
        """
        order = self._checkout(
            user_id,
            prefix=ORDER_PREFIX,
            status=OrderStatus.PENDING.value,
            payment_method=payload.payment_method,
            tip=to_money(payload.tip),
            address=payload,
            contact_phone=None,
            clear_cart=True,
            profile_fields=(
                checkout_profile_fields(payload, payment_method=payload.payment_method)
                if payload.save_profile
                else None
            ),
        )
        self.notification_service.send_order_created(order)
        return order

    def create_text_order(self, user_id: str, payload: TextOrderIn) -> Dict[str, Any]:
        """
        Use Case: zamowienie przez SMS/telefon (konsjerz).
        Koszyk zostaje - klient widzi pozycje dopoki ktos nie potwierdzi zamowienia.
        """
        order = self._checkout(
            user_id,
            prefix=TEXT_ORDER_PREFIX,
            status=OrderStatus.PENDING_CONTACT.value,
            payment_method="text_call",
            tip=ZERO,
            address=payload,
            contact_phone=payload.phone_number,
            clear_cart=False,
            profile_fields=(
                checkout_profile_fields(payload, phone_number=payload.phone_number)
                if payload.save_profile
                else None
            ),
        )
        self.notification_service.send_text_order_received(order)
        return order

    def _checkout(self, user_id: str, **kwargs) -> Dict[str, Any]:
        token = self.lock_service.new_token()
        if not self.lock_service.acquire_checkout_lock(user_id, token):
            raise CheckoutInProgressError()

        try:
            return self._place_order(user_id, **kwargs)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to create {kwargs['prefix']} order for user {user_id}")
            raise PersistenceError("Failed to create order") from e
        finally:
            try:
                self.lock_service.release_checkout_lock(user_id, token)
            except RedisError as e:
                #lock i tak wygasnie po TTL
                logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

    @db_retry()
    def _place_order(
        self,
        user_id: str,
        prefix: str,
        status: str,
        payment_method: str,
        tip: Decimal,
        address,
        contact_phone: Optional[str],
        clear_cart: bool,
        profile_fields: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            cart = self.cart_repo.get_cart_by_user(user_id)
            items = self.cart_repo.get_cart_items(cart.id) if cart else []

            if not items:
                raise CartEmptyError()

            totals = calculate_order_totals(line_items_subtotal(items))
            now = datetime.now(timezone.utc)

            order = OrderModel(
                user_id=user_id,
                order_number=OrderModel.generate_order_number(prefix),
                status=status,
                subtotal=totals["subtotal"],
                tax=totals["tax"],
                delivery_fee=totals["delivery_fee"],
                tip=tip,
                total=totals["total"] + tip,
                delivery_house_type=address.delivery_house_type,
                delivery_house_number=address.delivery_house_number,
                delivery_street_name=address.delivery_street_name,
                delivery_apt_number=address.delivery_apt_number,
                delivery_city=address.delivery_city,
                delivery_state=address.delivery_state.upper(),
                delivery_zip_code=address.delivery_zip_code,
                delivery_instructions=address.delivery_instructions,
                payment_method=payment_method,
                contact_phone=contact_phone,
                created_at=now,
                updated_at=now,
                #pelna kopia pozycji, bez powiazania z koszykiem
                items=[
                    OrderItemModel(
                        product_id=i.product_id,
                        product_name=i.product_name,
                        product_price=i.product_price,
                        quantity=i.quantity,
                        created_at=now,
                    )
                    for i in items
                ],
            )

            self.repo.create_order(order)

            if profile_fields:
                self.profile_repo.upsert(user_id, profile_fields, now)

            #czyszczenie koszyka zawsze na koncu, w tej samej transakcji
            if clear_cart:
                self.cart_repo.delete_all_items(cart.id)
                self.cart_repo.touch_cart(cart.id, now)

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {order.order_number} created for user {user_id} "
            f"({len(items)} items, total {order.total}, cart cleared: {clear_cart})"
        )
        return self._to_dict(order)

    def update_order_status(self, order_id: int, status: str, user_id: str | None = None) -> Dict[str, Any]:
        """
        Domyslnie nadpisuje status bez sprawdzania poprzednika (reczne poprawki z back-office).
        Przy strict_transitions pilnuje tabeli przejsc.
        """
        status = OrderStatus(status).value

        order = self.repo.get_order(order_id, user_id)
        if not order:
            raise OrderNotFoundError()

        previous = order.status
        if self.strict_transitions and not can_transition(previous, status):
            raise InvalidStatusTransitionError(previous, status)

        try:
            self.repo.update_order_status(order, status, datetime.now(timezone.utc))
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception(f"Failed to update status of order {order_id}")
            raise PersistenceError("Failed to update order status") from e

        logger.info(f"Order {order.order_number} status {previous} -> {status}")
        return self._to_dict(order)

    def cancel_order(self, order_id: int, user_id: str) -> Dict[str, Any]:
        """
        Anulowanie tylko z pending/confirmed.
        Status sprawdza UPDATE ... WHERE status IN (...), rownolegla zmiana z back-office wygrywa.
        """
        try:
            cancelled = self.repo.cancel_if_cancellable(order_id, user_id, datetime.now(timezone.utc))
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.exception(f"Failed to cancel order {order_id}")
            raise PersistenceError("Failed to cancel order") from e

        order = self.repo.get_order(order_id, user_id)
        if not order:
            raise OrderNotFoundError()
        if not cancelled:
            raise OrderNotCancellableError()

        logger.info(f"Order {order.order_number} cancelled by user {user_id}")
        result = self._to_dict(order)
        self.notification_service.send_order_cancelled(result)
        return result

    # =====================================================
    # QUERY
    # =====================================================
    def get_order_by_id(self, order_id: int, user_id: str | None = None) -> Dict[str, Any] | None:
        order = self.repo.get_order(order_id, user_id)
        return self._to_dict(order) if order else None

    def get_order_by_number(self, order_number: str, user_id: str | None = None) -> Dict[str, Any] | None:
        order = self.repo.get_order_by_number(order_number, user_id)
        return self._to_dict(order) if order else None

    def get_user_orders(
        self,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
        status: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Dict[str, Any]:
        orders, total = self.repo.list_user_orders(
            user_id,
            limit=limit,
            offset=offset,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )
        return {"orders": [self._to_dict(o) for o in orders], "total": total}

    def get_tracking(self, order_number: str, user_id: str) -> Dict[str, Any] | None:
        order = self.repo.get_order_by_number(order_number, user_id)
        if not order:
            return None

        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "order_status": order.status,
            "status": tracking_step(order.status),
            "items": [
                {"name": i.product_name, "quantity": i.quantity, "price": Decimal(i.product_price)}
                for i in order.items
            ],
            "subtotal": Decimal(order.subtotal),
            "tax": Decimal(order.tax),
            "delivery_fee": Decimal(order.delivery_fee),
            "tip": Decimal(order.tip),
            "total": Decimal(order.total),
            "updated_at": order.updated_at,
        }

    @staticmethod
    def _to_dict(order: OrderModel) -> Dict[str, Any]:
        return {
            "id": order.id,
            "user_id": order.user_id,
            "order_number": order.order_number,
            "status": order.status,
            "subtotal": Decimal(order.subtotal),
            "tax": Decimal(order.tax),
            "delivery_fee": Decimal(order.delivery_fee),
            "tip": Decimal(order.tip),
            "total": Decimal(order.total),
            "delivery_house_type": order.delivery_house_type,
            "delivery_house_number": order.delivery_house_number,
            "delivery_street_name": order.delivery_street_name,
            "delivery_apt_number": order.delivery_apt_number,
            "delivery_city": order.delivery_city,
            "delivery_state": order.delivery_state,
            "delivery_zip_code": order.delivery_zip_code,
            "delivery_instructions": order.delivery_instructions,
            "payment_method": order.payment_method,
            "contact_phone": order.contact_phone,
            "can_cancel": is_cancellable(order.status),
            "created_at": order.created_at,
            "updated_at": order.updated_at,
            "items": [
                {
                    "id": i.id,
                    "product_id": i.product_id,
                    "product_name": i.product_name,
                    "product_price": Decimal(i.product_price),
                    "quantity": i.quantity,
                }
                for i in order.items
            ],
        }
