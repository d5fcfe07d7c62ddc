from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any, Iterable, List

from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.totals import calculate_order_totals, line_items_subtotal, ZERO
from app.repos.cart_repo import CartRepo
from app.utils.retry import db_retry
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Prosta implementacja cqrs i proste use case dla domeny cart
    commands (add, update, remove, clear, merge) modyfikuja stan
    query (get, validate, count) tylko odczyt
    Koszyk jest kluczowany po user_id i tworzony leniwie.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)

    #query - odczyt
    def get_cart(self, user_id: str) -> Dict[str, Any] | None:
        cart = self.repo.get_cart_by_user(user_id)

        #brak wiersza koszyka to co innego niz pusty koszyk
        if not cart:
            return None

        items = self.repo.get_cart_items(cart.id)
        return self._to_dict(cart, items)

    def validate_cart(self, user_id: str) -> Dict[str, Any]:
        """
        Walidacja doradcza - nie sprawdza aktualnych cen ani dostepnosci w katalogu.
        """
        cart = self.get_cart(user_id)
        errors: List[str] = []

        if not cart or not cart["items"]:
            errors.append("Cart is empty")
            return {"valid": False, "errors": errors}

        for item in cart["items"]:
            if item["quantity"] <= 0:
                errors.append(f"Invalid quantity for {item['product_name']}")
            if item["product_price"] <= 0:
                errors.append(f"Invalid price for {item['product_name']}")

        return {"valid": not errors, "errors": errors}

    def get_item_count(self, user_id: str) -> int:
        return self.repo.count_items(user_id)

    #commands
    @db_retry()
    def get_or_create_cart(self, user_id: str) -> int:
        cart_id = self.repo.get_or_create_cart_id(user_id)
        self.repo.commit()
        return cart_id

    @db_retry()
    def add_item(
        self,
        user_id: str,
        product_id: str,
        product_name: str,
        product_price: Decimal,
        quantity: int,
    ) -> None:
        self._add_item(user_id, product_id, product_name, product_price, quantity)
        self.repo.commit()

        logger.info(f"Added {quantity} x {product_id} to cart of user {user_id}")

    @db_retry()
    def update_item_quantity(self, user_id: str, product_id: str, quantity: int) -> None:
        cart_id = self.repo.get_or_create_cart_id(user_id)
        now = datetime.now(timezone.utc)

        if quantity <= 0:
            #ilosc <= 0 oznacza usuniecie
            if self.repo.delete_cart_item(cart_id, product_id):
                self.repo.touch_cart(cart_id, now)
            self.repo.commit()
            logger.info(f"Removed {product_id} from cart of user {user_id} (quantity {quantity})")
            return

        #ustawia ilosc, nie dodaje
        updated = self.repo.set_item_quantity(cart_id, product_id, quantity, now)
        if updated:
            self.repo.touch_cart(cart_id, now)
        self.repo.commit()

        logger.info(f"Set quantity of {product_id} to {quantity} for user {user_id}")

    @db_retry()
    def remove_item(self, user_id: str, product_id: str) -> None:
        cart_id = self.repo.get_or_create_cart_id(user_id)

        #brak pozycji to nie blad
        deleted = self.repo.delete_cart_item(cart_id, product_id)
        if deleted:
            self.repo.touch_cart(cart_id, datetime.now(timezone.utc))
        self.repo.commit()

        logger.info(f"Removed {product_id} from cart of user {user_id} ({deleted} rows)")

    @db_retry()
    def clear_cart(self, user_id: str) -> None:
        cart_id = self.repo.get_or_create_cart_id(user_id)

        deleted = self.repo.delete_all_items(cart_id)
        self.repo.touch_cart(cart_id, datetime.now(timezone.utc))
        self.repo.commit()

        logger.info(f"Cleared cart {cart_id} of user {user_id} ({deleted} rows)")

    @db_retry()
    def merge_guest_cart(self, user_id: str, guest_items: Iterable, strategy: str = "merge") -> None:
        """
        Laczy koszyk goscia z koszykiem uzytkownika w jednej transakcji.
        replace - najpierw czysci koszyk, merge - ilosci sie sumuja.
        """
        if strategy not in ("merge", "replace"):
            raise ValueError(f"Unknown merge strategy: {strategy}")

        guest_items = list(guest_items)

        try:
            if strategy == "replace":
                cart_id = self.repo.get_or_create_cart_id(user_id)
                self.repo.delete_all_items(cart_id)
                self.repo.touch_cart(cart_id, datetime.now(timezone.utc))

            for item in guest_items:
                self._add_item(
                    user_id,
                    item.product_id,
                    item.product_name,
                    item.product_price,
                    item.quantity,
                )
        except Exception:
            #zadna pozycja goscia nie trafia do koszyka jesli jedna jest zla
            self.repo.rollback()
            raise

        self.repo.commit()

        logger.info(f"Merged {len(guest_items)} guest items into cart of user {user_id} ({strategy})")

    def _add_item(self, user_id, product_id, product_name, product_price, quantity) -> None:
        # Walidacje
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")
        if Decimal(product_price) <= 0:
            raise ValueError("Price must be greater than 0")

        cart_id = self.repo.get_or_create_cart_id(user_id)
        now = datetime.now(timezone.utc)

        self.repo.upsert_item(
            cart_id=cart_id,
            product_id=product_id,
            product_name=product_name,
            product_price=Decimal(product_price),
            quantity=quantity,
            now=now,
        )
        self.repo.touch_cart(cart_id, now)

    @staticmethod
    def _to_dict(cart: CartModel, items: List[CartItemModel]) -> Dict[str, Any]:
        if items:
            totals = calculate_order_totals(line_items_subtotal(items))
        else:
            #pusty koszyk - wszystko zero, bez oplaty za dostawe
            totals = {"subtotal": ZERO, "tax": ZERO, "delivery_fee": ZERO, "total": ZERO}

        #dict przeksztalcany w jsona
        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "product_name": i.product_name,
                    "product_price": Decimal(i.product_price),
                    "quantity": i.quantity,
                }
                for i in items
            ],
            "subtotal": totals["subtotal"],
            "estimated_tax": totals["tax"],
            "delivery_fee": totals["delivery_fee"],
            "total": totals["total"],
            "item_count": sum(i.quantity for i in items),
            "created_at": cart.created_at,
            "updated_at": cart.updated_at,
        }
