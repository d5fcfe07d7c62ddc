# app/repos/cart_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.repos.upsert import dialect_insert


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id).execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_or_create_cart_id(self, user_id: str) -> int:
        #INSERT ... ON CONFLICT DO NOTHING, dwa rownolegle requesty nie utworza dwoch koszykow
        stmt = dialect_insert(self.db, CartModel).values(user_id=user_id).on_conflict_do_nothing(
            index_elements=[CartModel.user_id]
        )
        self.db.execute(stmt)
        return self.db.execute(
            select(CartModel.id).where(CartModel.user_id == user_id)
        ).scalar_one()

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.created_at.desc(), CartItemModel.id.desc())
                .execution_options(populate_existing=True)
            ).scalars().all()
        )

    def upsert_item(
        self,
        cart_id: int,
        product_id: str,
        product_name: str,
        product_price,
        quantity: int,
        now: datetime,
    ) -> None:
        """
        Atomowe dodanie: nowy wiersz albo quantity = quantity + nowa ilosc.
        Inkrementacja dzieje sie w bazie, nie w aplikacji.
        """
        stmt = dialect_insert(self.db, CartItemModel).values(
            cart_id=cart_id,
            product_id=product_id,
            product_name=product_name,
            product_price=product_price,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CartItemModel.cart_id, CartItemModel.product_id],
            set_={
                "quantity": CartItemModel.quantity + stmt.excluded.quantity,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        self.db.execute(stmt)

    def set_item_quantity(self, cart_id: int, product_id: str, quantity: int, now: datetime) -> int:
        result = self.db.execute(
            update(CartItemModel)
            .where(CartItemModel.cart_id == cart_id, CartItemModel.product_id == product_id)
            .values(quantity=quantity, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_cart_item(self, cart_id: int, product_id: str) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id, CartItemModel.product_id == product_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_all_items(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def touch_cart(self, cart_id: int, now: datetime) -> None:
        self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id)
            .values(updated_at=now)
            .execution_options(synchronize_session=False)
        )

    def count_items(self, user_id: str) -> int:
        count = self.db.execute(
            select(func.coalesce(func.sum(CartItemModel.quantity), 0))
            .select_from(CartModel)
            .join(CartItemModel, CartItemModel.cart_id == CartModel.id, isouter=True)
            .where(CartModel.user_id == user_id)
        ).scalar()
        return int(count or 0)

    def commit(self):
        self.db.commit()
        #update/delete z pominieciem ORM, obiekty w sesji moga byc nieaktualne
        self.db.expire_all()

    def rollback(self):
        self.db.rollback()
