# app/repos/order_repo.py
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from app.data.models.order import OrderModel
from app.domain.order_status import CANCELLABLE_STATUSES, OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        #bez commita, zamowienie i czyszczenie koszyka ida w jednej transakcji
        self.db.add(order)
        self.db.flush()
        return order

    def _scoped(self, stmt, user_id: str | None):
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        return stmt

    def get_order(self, order_id: int, user_id: str | None = None) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items))
            .execution_options(populate_existing=True)
        )
        return self.db.execute(self._scoped(stmt, user_id)).scalar_one_or_none()

    def get_order_by_number(self, order_number: str, user_id: str | None = None) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .where(OrderModel.order_number == order_number)
            .options(selectinload(OrderModel.items))
            .execution_options(populate_existing=True)
        )
        return self.db.execute(self._scoped(stmt, user_id)).scalar_one_or_none()

    def list_user_orders(
        self,
        user_id: str,
        limit: int,
        offset: int,
        status: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Tuple[List[OrderModel], int]:
        conditions = [OrderModel.user_id == user_id]
        if status:
            conditions.append(OrderModel.status == status)
        if start_date:
            conditions.append(OrderModel.created_at >= start_date)
        if end_date:
            conditions.append(OrderModel.created_at <= end_date)

        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()

        orders = self.db.execute(
            select(OrderModel)
            .where(*conditions)
            .options(selectinload(OrderModel.items))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()

        return list(orders), total

    def update_order_status(self, order: OrderModel, status: str, now: datetime) -> OrderModel:
        order.status = status
        order.updated_at = now
        self.db.flush()
        return order

    def cancel_if_cancellable(self, order_id: int, user_id: str, now: datetime) -> int:
        """
        Jeden warunkowy UPDATE, status sprawdzany w bazie a nie w pamieci.
        Zwraca liczbe zmienionych wierszy, 0 gdy zamowienia nie ma albo nie mozna go anulowac.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.user_id == user_id,
                OrderModel.status.in_([s.value for s in CANCELLABLE_STATUSES]),
            )
            .values(status=OrderStatus.CANCELLED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
