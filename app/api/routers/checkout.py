# app/api/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import (
    get_current_user_id,
    get_lock_service,
    get_notification_service,
    rate_limit,
)
from app.api.responses import success
from app.data.database import get_db
from app.domain.schemas import ApiResponse, CheckoutIn, CheckoutOut, TextOrderIn
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService

router = APIRouter(prefix="/checkout", tags=["checkout"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return OrderService(db, lock_service=lock_service, notification_service=notification_service)


def _confirmation(order: dict, message: str) -> dict:
    return {
        "order": order,
        "message": message,
        "redirect_url": f"/order-confirmation/{order['order_number']}",
    }


@router.post(
    "",
    response_model=ApiResponse[CheckoutOut],
    status_code=201,
    dependencies=[Depends(rate_limit("checkout"))],
)
def checkout(
    payload: CheckoutIn,
    user_id: str = Depends(get_current_user_id),
    svc: OrderService = Depends(get_service),
):
    """
    Tworzy zamowienie z koszyka i czysci koszyk.
    Platnosc obsluguje procesor platnosci poza tym serwisem.
    """
    order = svc.create_order(user_id, payload)
    return success(_confirmation(order, "Order placed successfully"))


@router.post(
    "/text-order",
    response_model=ApiResponse[CheckoutOut],
    status_code=201,
    dependencies=[Depends(rate_limit("checkout"))],
)
def text_order(
    payload: TextOrderIn,
    user_id: str = Depends(get_current_user_id),
    svc: OrderService = Depends(get_service),
):
    order = svc.create_text_order(user_id, payload)
    return success(_confirmation(order, "Order received, we will contact you to confirm it"))
