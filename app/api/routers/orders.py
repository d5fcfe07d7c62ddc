# app/api/routers/orders.py
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import (
    get_current_user_id,
    get_lock_service,
    get_notification_service,
    require_back_office,
)
from app.api.responses import success
from app.data.database import get_db
from app.domain.order_status import OrderStatus
from app.domain.schemas import (
    ApiResponse,
    CancelOut,
    OrderListOut,
    OrderOut,
    StatusUpdateIn,
    TrackingOut,
)
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return OrderService(db, lock_service=lock_service, notification_service=notification_service)


@router.get("", response_model=ApiResponse[OrderListOut])
def list_orders(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status: OrderStatus | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    svc: OrderService = Depends(get_service),
):
    """
    Zamowienia uzytkownika, najnowsze pierwsze.
    """
    result = svc.get_user_orders(
        user_id,
        limit=limit,
        offset=offset,
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
    )
    return success(
        {
            "orders": result["orders"],
            "pagination": {
                "total": result["total"],
                "limit": limit,
                "offset": offset,
                "has_more": offset + limit < result["total"],
            },
        }
    )


@router.get("/{order_number}", response_model=ApiResponse[OrderOut])
def get_order(
    order_number: str,
    user_id: str = Depends(get_current_user_id),
    svc: OrderService = Depends(get_service),
):
    order = svc.get_order_by_number(order_number, user_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return success(order)


@router.get("/{order_number}/tracking", response_model=ApiResponse[TrackingOut])
def get_tracking(
    order_number: str,
    user_id: str = Depends(get_current_user_id),
    svc: OrderService = Depends(get_service),
):
    tracking = svc.get_tracking(order_number, user_id)
    if not tracking:
        raise HTTPException(status_code=404, detail="Order not found")
    return success(tracking)


@router.post("/{order_number}/cancel", response_model=ApiResponse[CancelOut])
def cancel_order(
    order_number: str,
    user_id: str = Depends(get_current_user_id),
    svc: OrderService = Depends(get_service),
):
    order = svc.get_order_by_number(order_number, user_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    cancelled = svc.cancel_order(order["id"], user_id)
    return success({"order": cancelled, "message": "Order cancelled successfully"})


@router.patch(
    "/{order_id}/status",
    response_model=ApiResponse[OrderOut],
    dependencies=[Depends(require_back_office)],
)
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    svc: OrderService = Depends(get_service),
):
    """
    Back-office: zmiana statusu zamowienia dowolnego uzytkownika.
    """
    return success(svc.update_order_status(order_id, payload.status.value))
