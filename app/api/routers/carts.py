#app/api/routers/carts.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id, rate_limit
from app.api.responses import success
from app.data.database import get_db
from app.domain.schemas import (
    ApiResponse,
    CartItemIn,
    CartItemUpdate,
    CartOut,
    CartValidationOut,
    CartCountOut,
    MergeCartIn,
)
from app.domain.totals import ZERO
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session = Depends(get_db)):
    return CartService(db)


def _empty_cart(user_id: str) -> dict:
    #uzytkownik bez wiersza koszyka dostaje pusta strukture
    now = datetime.now(timezone.utc)
    return {
        "id": 0,
        "user_id": user_id,
        "items": [],
        "subtotal": ZERO,
        "estimated_tax": ZERO,
        "delivery_fee": ZERO,
        "total": ZERO,
        "item_count": 0,
        "created_at": now,
        "updated_at": now,
    }


def _current_cart(svc: CartService, user_id: str) -> dict:
    return svc.get_cart(user_id) or _empty_cart(user_id)


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    return success(_current_cart(svc, user_id))


@router.post(
    "/items",
    response_model=ApiResponse[CartOut],
    status_code=201,
    dependencies=[Depends(rate_limit("cart"))],
)
def add_item(
    payload: CartItemIn,
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    svc.add_item(
        user_id=user_id,
        product_id=payload.product_id,
        product_name=payload.product_name,
        product_price=payload.product_price,
        quantity=payload.quantity,
    )
    return success(_current_cart(svc, user_id))


@router.patch(
    "/items/{product_id}",
    response_model=ApiResponse[CartOut],
    dependencies=[Depends(rate_limit("cart"))],
)
def update_item(
    product_id: str,
    payload: CartItemUpdate,
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    svc.update_item_quantity(user_id, product_id, payload.quantity)
    return success(_current_cart(svc, user_id))


@router.delete(
    "/items/{product_id}",
    response_model=ApiResponse[CartOut],
    dependencies=[Depends(rate_limit("cart"))],
)
def remove_item(
    product_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    svc.remove_item(user_id, product_id)
    return success(_current_cart(svc, user_id))


@router.delete("", response_model=ApiResponse[CartOut], dependencies=[Depends(rate_limit("cart"))])
def clear_cart(
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    svc.clear_cart(user_id)
    return success(_current_cart(svc, user_id))


@router.post("/merge", response_model=ApiResponse[CartOut], dependencies=[Depends(rate_limit("cart"))])
def merge_cart(
    payload: MergeCartIn,
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    svc.merge_guest_cart(user_id, payload.guest_items, payload.strategy)
    return success(_current_cart(svc, user_id))


@router.get("/validate", response_model=ApiResponse[CartValidationOut])
def validate_cart(
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    return success(svc.validate_cart(user_id))


@router.get("/count", response_model=ApiResponse[CartCountOut])
def item_count(
    user_id: str = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    return success({"count": svc.get_item_count(user_id)})
