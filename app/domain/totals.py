# app/domain/totals.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

from app.utils.settings import TAX_RATE, DELIVERY_FEE, FREE_DELIVERY_THRESHOLD

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def delivery_fee_for(
    subtotal: Decimal,
    fee: Decimal = DELIVERY_FEE,
    threshold: Decimal = FREE_DELIVERY_THRESHOLD,
) -> Decimal:
    if subtotal >= threshold:
        return ZERO
    return to_money(fee)


def calculate_order_totals(
    subtotal: Decimal,
    tax_rate: Decimal = TAX_RATE,
    fee: Decimal = DELIVERY_FEE,
    threshold: Decimal = FREE_DELIVERY_THRESHOLD,
) -> Dict[str, Decimal]:
    """
    Podatek i dostawa liczone od sumy pozycji.
    Napiwek dolicza wywolujacy przy tworzeniu zamowienia.
    """
    subtotal = to_money(subtotal)
    tax = to_money(subtotal * tax_rate)
    delivery_fee = delivery_fee_for(subtotal, fee, threshold)

    return {
        "subtotal": subtotal,
        "tax": tax,
        "delivery_fee": delivery_fee,
        "total": subtotal + tax + delivery_fee,
    }


def line_items_subtotal(items) -> Decimal:
    #najpierw suma, zaokraglenie raz
    return to_money(sum((Decimal(i.product_price) * i.quantity for i in items), ZERO))
