from decimal import Decimal
from unittest.mock import MagicMock

from app.services.notification_service import (
    NotificationService,
    send_order_cancelled_task,
    send_order_created_task,
    send_text_order_task,
)

ORDER = {
    "order_number": "ORD-1700000000000-ABCDEFGH1",
    "user_id": "u1",
    "total": Decimal("48.11"),
    "contact_phone": "+17185550123",
}


def test_tasks_run_locally():
    created = send_order_created_task.apply(args=("ORD-1", "u1", "48.11")).get()
    text = send_text_order_task.apply(args=("TXT-1", "u1", "+17185550123")).get()
    cancelled = send_order_cancelled_task.apply(args=("ORD-1", "u1")).get()

    assert created == {"order_number": "ORD-1", "kind": "order_created", "status": "sent"}
    assert text["kind"] == "text_order"
    assert cancelled["kind"] == "order_cancelled"


def test_service_enqueues_with_order_fields(monkeypatch):
    task = MagicMock()
    monkeypatch.setattr("app.services.notification_service.send_order_created_task", task)

    NotificationService().send_order_created(ORDER)

    task.delay.assert_called_once_with(ORDER["order_number"], "u1", "48.11")


def test_text_order_notification_carries_phone(monkeypatch):
    task = MagicMock()
    monkeypatch.setattr("app.services.notification_service.send_text_order_task", task)

    NotificationService().send_text_order_received(ORDER)

    task.delay.assert_called_once_with(ORDER["order_number"], "u1", "+17185550123")


def test_broker_failure_does_not_raise():
    task = MagicMock()
    task.name = "broken"
    task.delay.side_effect = ConnectionError("broker down")

    NotificationService._enqueue(task, "ORD-1")

    task.delay.assert_called_once_with("ORD-1")
