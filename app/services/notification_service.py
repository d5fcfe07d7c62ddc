# app/services/notification_service.py
from app.celery_worker import celery_app
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysylania powiadomien o zamowieniach.
    Uzywa Celery do asynchronicznego przetwarzania.
    Wywolywany dopiero po commicie, blad brokera nie cofa zamowienia.
    """

    def send_order_created(self, order: dict):
        self._enqueue(
            send_order_created_task,
            order["order_number"],
            order["user_id"],
            str(order["total"]),
        )

    def send_text_order_received(self, order: dict):
        #konsjerz oddzwania na podany numer
        self._enqueue(
            send_text_order_task,
            order["order_number"],
            order["user_id"],
            order["contact_phone"],
        )

    def send_order_cancelled(self, order: dict):
        self._enqueue(send_order_cancelled_task, order["order_number"], order["user_id"])

    @staticmethod
    def _enqueue(task, *args):
        try:
            task.delay(*args)
        except Exception:
            logger.exception(f"Failed to enqueue {task.name} for order {args[0]}")


@celery_app.task(name="app.services.notification_service.send_order_created_task")
def send_order_created_task(order_number: str, user_id: str, total: str):
    """
    Celery task - powiadomienie sklepu o nowym zamowieniu.
    Na razie tylko loguje, bez bramki email/SMS.
    """
    logger.info(f"[NOTIFICATION] New order {order_number} from user {user_id}, total {total}")
    return {"order_number": order_number, "kind": "order_created", "status": "sent"}


@celery_app.task(name="app.services.notification_service.send_text_order_task")
def send_text_order_task(order_number: str, user_id: str, phone_number: str):
    logger.info(
        f"[NOTIFICATION] Text/call order {order_number} from user {user_id} "
        f"awaiting contact at {phone_number}"
    )
    return {"order_number": order_number, "kind": "text_order", "status": "sent"}


@celery_app.task(name="app.services.notification_service.send_order_cancelled_task")
def send_order_cancelled_task(order_number: str, user_id: str):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} cancelled")
    return {"order_number": order_number, "kind": "order_cancelled", "status": "sent"}
