# foodexpress/services/notification_service.py
from kombu.exceptions import OperationalError

from foodexpress.celery_worker import celery_app
from foodexpress.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    Wolany dopiero po commicie, wiec blad brokera nie cofa zamowienia.
    """

    @staticmethod
    def order_placed(user_id: int, order_id: int, order_number: str):
        NotificationService._enqueue(
            send_order_notification_task, user_id, order_id, order_number, "pending"
        )

    @staticmethod
    def status_changed(user_id: int, order_id: int, order_number: str, status: str):
        NotificationService._enqueue(
            send_order_notification_task, user_id, order_id, order_number, status
        )

    @staticmethod
    def _enqueue(task, *args):
        try:
            task.delay(*args)
        except OperationalError as e:
            logger.warning(f"Notification for order {args[1]} not queued: {e}")


@celery_app.task(name="foodexpress.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, order_number: str, status: str):
    """
    Celery task - dostarczanie (email/SMS/push) jest poza tym serwisem.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_number} ({order_id}) is {status}")

    return {"user_id": user_id, "order_id": order_id, "status": status}
