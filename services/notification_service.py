# services/notification_service.py
"""
Fire-and-forget notifications (e.g. "earning credited").

Delivery is best effort: failures are logged and never propagate into the
payment flow that emitted the event.
"""
from typing import Optional

import requests

from config import NOTIFICATIONS_WEBHOOK_URL, NOTIFICATIONS_TIMEOUT_SECONDS, logger

EARNING_CREDITED = "earning.credited"
PURCHASE_COMPLETED = "purchase.completed"


class NotificationService:

     def __init__(self, webhook_url: Optional[str] = NOTIFICATIONS_WEBHOOK_URL, timeout: float = NOTIFICATIONS_TIMEOUT_SECONDS):
          self.webhook_url = webhook_url
          self.timeout = timeout

     def publish(self, event: str, payload: dict) -> None:
          if not self.webhook_url:
               logger.info(f"notification {event}: {payload}")
               return
          response = requests.post(
               self.webhook_url,
               json={"event": event, "payload": payload},
               timeout=self.timeout,
          )
          if response.status_code >= 400:
               raise RuntimeError(f"notification webhook returned {response.status_code}")
