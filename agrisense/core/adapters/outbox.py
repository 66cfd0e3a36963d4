import logging
from typing import List

from .base import Notifier, Permission
from ..models.domain import AdvisoryNotification

log = logging.getLogger("agrisense.notify")


class OutboxNotifier(Notifier):
    """
    In-memory notification host. Delivered advisories are kept in `delivered`
    (newest last) for the API to read back.
    """

    def __init__(self, permission: Permission = Permission.DEFAULT,
                 grant_on_request: bool = True, max_items: int = 50):
        self.permission = Permission(permission)
        self.grant_on_request = grant_on_request
        self.max_items = max_items
        self.delivered: List[AdvisoryNotification] = []

    async def request_permission(self) -> Permission:
        if self.permission == Permission.DEFAULT:
            self.permission = Permission.GRANTED if self.grant_on_request else Permission.DENIED
            log.info("Notification permission %s", self.permission.value)
        return self.permission

    async def show(self, notification: AdvisoryNotification) -> None:
        self.delivered.append(notification)
        if len(self.delivered) > self.max_items:
            del self.delivered[: len(self.delivered) - self.max_items]
        log.info("🔔 %s | %s", notification.title, notification.body.replace("\n", " / "))
