"""Per-coordinator notification channel for cross-component messages."""

from __future__ import annotations

import uuid
from collections import deque
from datetime import datetime, timezone
from threading import RLock
from typing import Optional

from backend.domain.models import Notification, NotificationLevel
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class NotificationChannel:
    """Bounded FIFO of notifications, one queue per coordinator."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._limit = max(1, int(self._settings.notification_history_limit))
        self._lock = RLock()
        self._queues: dict[str, deque[Notification]] = {}

    def _queue(self, coordinator_id: str) -> deque[Notification]:
        queue = self._queues.get(coordinator_id)
        if queue is None:
            queue = deque(maxlen=self._limit)
            self._queues[coordinator_id] = queue
        return queue

    def publish(
        self,
        coordinator_id: str,
        level: NotificationLevel,
        message: str,
    ) -> Notification:
        notification = Notification(
            notification_id=uuid.uuid4().hex,
            level=level,
            message=message,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            self._queue(coordinator_id).append(notification)
        logger.info("Notification [%s] for %s: %s", level.value, coordinator_id, message)
        return notification

    def success(self, coordinator_id: str, message: str) -> Notification:
        return self.publish(coordinator_id, NotificationLevel.SUCCESS, message)

    def error(self, coordinator_id: str, message: str) -> Notification:
        return self.publish(coordinator_id, NotificationLevel.ERROR, message)

    def list(self, coordinator_id: str) -> list[Notification]:
        with self._lock:
            return list(self._queue(coordinator_id))

    def drain(self, coordinator_id: str) -> list[Notification]:
        """Return pending notifications and clear them."""
        with self._lock:
            queue = self._queue(coordinator_id)
            items = list(queue)
            queue.clear()
        return items
