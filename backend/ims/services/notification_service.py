# Overview: In-process notification feed for newly created orders.

"""
New-Order Notification Feed

WHY: Admin, Manager and Clerk screens show a live list of incoming orders.
Each open stream owns one Subscription; the broker fans out every published
event to all live subscriptions of eligible users.

LIFECYCLE:
- subscribe(user): only roles with RECEIVE_ORDER_NOTIFICATIONS
- Subscription.close(): idempotent; the stream endpoint calls it on every
  exit path (client disconnect, generator close, error)
- revoke_user(user_id): closes a user's subscriptions when the user is
  deleted or moved to a role without notification access

Thread-safe: the registry is guarded by a lock and each subscription has its
own queue.Queue, so publishers never block on slow readers. Each subscription
keeps at most history_limit past notifications.
"""

from __future__ import annotations

import queue
import threading
from collections import deque
from dataclasses import dataclass, field, replace

from ..errors import PermissionDeniedError
from ..permissions import RECEIVE_ORDER_NOTIFICATIONS, can_perform
from ims.time_utils import to_utc_z, utcnow


NEW_ORDER = "new_order"

# Notifications a subscription remembers for read/unread tracking
DEFAULT_HISTORY_LIMIT = 50


@dataclass
class Notification:
    id: str
    type: str
    message: str
    data: dict
    timestamp: str
    read: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp,
            "read": self.read,
        }


def build_order_notification(order_data: dict) -> Notification:
    """order_data is the serialized order (Order.to_dict())."""
    client = order_data.get("client") or {}
    client_name = client.get("name") or "Unknown client"
    return Notification(
        id=f"order-{order_data['id']}",
        type=NEW_ORDER,
        message=f"New order {order_data['order_number']} from {client_name}",
        data=order_data,
        timestamp=to_utc_z(utcnow()),
    )


@dataclass(eq=False)
class Subscription:
    """
    One live feed for one user.

    Keeps the most recent notifications it has received (newest first, at
    most history_limit) so the reader can track read/unread state the way
    the notification panel does.
    """
    user_id: str
    broker: "NotificationBroker"
    history_limit: int = DEFAULT_HISTORY_LIMIT
    _queue: queue.Queue = field(default_factory=queue.Queue, repr=False)
    _closed: threading.Event = field(default_factory=threading.Event, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        self._history: deque[Notification] = deque(maxlen=max(1, self.history_limit))

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def notifications(self) -> list[Notification]:
        """Snapshot of the retained history, newest first."""
        with self._lock:
            return list(self._history)

    def deliver(self, notification: Notification) -> None:
        if self.closed:
            return
        # Read state is per subscription
        self._queue.put(replace(notification))

    def get(self, timeout: float | None = None) -> Notification | None:
        """
        Wait up to timeout seconds for the next notification.

        Returns None on timeout or once the subscription is closed.
        """
        if self.closed:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is None:
            return None
        with self._lock:
            # Oldest entry falls off once history_limit is reached
            self._history.appendleft(item)
        return item

    def mark_as_read(self, notification_id: str) -> bool:
        with self._lock:
            for notification in self._history:
                if notification.id == notification_id:
                    notification.read = True
                    return True
        return False

    def clear_all(self) -> None:
        with self._lock:
            self._history.clear()

    @property
    def has_unread(self) -> bool:
        with self._lock:
            return any(not n.read for n in self._history)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        # Wake a reader blocked in get()
        self._queue.put(None)
        self.broker._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class NotificationBroker:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: dict[str, set[Subscription]] = {}

    def subscribe(self, user, history_limit: int = DEFAULT_HISTORY_LIMIT) -> Subscription:
        if user is None or not can_perform(user.role, RECEIVE_ORDER_NOTIFICATIONS):
            raise PermissionDeniedError(
                "Role does not receive order notifications",
                action=RECEIVE_ORDER_NOTIFICATIONS,
            )
        subscription = Subscription(user_id=user.id, broker=self, history_limit=history_limit)
        with self._lock:
            self._subscriptions.setdefault(user.id, set()).add(subscription)
        return subscription

    def publish(self, notification: Notification) -> int:
        """Deliver to every live subscription. Returns the number reached."""
        with self._lock:
            targets = [sub for subs in self._subscriptions.values() for sub in subs]
        for sub in targets:
            sub.deliver(notification)
        return len(targets)

    def publish_order_created(self, order_data: dict) -> Notification:
        notification = build_order_notification(order_data)
        self.publish(notification)
        return notification

    def _user_subscriptions(self, user_id: str) -> list[Subscription]:
        with self._lock:
            return list(self._subscriptions.get(user_id, ()))

    def history(self, user_id: str) -> list[Notification]:
        """
        Notifications retained by the user's open streams, newest first.

        A user with two tabs open sees each notification once.
        """
        seen = {}
        for sub in self._user_subscriptions(user_id):
            for notification in sub.notifications:
                seen.setdefault(notification.id, notification)
        return sorted(seen.values(), key=lambda n: n.timestamp, reverse=True)

    def mark_as_read(self, user_id: str, notification_id: str) -> bool:
        found = False
        for sub in self._user_subscriptions(user_id):
            found = sub.mark_as_read(notification_id) or found
        return found

    def clear_all(self, user_id: str) -> None:
        for sub in self._user_subscriptions(user_id):
            sub.clear_all()

    def revoke_user(self, user_id: str) -> int:
        """Close every subscription held by user_id. Returns count closed."""
        subs = self._user_subscriptions(user_id)
        for sub in subs:
            sub.close()
        return len(subs)

    def subscriber_count(self, user_id: str | None = None) -> int:
        with self._lock:
            if user_id is not None:
                return len(self._subscriptions.get(user_id, ()))
            return sum(len(subs) for subs in self._subscriptions.values())

    def reset(self) -> None:
        with self._lock:
            subs = [sub for subs in self._subscriptions.values() for sub in subs]
        for sub in subs:
            sub.close()

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.user_id)
            if not subs:
                return
            subs.discard(subscription)
            if not subs:
                del self._subscriptions[subscription.user_id]


broker = NotificationBroker()
