"""
In-process change feed.

Stands in for the hosted backend's realtime channel: the models layer
publishes a row-level event after every committed write, and subscribers
(one per signed-in client context) receive it synchronously in the writing
thread.

Usage:
    from extensions import realtime

    subscription = realtime.feed.subscribe('reservations', on_change)
    ...
    subscription.unsubscribe()
"""

import logging
import threading

logger = logging.getLogger(__name__)

EVENT_INSERT = 'INSERT'
EVENT_UPDATE = 'UPDATE'
EVENT_DELETE = 'DELETE'
EVENT_ANY = '*'

VALID_EVENTS = (EVENT_INSERT, EVENT_UPDATE, EVENT_DELETE)


class Subscription:
    """Handle returned by ChangeFeed.subscribe()."""

    def __init__(self, feed, topic: str, event: str, callback):
        self.feed = feed
        self.topic = topic
        self.event = event
        self.callback = callback
        self.active = True

    def matches(self, topic: str, event: str) -> bool:
        return self.active and self.topic == topic and self.event in (EVENT_ANY, event)

    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        if self.active:
            self.active = False
            self.feed._remove(self)


class ChangeFeed:
    """Topic-based publish/subscribe registry guarded by a lock."""

    def __init__(self):
        self._subscriptions = []
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback, event: str = EVENT_ANY) -> Subscription:
        """
        Register a callback for events on a topic (usually a table name).

        Args:
            topic: Table name ('reservations') or other topic ('auth')
            callback: Called as callback(event, record)
            event: 'INSERT', 'UPDATE', 'DELETE' or '*' for all

        Returns:
            Subscription handle
        """
        if event != EVENT_ANY and event not in VALID_EVENTS:
            raise ValueError(f'Unknown change event: {event}')

        subscription = Subscription(self, topic, event, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug(f'Subscribed to {topic}:{event}')
        return subscription

    def publish(self, topic: str, event: str, record: dict = None) -> int:
        """
        Deliver an event to every matching subscriber.

        A failing subscriber is logged and skipped so the remaining
        subscribers still see the event.

        Returns:
            Number of subscribers the event was delivered to
        """
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(topic, event)]

        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(event, record)
                delivered += 1
            except Exception as e:
                logger.error(f'Change feed subscriber failed on {topic}:{event}: {e}', exc_info=True)
        return delivered

    def subscriber_count(self, topic: str = None) -> int:
        with self._lock:
            if topic is None:
                return len(self._subscriptions)
            return len([s for s in self._subscriptions if s.topic == topic])

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
        logger.debug(f'Unsubscribed from {subscription.topic}:{subscription.event}')
