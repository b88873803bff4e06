"""
Tests for the in-process change feed.
"""

import pytest

from utils.realtime import ChangeFeed


class TestChangeFeed:
    """Subscribe, publish and unsubscribe."""

    def test_publish_reaches_topic_subscribers(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe('reservations', lambda event, record: received.append((event, record)))

        delivered = feed.publish('reservations', 'INSERT', {'id': 'r1'})

        assert delivered == 1
        assert received == [('INSERT', {'id': 'r1'})]

    def test_other_topics_not_delivered(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe('facilities', lambda event, record: received.append(event))

        assert feed.publish('reservations', 'INSERT') == 0
        assert received == []

    def test_event_filter(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe('reservations', lambda event, record: received.append(event), event='DELETE')

        feed.publish('reservations', 'INSERT')
        feed.publish('reservations', 'DELETE')

        assert received == ['DELETE']

    def test_wildcard_receives_every_event(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe('reservations', lambda event, record: received.append(event))

        for event in ('INSERT', 'UPDATE', 'DELETE'):
            feed.publish('reservations', event)

        assert received == ['INSERT', 'UPDATE', 'DELETE']

    def test_unknown_event_filter_rejected(self):
        with pytest.raises(ValueError):
            ChangeFeed().subscribe('reservations', lambda e, r: None, event='TRUNCATE')

    def test_unsubscribe_is_idempotent(self):
        feed = ChangeFeed()
        received = []
        subscription = feed.subscribe('reservations', lambda event, record: received.append(event))

        subscription.unsubscribe()
        subscription.unsubscribe()
        feed.publish('reservations', 'INSERT')

        assert received == []
        assert feed.subscriber_count() == 0

    def test_failing_subscriber_does_not_block_others(self):
        feed = ChangeFeed()
        received = []

        def broken(event, record):
            raise RuntimeError('boom')

        feed.subscribe('reservations', broken)
        feed.subscribe('reservations', lambda event, record: received.append(event))

        delivered = feed.publish('reservations', 'UPDATE')

        assert delivered == 1
        assert received == ['UPDATE']

    def test_subscriber_count_by_topic(self):
        feed = ChangeFeed()
        feed.subscribe('reservations', lambda e, r: None)
        feed.subscribe('reservations', lambda e, r: None, event='INSERT')
        feed.subscribe('auth', lambda e, r: None)

        assert feed.subscriber_count() == 3
        assert feed.subscriber_count('reservations') == 2
