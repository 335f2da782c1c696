import gc
from unittest.mock import MagicMock

from models.models import Location, Memory
from ui.live_memories import LiveMemories
from utils.constants import Message
from utils.errors import TransientIOError


class FakeStoreClient:
    def __init__(self):
        self.on_records = None
        self.on_error = None
        self.unsubscribe = MagicMock()

    def subscribe(self, on_records, on_error):
        self.on_records = on_records
        self.on_error = on_error
        return self.unsubscribe


def _memory(memory_id):
    return Memory(id=memory_id, story="s", location=Location(lat=0, lng=0))


def test_snapshot_follows_listener():
    store = FakeStoreClient()
    live = LiveMemories(store)
    live.start()
    assert live.loaded is False

    store.on_records([_memory("a"), _memory("b")])

    memories, version = live.snapshot()
    assert [m.id for m in memories] == ["a", "b"]
    assert version == 1
    assert live.loaded is True
    assert live.find("b").id == "b"
    assert live.find("missing") is None
    assert live.find(None) is None


def test_start_subscribes_once():
    store = FakeStoreClient()
    store.subscribe = MagicMock(wraps=store.subscribe)
    live = LiveMemories(store)
    live.start()
    live.start()
    store.subscribe.assert_called_once()


def test_error_keeps_last_records():
    store = FakeStoreClient()
    live = LiveMemories(store)
    live.start()
    store.on_records([_memory("a")])

    store.on_error(RuntimeError("permission denied"))

    assert live.error == "permission denied"
    assert [m.id for m in live.snapshot()[0]] == ["a"]
    live.dismiss_error()
    assert live.error is None


def test_stop_detaches_and_ignores_late_updates():
    store = FakeStoreClient()
    live = LiveMemories(store)
    live.start()

    live.stop()
    store.on_records([_memory("late")])
    store.on_error(RuntimeError("late"))

    store.unsubscribe.assert_called_once()
    assert live.snapshot()[0] == []
    assert live.error is None


def test_stop_twice_detaches_once():
    store = FakeStoreClient()
    live = LiveMemories(store)
    live.start()
    live.stop()
    live.stop()
    store.unsubscribe.assert_called_once()


def test_collected_session_detaches_listener():
    store = FakeStoreClient()
    live = LiveMemories(store)
    live.start()

    del live
    gc.collect()

    store.unsubscribe.assert_called_once()
    # The listener thread may still fire once more; nothing is left to update.
    store.on_records([_memory("late")])


class FakeSubscription:
    def __init__(self):
        self.stream_active = True
        self.calls = 0

    def __call__(self):
        self.calls += 1


class ReconnectingStoreClient:
    def __init__(self):
        self.subscriptions = []
        self.callbacks = []

    def subscribe(self, on_records, on_error):
        self.callbacks.append((on_records, on_error))
        self.subscriptions.append(FakeSubscription())
        return self.subscriptions[-1]


def test_closed_stream_is_replaced_on_next_read():
    store = ReconnectingStoreClient()
    live = LiveMemories(store)
    live.start()
    store.callbacks[0][0]([_memory("a")])

    store.subscriptions[0].stream_active = False
    memories, _ = live.snapshot()

    assert [m.id for m in memories] == ["a"]
    assert live.error == Message.LISTENER_RECONNECTING.value
    assert store.subscriptions[0].calls == 1
    assert len(store.subscriptions) == 2

    store.callbacks[1][0]([_memory("a"), _memory("b")])
    assert [m.id for m in live.snapshot()[0]] == ["a", "b"]
    assert live.error is None
    assert len(store.subscriptions) == 2

    live.stop()
    assert store.subscriptions[1].calls == 1
    assert store.subscriptions[0].calls == 1


def test_no_reconnect_after_stop():
    store = ReconnectingStoreClient()
    live = LiveMemories(store)
    live.start()
    live.stop()

    store.subscriptions[0].stream_active = False
    live.snapshot()

    assert len(store.subscriptions) == 1
    assert live.error is None


def test_failed_reconnect_retries_on_next_read():
    store = ReconnectingStoreClient()
    live = LiveMemories(store)
    live.start()
    store.subscriptions[0].stream_active = False
    real_subscribe = store.subscribe
    store.subscribe = MagicMock(side_effect=TransientIOError("firestore unavailable"))

    live.snapshot()
    assert live.error == "firestore unavailable"

    store.subscribe = real_subscribe
    live.snapshot()
    assert len(store.subscriptions) == 2
    assert store.subscriptions[0].calls == 1
