import pytest
from hypothesis import given, strategies as st

from eventreg.bus import EventRegistry


def make_recorder(log, tag=None):
    def handler(key, *args):
        log.append((tag, key, args) if tag is not None else (key,) + args)
    return handler


def test_publish_single_handler_receives_key_and_arg():
    log = []
    bus = EventRegistry()
    bus.subscribe(1, make_recorder(log))

    bus.publish(1, 42)

    assert log == [(1, 42)]


def test_same_key_handlers_fire_in_registration_order():
    log = []
    bus = EventRegistry()
    for tag in ("A", "B", "C"):
        bus.subscribe(6, lambda key, arg, tag=tag: log.append(tag))

    bus.publish(6, 6)

    assert log == ["A", "B", "C"]


def test_handlers_for_other_keys_do_not_fire():
    log = []
    bus = EventRegistry()
    bus.subscribe(6, lambda key, arg: log.append("A"))
    bus.subscribe(7, lambda key, arg: log.append("B"))

    bus.publish(6, "x")

    assert log == ["A"]


def test_unsubscribe_then_publish_fires_nothing():
    log = []
    bus = EventRegistry()
    bus.subscribe(6, lambda key, arg: log.append("A"))

    assert bus.unsubscribe(6) == 1
    report = bus.publish(6, "x")

    assert log == []
    assert report.matched == 0
    assert 6 not in bus


def test_unsubscribe_unknown_key_is_noop():
    bus = EventRegistry()
    assert bus.unsubscribe("never") == 0
    assert bus.unsubscribe("never") == 0


def test_publish_unknown_key_is_noop():
    bus = EventRegistry()
    report = bus.publish("nobody-listens", 1, 2, 3)
    assert report.matched == 0
    assert report.delivered == 0
    assert not report


def test_unsubscribe_removes_every_handler_for_key():
    bus = EventRegistry()
    for _ in range(3):
        bus.subscribe("k", lambda key: None)
    bus.subscribe("other", lambda key: None)

    assert bus.unsubscribe("k") == 3
    assert bus.handlers("k") == ()
    assert len(bus) == 1


def test_subscribe_returns_handler_and_aliases_match():
    bus = EventRegistry()
    seen = []

    def handler(key, arg):
        seen.append(arg)

    assert bus.on("tick", handler) is handler
    bus.emit("tick", 5)
    bus.off("tick")
    bus.emit("tick", 6)

    assert seen == [5]


def test_keyword_arguments_are_forwarded():
    seen = []
    bus = EventRegistry()
    bus.subscribe("k", lambda key, a, *, b: seen.append((key, a, b)))

    bus.publish("k", 1, b=2)

    assert seen == [("k", 1, 2)]


def test_non_callable_handler_rejected():
    bus = EventRegistry()
    with pytest.raises(TypeError):
        bus.subscribe(1, "not callable")
    assert 1 not in bus


def test_unhashable_key_rejected():
    bus = EventRegistry()
    with pytest.raises(TypeError):
        bus.subscribe([1, 2], lambda key: None)


def test_clear_drops_handlers_without_calling_them():
    called = []
    bus = EventRegistry()
    bus.subscribe(1, lambda key: called.append(key))
    bus.subscribe(2, lambda key: called.append(key))

    bus.clear()

    assert called == []
    assert len(bus) == 0
    assert bus.keys() == []


@given(
    key=st.integers(),
    n=st.integers(min_value=1, max_value=20),
    arg=st.integers(),
)
def test_every_handler_fires_once_in_order(key, n, arg):
    log = []
    bus = EventRegistry()
    for i in range(n):
        bus.subscribe(key, make_recorder(log, tag=i))

    report = bus.publish(key, arg)

    assert log == [(i, key, (arg,)) for i in range(n)]
    assert report.matched == n
    assert report.delivered == n


@given(
    k1=st.one_of(st.integers(), st.text(max_size=5)),
    k2=st.one_of(st.integers(), st.text(max_size=5)),
)
def test_publish_never_reaches_other_keys(k1, k2):
    """
    Property: a handler registered under k2 fires for publish(k1) only
    when k1 == k2.
    """
    log = []
    bus = EventRegistry()
    bus.subscribe(k2, make_recorder(log))

    bus.publish(k1, "payload")

    if k1 == k2:
        assert log == [(k2, "payload")]
    else:
        assert log == []
