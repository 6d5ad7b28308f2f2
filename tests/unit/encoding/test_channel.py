import threading

import pytest

from rowcast.encoding.channel import RecordChannel


def test_iteration_yields_in_order_until_closed() -> None:
    channel = RecordChannel()

    def produce() -> None:
        for i in range(5):
            channel.put(i)
        channel.close()

    thread = threading.Thread(target=produce)
    thread.start()
    received = list(channel)
    thread.join()

    assert received == [0, 1, 2, 3, 4]


def test_put_after_close_is_rejected() -> None:
    channel = RecordChannel()
    channel.close()

    with pytest.raises(ValueError, match="closed channel"):
        channel.put(1)


def test_close_is_idempotent_and_every_consumer_stops() -> None:
    channel = RecordChannel()
    channel.put("a")
    channel.close()
    channel.close()

    assert channel.closed
    assert list(channel) == ["a"]
    assert list(channel) == []


def test_context_manager_closes() -> None:
    with RecordChannel() as channel:
        channel.put(1)

    assert channel.closed
    assert list(channel) == [1]


def test_close_does_not_wait_for_space_on_a_full_channel() -> None:
    channel = RecordChannel(maxsize=1)
    channel.put("a")

    closer = threading.Thread(target=channel.close)
    closer.start()
    closer.join(timeout=2)

    assert not closer.is_alive()
    assert list(channel) == ["a"]


def test_close_releases_a_producer_blocked_on_a_full_channel() -> None:
    channel = RecordChannel(maxsize=1)
    channel.put("a")
    errors: list[BaseException] = []

    def produce() -> None:
        try:
            channel.put("b")
        except ValueError as exc:
            errors.append(exc)

    producer = threading.Thread(target=produce)
    producer.start()
    channel.close()
    producer.join(timeout=2)

    assert not producer.is_alive()
    assert len(errors) == 1
    assert list(channel) == ["a"]


def test_put_times_out_while_full() -> None:
    channel = RecordChannel(maxsize=1)
    channel.put("a")

    with pytest.raises(TimeoutError):
        channel.put("b", timeout=0.01)
