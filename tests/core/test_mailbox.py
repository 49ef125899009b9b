"""Tests for the worker mailbox."""

import threading as _threading

import pytest as _pytest

import treeconf.core as core
import treeconf.core.mailbox as mailbox


class TestQueue:
    """Tests for the bounded FIFO part."""

    def test_fifo_order(self) -> None:
        """Messages come out in the order they were put."""
        box: mailbox.Mailbox[int] = mailbox.Mailbox(4)
        for i in range(3):
            box.put(i)
        assert [box.get(), box.get(), box.get()] == [0, 1, 2]

    def test_invalid_size(self) -> None:
        """The queue needs room for at least one message."""
        with _pytest.raises(ValueError):
            mailbox.Mailbox(0)

    def test_put_blocks_while_full(self) -> None:
        """A full queue blocks the sender until a message is taken."""
        box: mailbox.Mailbox[int] = mailbox.Mailbox(1)
        box.put(1)
        done = _threading.Event()

        def sender() -> None:
            box.put(2)
            done.set()

        thread = _threading.Thread(target=sender)
        thread.start()
        assert not done.wait(0.1)
        assert box.get() == 1
        assert done.wait(5)
        thread.join()
        assert box.get() == 2

    def test_put_after_close(self) -> None:
        """Closed mailboxes refuse new messages."""
        box: mailbox.Mailbox[int] = mailbox.Mailbox(1)
        box.close()
        assert box.closed
        with _pytest.raises(core.ConfigClosedError):
            box.put(1)

    def test_close_wakes_blocked_sender(self) -> None:
        """A sender blocked on a full queue fails once the mailbox closes."""
        box: mailbox.Mailbox[int] = mailbox.Mailbox(1)
        box.put(1)
        errors: list[Exception] = []

        def sender() -> None:
            try:
                box.put(2)
            except core.ConfigClosedError as e:
                errors.append(e)

        thread = _threading.Thread(target=sender)
        thread.start()
        box.close()
        thread.join(5)
        assert len(errors) == 1

    def test_post_ignores_limit_and_close(self) -> None:
        """Internal notices are always accepted."""
        box: mailbox.Mailbox[str] = mailbox.Mailbox(1)
        box.put("a")
        box.post("b")
        box.close()
        box.post("c")
        assert [box.get(), box.get(), box.get(), box.get()] == ["a", "b", "c", None]


class TestLatestSlot:
    """Tests for the coalescing slot."""

    def test_offers_coalesce(self) -> None:
        """Only the most recent offer is kept."""
        box: mailbox.Mailbox[int] = mailbox.Mailbox(1)
        box.offer_latest(1)
        box.offer_latest(2)
        box.offer_latest(3)
        box.close()
        assert box.get() == 3
        assert box.get() is None

    def test_queue_first(self) -> None:
        """Queued messages are delivered before the slot."""
        box: mailbox.Mailbox[str] = mailbox.Mailbox(2)
        box.offer_latest("latest")
        box.put("queued")
        assert box.get() == "queued"
        assert box.get() == "latest"

    def test_accept_latest_false_waits_for_queue(self) -> None:
        """Without accept_latest the slot is skipped."""
        box: mailbox.Mailbox[str] = mailbox.Mailbox(2)
        box.offer_latest("latest")
        result: list[str | None] = []
        thread = _threading.Thread(target=lambda: result.append(box.get(accept_latest=False)))
        thread.start()
        thread.join(0.1)
        assert result == []
        box.post("notice")
        thread.join(5)
        assert result == ["notice"]
        assert box.get() == "latest"

    def test_offer_after_close_dropped(self) -> None:
        """Offers to a closed mailbox are dropped without error."""
        box: mailbox.Mailbox[int] = mailbox.Mailbox(1)
        box.close()
        box.offer_latest(1)
        assert box.get() is None

    def test_drain(self) -> None:
        """drain() returns queued messages and empties the slot."""
        box: mailbox.Mailbox[int] = mailbox.Mailbox(3)
        box.put(1)
        box.put(2)
        box.offer_latest(3)
        assert box.drain() == [1, 2]
        box.close()
        assert box.get() is None
