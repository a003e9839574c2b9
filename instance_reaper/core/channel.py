"""
Channel Module
==============

A bounded, closable FIFO connecting concurrently running pipeline stages.

A :class:`Channel` is a thread-safe :class:`queue.Queue` plus a close
marker. Producers ``put`` items and ``close`` the channel once; the single
consumer iterates it, blocking while it is empty, until the close marker
is reached.

Example
-------
>>> from instance_reaper.core.channel import Channel
>>>
>>> channel = Channel(maxsize=50)
>>> channel.put("item")
>>> channel.close()
>>> list(channel)
['item']
"""

from __future__ import annotations

import queue
import threading
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosedError(RuntimeError):
    """Raised when putting onto a channel that has already been closed."""


class Channel(Generic[T]):
    """
    Bounded FIFO with an explicit end-of-stream signal.

    Parameters
    ----------
    maxsize : int, default=0
        Capacity of the channel. Writers block while it is full.
        Zero means unbounded.

    Notes
    -----
    Any number of threads may put. Exactly one thread may consume, and
    the channel must be closed exactly once, after the last put.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self.maxsize = maxsize
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._closed = False
        self._discarded = False

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed

    @property
    def discarded(self) -> bool:
        """Whether the consumer has given up on the channel."""
        return self._discarded

    def put(self, item: T) -> None:
        """
        Put an item, blocking while the channel is full.

        Once the channel is discarded the item is dropped instead.
        """
        if self._discarded:
            return
        if self._closed:
            raise ChannelClosedError("put on closed channel")
        self._queue.put(item)

    def close(self) -> None:
        """Signal that no further items will be put."""
        with self._lock:
            if self._closed:
                raise ChannelClosedError("channel already closed")
            self._closed = True
        if not self._discarded:
            self._queue.put(_CLOSED)

    def discard(self) -> None:
        """
        Stop consuming: drop queued items and every later put.

        Called by the consumer instead of reading to the end, so that a
        producer blocked on a full channel can run to completion.
        """
        self._discarded = True
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item

    def __repr__(self) -> str:
        return f"Channel(maxsize={self.maxsize}, closed={self._closed})"
