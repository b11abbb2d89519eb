"""Deduplicating, seek-range bounded set of timeline regions.

Goals:
- Track out-of-band timeline regions (ad markers, DASH EventStream entries)
  reported by manifest / segment parsing.
- Drop duplicate reports: parsers re-announce the same region on every manifest
  refresh, so the timeline keeps the bookkeeping instead of each parser.
- Bound memory by periodically dropping regions that ended before the start of
  the current seek range.

Design:
RegionTimeline is a QObject constructed with a zero-argument accessor returning
the current ``SeekRange``. It exposes:
    addRegion(region)
    regions() -> tuple
    release()
    subscribe(event, callback) / unsubscribe(event, callback)
Signals:
    regionAdded(object)     # emitted synchronously from addRegion on admission
    regionRemoved(object)   # emitted once per region evicted by a filter pass

Only ``SeekRange.start`` is consulted when filtering. Regions entirely in the
future stay relevant however far ahead they are; regions that ended before the
seekable start can never be reached again.

Threading: the filter pass runs from a QTimer on the owning thread's event loop.
Producers on worker threads may call addRegion. The region list is guarded by a
QRecursiveMutex that is held while notifications are delivered, so an observer
may call back into the timeline from its callback, and release() on another
thread waits for an in-flight notification to finish.

Callbacks registered through subscribe() use Qt.DirectConnection and run on the
emitting thread before addRegion returns. Code connecting straight to the
signals must pass Qt.DirectConnection as well; a queued delivery already posted
to an event loop is not cancelled by release().

Release: release() is idempotent and terminal. Afterwards addRegion is a no-op,
regions() is empty and no further signal is emitted. Regions dropped by
release() do not produce regionRemoved.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import (
    QMetaObject,
    QObject,
    QRecursiveMutex,
    Qt,
    QThread,
    QTimer,
    Signal,
)

from ..core.region import SeekRange, TimelineRegion, is_similar
from ..utils.timefmt import format_range

logger = logging.getLogger(__name__)

REGION_FILTER_INTERVAL = 2.0  # seconds
MIN_FILTER_INTERVAL = 0.001  # QTimer resolution is 1 ms

REGION_ADD_EVENT = "regionadd"
REGION_REMOVE_EVENT = "regionremove"

RegionCallback = Callable[[TimelineRegion], None]


class RegionTimeline(QObject):
    regionAdded = Signal(object)  # TimelineRegion
    regionRemoved = Signal(object)  # TimelineRegion

    def __init__(
        self,
        get_seek_range: Callable[[], SeekRange],
        parent: Optional[QObject] = None,
        *,
        filter_interval: float = REGION_FILTER_INTERVAL,
    ):
        super().__init__(parent)
        if filter_interval < MIN_FILTER_INTERVAL:
            raise ValueError("filter_interval must be at least 1 ms")
        self._get_seek_range = get_seek_range
        self._regions: List[TimelineRegion] = []
        self._mutex = QRecursiveMutex()
        self._released = False
        self._filter_interval = float(filter_interval)
        self._subscribers: Dict[str, List[RegionCallback]] = {
            REGION_ADD_EVENT: [],
            REGION_REMOVE_EVENT: [],
        }
        self._filter_timer = QTimer(self)
        self._filter_timer.setInterval(round(self._filter_interval * 1000))
        self._filter_timer.timeout.connect(self._filter_by_seek_range)
        self._filter_timer.start()

    # Public API
    def addRegion(self, region: TimelineRegion) -> None:
        self._mutex.lock()
        try:
            if self._released:
                logger.debug("ignoring %s: timeline released", region)
                return
            if self._find_similar_region(region) is not None:
                logger.debug("dropping duplicate region %s", region)
                return
            self._regions.append(region)
            logger.debug("region added %s", region)
            self.regionAdded.emit(region)
        finally:
            self._mutex.unlock()

    def regions(self) -> tuple[TimelineRegion, ...]:
        """Return a snapshot of the tracked regions.

        The tuple cannot be used to modify the timeline. Order is unspecified.
        """
        self._mutex.lock()
        try:
            return tuple(self._regions)
        finally:
            self._mutex.unlock()

    def release(self) -> None:
        """Stop filtering and drop all regions without notifying observers.

        Safe to call from any thread; the timer is stopped on its own thread.
        """
        self._mutex.lock()
        try:
            if self._released:
                return
            self._released = True
            dropped = len(self._regions)
            self._regions.clear()
            for event, callbacks in self._subscribers.items():
                signal = self._signal_for(event)
                for callback in callbacks:
                    signal.disconnect(callback)
                callbacks.clear()
            # Observers connected straight to the signals are silenced too.
            self.blockSignals(True)
        finally:
            self._mutex.unlock()
        if QThread.currentThread() is self._filter_timer.thread():
            self._filter_timer.stop()
        else:
            QMetaObject.invokeMethod(self._filter_timer, "stop", Qt.QueuedConnection)
        logger.debug("timeline released, %d region(s) dropped", dropped)

    def is_released(self) -> bool:
        return self._released

    def filter_interval(self) -> float:
        return self._filter_interval

    # Observer API
    def subscribe(self, event: str, callback: RegionCallback) -> None:
        """Call ``callback(region)`` for every ``event`` notification.

        ``event`` is ``"regionadd"`` or ``"regionremove"``. Callbacks run
        synchronously, in subscription order, on the emitting thread.
        """
        signal = self._signal_for(event)
        self._mutex.lock()
        try:
            if self._released or callback in self._subscribers[event]:
                return
            signal.connect(callback, Qt.DirectConnection)
            self._subscribers[event].append(callback)
        finally:
            self._mutex.unlock()

    def unsubscribe(self, event: str, callback: RegionCallback) -> None:
        signal = self._signal_for(event)
        self._mutex.lock()
        try:
            callbacks = self._subscribers[event]
            if callback not in callbacks:
                return
            callbacks.remove(callback)
            signal.disconnect(callback)
        finally:
            self._mutex.unlock()

    # Internal
    def _signal_for(self, event: str):
        if event == REGION_ADD_EVENT:
            return self.regionAdded
        if event == REGION_REMOVE_EVENT:
            return self.regionRemoved
        raise ValueError(f"unknown region event: {event!r}")

    def _find_similar_region(
        self, region: TimelineRegion
    ) -> Optional[TimelineRegion]:
        # Caller holds the mutex.
        for existing in self._regions:
            if is_similar(existing, region):
                return existing
        return None

    def _filter_by_seek_range(self) -> None:
        if self._released:
            return
        # One snapshot per pass so every region is judged against the same cut.
        seek_range = self._get_seek_range()
        self._mutex.lock()
        try:
            if self._released:
                return
            kept: List[TimelineRegion] = []
            evicted: List[TimelineRegion] = []
            for region in self._regions:
                if region.endTime < seek_range.start:
                    evicted.append(region)
                else:
                    kept.append(region)
            self._regions = kept
            if evicted:
                logger.debug(
                    "evicting %d region(s) behind seek range %s",
                    len(evicted),
                    format_range(seek_range.start, seek_range.end),
                )
            for region in evicted:
                if self._released:
                    break
                self.regionRemoved.emit(region)
        finally:
            self._mutex.unlock()


__all__ = [
    "RegionTimeline",
    "REGION_FILTER_INTERVAL",
    "REGION_ADD_EVENT",
    "REGION_REMOVE_EVENT",
]
