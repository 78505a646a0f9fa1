"""Rolling consumption and pull statistics kept per topic and group."""

from __future__ import annotations

import calendar
import logging
import math
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

_MINUTE_WINDOW = 7
_HOUR_WINDOW = 7
_DAY_WINDOW = 25

_SAMPLE_SECONDS_INTERVAL = 10.0
_SAMPLE_MINUTES_INTERVAL = 600.0
_SAMPLE_HOUR_INTERVAL = 3600.0
_LOG_MINUTE_INTERVAL = 60.0
_LOG_HOUR_INTERVAL = 3600.0
_LOG_DAY_INTERVAL = 86400.0


@dataclass(frozen=True)
class CallSnapshot:
    """Accumulated counters captured at one sampling moment."""

    timestamp: int
    time: int
    value: int


@dataclass(frozen=True)
class StatsSnapshot:
    """Totals and rates computed over a window of samples."""

    sum: int = 0
    tps: float = 0.0
    avgpt: float = 0.0


@dataclass
class ConsumeStatus:
    """Pull and consume figures for one topic and group."""

    pull_rt: float = 0.0
    pull_tps: float = 0.0
    consume_rt: float = 0.0
    consume_ok_tps: float = 0.0
    consume_failed_tps: float = 0.0
    consume_failed_msgs: int = 0


def _divide(numerator: float, denominator: float) -> float:
    """Floating division that yields NaN or infinity instead of raising."""
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def compute_stats_data(snapshots: Sequence[CallSnapshot]) -> StatsSnapshot:
    """Compute sum, TPS and average per call between the first and last sample."""
    if not snapshots:
        return StatsSnapshot()
    first, last = snapshots[0], snapshots[-1]
    total = last.value - first.value
    tps = _divide(float(total * 1000), float(last.timestamp - first.timestamp))
    times_diff = last.time - first.time
    avgpt = total / times_diff if times_diff > 0 else 0.0
    return StatsSnapshot(sum=total, tps=tps, avgpt=avgpt)


def next_minutes_time() -> datetime:
    """Return the moment one minute from now."""
    return datetime.now() + timedelta(minutes=1)


def next_hour_time() -> datetime:
    """Return the moment one hour from now."""
    return datetime.now() + timedelta(hours=1)


def next_month_time() -> datetime:
    """Return the moment one calendar month from now, overflowing short months."""
    now = datetime.now()
    year, month = divmod(now.month, 12)
    year += now.year
    month += 1
    base = now.replace(year=year, month=month, day=1)
    return base + timedelta(days=now.day - 1)


class StatsItem:
    """Counters for one key together with their sampled history."""

    def __init__(self, stats_name: str, stats_key: str) -> None:
        self.stats_name = stats_name
        self.stats_key = stats_key
        self.value = 0
        self.times = 0
        self._counter_lock = threading.Lock()
        self._lock = threading.Lock()
        self._minute: deque[CallSnapshot] = deque(maxlen=_MINUTE_WINDOW)
        self._hour: deque[CallSnapshot] = deque(maxlen=_HOUR_WINDOW)
        self._day: deque[CallSnapshot] = deque(maxlen=_DAY_WINDOW)

    def add(self, inc_value: int, inc_times: int) -> None:
        """Add to the running value and call count."""
        with self._counter_lock:
            self.value += inc_value
            self.times += inc_times

    def _capture(self) -> CallSnapshot:
        with self._counter_lock:
            return CallSnapshot(
                timestamp=int(time.time()) * 1000, time=self.times, value=self.value
            )

    def _sample_into(self, window: deque[CallSnapshot]) -> None:
        snapshot = self._capture()
        with self._lock:
            window.append(snapshot)

    def _compute(self, window: deque[CallSnapshot]) -> StatsSnapshot:
        with self._lock:
            samples = list(window)
        return compute_stats_data(samples)

    def sampling_in_seconds(self) -> None:
        """Record a sample in the one-minute window."""
        self._sample_into(self._minute)

    def sampling_in_minutes(self) -> None:
        """Record a sample in the one-hour window."""
        self._sample_into(self._hour)

    def sampling_in_hour(self) -> None:
        """Record a sample in the one-day window."""
        self._sample_into(self._day)

    def get_stats_data_in_minute(self) -> StatsSnapshot:
        return self._compute(self._minute)

    def get_stats_data_in_hour(self) -> StatsSnapshot:
        return self._compute(self._hour)

    def get_stats_data_in_day(self) -> StatsSnapshot:
        return self._compute(self._day)

    def _log(self, period: str, snapshot: StatsSnapshot) -> None:
        logger.info(
            "Stats In One %s, statsName=%s statsKey=%s SUM: %d TPS: %.2f AVGPT: %.2f",
            period,
            self.stats_name,
            self.stats_key,
            snapshot.sum,
            snapshot.tps,
            snapshot.avgpt,
        )

    def _log_minute(self) -> None:
        self._log("Minute", self.get_stats_data_in_minute())

    def _log_hour(self) -> None:
        self._log("Hour", self.get_stats_data_in_hour())

    def _log_day(self) -> None:
        self._log("Day", self.get_stats_data_in_day())


@dataclass
class _Task:
    due: float
    interval: float
    action: Callable[[], None]


class StatsItemSet:
    """A named table of stats items, sampled periodically in the background."""

    def __init__(self, stats_name: str) -> None:
        self.stats_name = stats_name
        self._items: dict[str, StatsItem] = {}
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Whether the background sampler is alive."""
        return self._thread is not None and self._thread.is_alive()

    def _each(self) -> list[StatsItem]:
        with self._lock:
            return list(self._items.values())

    def sampling_in_seconds(self) -> None:
        for item in self._each():
            item.sampling_in_seconds()

    def sampling_in_minutes(self) -> None:
        for item in self._each():
            item.sampling_in_minutes()

    def sampling_in_hour(self) -> None:
        for item in self._each():
            item.sampling_in_hour()

    def _log_minutes(self) -> None:
        for item in self._each():
            item._log_minute()

    def _log_hour(self) -> None:
        for item in self._each():
            item._log_hour()

    def _log_day(self) -> None:
        for item in self._each():
            item._log_day()

    def _get_or_create(self, key: str) -> StatsItem:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                item = StatsItem(self.stats_name, key)
                self._items[key] = item
            return item

    def add_value(self, key: str, inc_value: int, inc_times: int) -> None:
        """Add to the counters of a key, creating its item on first use."""
        self._get_or_create(key).add(inc_value, inc_times)

    def get_stats_item(self, key: str) -> StatsItem:
        """Return the item of a key; raise KeyError if there is none."""
        with self._lock:
            return self._items[key]

    def _lookup(self, key: str) -> StatsItem | None:
        with self._lock:
            return self._items.get(key)

    def get_stats_data_in_minute(self, key: str) -> StatsSnapshot:
        item = self._lookup(key)
        return item.get_stats_data_in_minute() if item else StatsSnapshot()

    def get_stats_data_in_hour(self, key: str) -> StatsSnapshot:
        item = self._lookup(key)
        return item.get_stats_data_in_hour() if item else StatsSnapshot()

    def get_stats_data_in_day(self, key: str) -> StatsSnapshot:
        item = self._lookup(key)
        return item.get_stats_data_in_day() if item else StatsSnapshot()

    def start(self) -> None:
        """Start the background sampling and logging, once."""
        if self._thread is not None or self._closed.is_set():
            return
        now = time.monotonic()
        month_delay = (next_month_time() - datetime.now()).total_seconds()
        tasks = [
            _Task(now + _SAMPLE_SECONDS_INTERVAL, _SAMPLE_SECONDS_INTERVAL, self.sampling_in_seconds),
            _Task(now + _SAMPLE_MINUTES_INTERVAL, _SAMPLE_MINUTES_INTERVAL, self.sampling_in_minutes),
            _Task(now + _SAMPLE_HOUR_INTERVAL, _SAMPLE_HOUR_INTERVAL, self.sampling_in_hour),
            _Task(now + 2 * _LOG_MINUTE_INTERVAL, _LOG_MINUTE_INTERVAL, self._log_minutes),
            _Task(now + 2 * _LOG_HOUR_INTERVAL, _LOG_HOUR_INTERVAL, self._log_hour),
            _Task(now + month_delay + _LOG_DAY_INTERVAL, _LOG_DAY_INTERVAL, self._log_day),
        ]
        self._thread = threading.Thread(
            target=self._run, args=(tasks,), name=f"stats-{self.stats_name}", daemon=True
        )
        self._thread.start()

    def _run(self, tasks: list[_Task]) -> None:
        while not self._closed.is_set():
            next_due = min(task.due for task in tasks)
            if self._closed.wait(max(0.0, next_due - time.monotonic())):
                return
            now = time.monotonic()
            for task in tasks:
                if task.due <= now:
                    task.due = now + task.interval
                    try:
                        task.action()
                    except Exception:
                        logger.exception("stats task of %s failed", self.stats_name)

    def close(self) -> None:
        """Stop the background sampler."""
        self._closed.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)


class StatsManager:
    """Pull and consume statistics for all topics and groups of a consumer."""

    def __init__(self, start: bool = True) -> None:
        self.consume_ok_tps = StatsItemSet("CONSUME_OK_TPS")
        self.consume_rt = StatsItemSet("CONSUME_RT")
        self.consume_failed_tps = StatsItemSet("CONSUME_FAILED_TPS")
        self.pull_tps = StatsItemSet("PULL_TPS")
        self.pull_rt = StatsItemSet("PULL_RT")
        self._close_lock = threading.Lock()
        self._closed = False
        if start:
            for item_set in self._sets():
                item_set.start()

    def _sets(self) -> tuple[StatsItemSet, ...]:
        return (
            self.consume_ok_tps,
            self.consume_rt,
            self.consume_failed_tps,
            self.pull_tps,
            self.pull_rt,
        )

    @staticmethod
    def _key(group: str, topic: str) -> str:
        return f"{topic}@{group}"

    def increase_pull_rt(self, group: str, topic: str, rt: int) -> None:
        self.pull_rt.add_value(self._key(group, topic), rt, 1)

    def increase_pull_tps(self, group: str, topic: str, msgs: int) -> None:
        self.pull_tps.add_value(self._key(group, topic), msgs, 1)

    def increase_consume_rt(self, group: str, topic: str, rt: int) -> None:
        self.consume_rt.add_value(self._key(group, topic), rt, 1)

    def increase_consume_ok_tps(self, group: str, topic: str, msgs: int) -> None:
        self.consume_ok_tps.add_value(self._key(group, topic), msgs, 1)

    def increase_consume_failed_tps(self, group: str, topic: str, msgs: int) -> None:
        self.consume_failed_tps.add_value(self._key(group, topic), msgs, 1)

    def get_pull_rt(self, group: str, topic: str) -> StatsSnapshot:
        return self.pull_rt.get_stats_data_in_minute(self._key(group, topic))

    def get_pull_tps(self, group: str, topic: str) -> StatsSnapshot:
        return self.pull_tps.get_stats_data_in_minute(self._key(group, topic))

    def get_consume_rt(self, group: str, topic: str) -> StatsSnapshot:
        key = self._key(group, topic)
        snapshot = self.pull_rt.get_stats_data_in_minute(key)
        if snapshot.sum == 0:
            return self.consume_rt.get_stats_data_in_hour(key)
        return snapshot

    def get_consume_ok_tps(self, group: str, topic: str) -> StatsSnapshot:
        return self.consume_ok_tps.get_stats_data_in_minute(self._key(group, topic))

    def get_consume_failed_tps(self, group: str, topic: str) -> StatsSnapshot:
        return self.consume_failed_tps.get_stats_data_in_minute(self._key(group, topic))

    def get_consume_status(self, group: str, topic: str) -> ConsumeStatus:
        """Collect the current figures of one topic and group."""
        status = ConsumeStatus()
        status.pull_tps = self.get_pull_rt(group, topic).tps
        status.pull_tps = self.get_pull_tps(group, topic).tps
        status.consume_rt = self.get_consume_rt(group, topic).avgpt
        status.consume_ok_tps = self.get_consume_ok_tps(group, topic).tps
        status.consume_failed_tps = self.get_consume_failed_tps(group, topic).tps
        status.consume_failed_msgs = self.consume_failed_tps.get_stats_data_in_hour(
            self._key(group, topic)
        ).sum
        return status

    def shutdown(self) -> None:
        """Stop all background samplers; later calls do nothing."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        for item_set in self._sets():
            item_set.close()