"""Settings, enumerations and limits of a push consumer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from rmqclient.constants import DEFAULT_CONSUMER_GROUP
from rmqclient.strategy import AllocateStrategy, allocate_by_averagely

logger = logging.getLogger(__name__)

MAX_INT32 = 2**31 - 1
DEFAULT_MAX_RECONSUME_TIMES = 16
MIN_SUSPEND_MILLIS = 10
MAX_SUSPEND_MILLIS = 30000


class ConsumeFromWhere(IntEnum):
    """Where a new consumer group starts reading a queue."""

    LAST_OFFSET = 0
    FIRST_OFFSET = 1
    TIMESTAMP = 2


_WHERE_NAMES = {
    ConsumeFromWhere.LAST_OFFSET: "CONSUME_FROM_LAST_OFFSET",
    ConsumeFromWhere.FIRST_OFFSET: "CONSUME_FROM_FIRST_OFFSET",
    ConsumeFromWhere.TIMESTAMP: "CONSUME_FROM_TIMESTAMP",
}


def where_name(from_where: Any) -> str:
    """Return the wire name of a start position, or "UNKOWN" for anything else."""
    try:
        return _WHERE_NAMES[ConsumeFromWhere(from_where)]
    except (ValueError, KeyError, TypeError):
        return "UNKOWN"


class MessageModel(Enum):
    """How the consumers of a group share the messages of a topic."""

    BROADCASTING = "BroadCasting"
    CLUSTERING = "Clustering"

    def __str__(self) -> str:
        return self.value


class ConsumeResult(IntEnum):
    """What a message listener tells the consumer about a batch."""

    CONSUME_SUCCESS = 0
    CONSUME_RETRY_LATER = 1
    COMMIT = 2
    ROLLBACK = 3
    SUSPEND_CURRENT_QUEUE_A_MOMENT = 4


@dataclass
class _Limit:
    name: str
    low: int
    high: int
    default: int


_LIMITS = (
    _Limit("consume_concurrently_max_span", 1, 65535, 1000),
    _Limit("pull_threshold_for_queue", 1, 65535, 1024),
    _Limit("pull_threshold_for_topic", 1, 6553500, 102400),
    _Limit("pull_threshold_size_for_queue", 1, 1024, 512),
    _Limit("pull_threshold_size_for_topic", 1, 102400, 51200),
    _Limit("consume_message_batch_max_size", 1, 1024, 1),
    _Limit("pull_batch_size", 1, 1024, 32),
)

_MAX_PULL_INTERVAL = 65.535


@dataclass
class PushConsumerOptions:
    """Settings of a push consumer; zero values are filled in by validate()."""

    group_name: str = ""
    namespace: str = ""
    instance_name: str = "DEFAULT"
    unit_mode: bool = False
    consumer_model: MessageModel = MessageModel.CLUSTERING
    from_where: ConsumeFromWhere = ConsumeFromWhere.LAST_OFFSET
    consume_orderly: bool = False
    strategy: AllocateStrategy = allocate_by_averagely
    interceptors: list[Callable[..., Any]] = field(default_factory=list)
    consume_concurrently_max_span: int = 0
    pull_threshold_for_queue: int = 0
    pull_threshold_for_topic: int = 0
    pull_threshold_size_for_queue: int = 0
    pull_threshold_size_for_topic: int = 0
    pull_interval: float = 0.0
    consume_message_batch_max_size: int = 0
    pull_batch_size: int = 0
    max_reconsume_times: int = -1
    suspend_current_queue_time_millis: int = 1000
    consume_timeout: float = 15 * 60.0
    max_time_consume_continuously: float = 60.0
    rebalance_lock_interval: float = 20.0
    auto_commit: bool = True
    post_subscription_when_pull: bool = False

    def validate(self) -> list[str]:
        """Fill in defaults for unset limits and return the problems found.

        Out-of-range values are kept as they are; each is reported and logged.
        """
        problems: list[str] = []
        if self.group_name == DEFAULT_CONSUMER_GROUP:
            problems.append(
                f"consumerGroup can't equal [{DEFAULT_CONSUMER_GROUP}], "
                "please specify another one."
            )
        for limit in _LIMITS:
            value = getattr(self, limit.name)
            if limit.low <= value <= limit.high:
                continue
            if value == 0:
                setattr(self, limit.name, limit.default)
            else:
                problems.append(
                    f"option.{limit.name} out of range [{limit.low}, {limit.high}]"
                )
        if self.pull_interval < 0 or self.pull_interval > _MAX_PULL_INTERVAL:
            problems.append("option.pull_interval out of range [0, 65535]")
        for problem in problems:
            logger.error(problem)
        return problems

    def max_reconsume_times_for_retry(self) -> int:
        """Reconsume limit sent to the broker with a message sent back."""
        if self.max_reconsume_times == -1:
            return DEFAULT_MAX_RECONSUME_TIMES
        return self.max_reconsume_times

    def orderly_max_reconsume_times(self) -> int:
        """Reconsume limit applied locally by an orderly consumer."""
        if self.max_reconsume_times == -1:
            return MAX_INT32
        return self.max_reconsume_times

    def clamp_suspend_millis(self, suspend_time_millis: int) -> int:
        """Bound a suspend time to [10, 30000] ms; -1 means the configured time."""
        if suspend_time_millis == -1:
            suspend_time_millis = self.suspend_current_queue_time_millis
        return max(MIN_SUSPEND_MILLIS, min(MAX_SUSPEND_MILLIS, suspend_time_millis))