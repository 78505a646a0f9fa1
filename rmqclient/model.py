"""Message, queue and result types shared by producers and consumers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


@dataclass(frozen=True)
class MessageQueue:
    """A single queue of a topic on a named broker."""

    topic: str = ""
    broker_name: str = ""
    queue_id: int = 0

    def __str__(self) -> str:
        return (
            f"MessageQueue [topic={self.topic}, brokerName={self.broker_name}, "
            f"queueId={self.queue_id}]"
        )


@dataclass
class MessageExt:
    """A message as stored by and received from a broker."""

    topic: str = ""
    body: bytes = b""
    properties: dict[str, str] = field(default_factory=dict)
    flag: int = 0
    transaction_id: str = ""
    msg_id: str = ""
    queue: MessageQueue = field(default_factory=MessageQueue)
    queue_offset: int = 0
    commit_log_offset: int = 0
    store_size: int = 0
    sys_flag: int = 0
    born_timestamp: int = 0
    born_host: str = ""
    store_timestamp: int = 0
    store_host: str = ""
    body_crc: int = 0
    reconsume_times: int = 0
    prepared_transaction_offset: int = 0

    def get_property(self, key: str) -> str:
        """Return a property value, or an empty string if it is not set."""
        return self.properties.get(key, "")

    def with_property(self, key: str, value: str) -> None:
        """Set a property value."""
        self.properties[key] = value


class PullStatus(IntEnum):
    """Outcome of a pull request."""

    FOUND = 0
    NO_NEW_MSG = 1
    NO_MSG_MATCHED = 2
    OFFSET_ILLEGAL = 3
    BROKER_TIMEOUT = 4


@dataclass
class PullResult:
    """The answer of a broker to a pull request."""

    status: PullStatus = PullStatus.FOUND
    next_begin_offset: int = 0
    min_offset: int = 0
    max_offset: int = 0
    suggest_which_broker_id: int = 0
    body: bytes = b""
    message_exts: list[MessageExt] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"PullResult [status={int(self.status)}, nextBeginOffset={self.next_begin_offset}, "
            f"minOffset={self.min_offset}, maxOffset={self.max_offset}, "
            f"msgFoundList={len(self.message_exts)}]"
        )


class SendStatus(IntEnum):
    """Outcome of sending a message."""

    OK = 0
    FLUSH_DISK_TIMEOUT = 1
    FLUSH_SLAVE_TIMEOUT = 2
    SLAVE_NOT_AVAILABLE = 3
    UNKNOWN_ERROR = 4


@dataclass
class SendResult:
    """The answer of a broker to a send request."""

    status: SendStatus = SendStatus.OK
    msg_id: str = ""
    message_queue: MessageQueue | None = None
    queue_offset: int = 0
    transaction_id: str = ""
    offset_msg_id: str = ""
    region_id: str = ""
    trace_on: bool = False

    def __str__(self) -> str:
        return (
            f"SendResult [sendStatus={int(self.status)}, msgIds={self.msg_id}, "
            f"offsetMsgId={self.offset_msg_id}, queueOffset={self.queue_offset}, "
            f"messageQueue={self.message_queue}]"
        )