"""Strategies for allocating message queues among the consumers of a group."""

from __future__ import annotations

import bisect
import logging
import zlib
from collections.abc import Callable, Sequence

from rmqclient.model import MessageQueue

logger = logging.getLogger(__name__)

AllocateStrategy = Callable[
    [str, str, Sequence[MessageQueue], Sequence[str]], "list[MessageQueue] | None"
]

DEFAULT_REPLICAS = 20


class ConsistentHash:
    """A CRC32 hash ring with a fixed number of virtual nodes per member."""

    def __init__(self, number_of_replicas: int = DEFAULT_REPLICAS) -> None:
        self.number_of_replicas = number_of_replicas
        self._circle: dict[int, str] = {}
        self._sorted_hashes: list[int] = []
        self.members: set[str] = set()

    @staticmethod
    def _hash_key(key: str) -> int:
        return zlib.crc32(key.encode("utf-8")) & 0xFFFFFFFF

    def add(self, element: str) -> None:
        """Place an element on the ring with all its virtual nodes."""
        for idx in range(self.number_of_replicas):
            self._circle[self._hash_key(f"{idx}{element}")] = element
        self.members.add(element)
        self._sorted_hashes = sorted(self._circle)

    def get(self, name: str) -> str:
        """Return the member closest after the hash of a name on the ring."""
        if not self._circle:
            raise LookupError("empty circle")
        position = bisect.bisect_right(self._sorted_hashes, self._hash_key(name))
        if position >= len(self._sorted_hashes):
            position = 0
        return self._circle[self._sorted_hashes[position]]


def _consumer_index(
    consumer_group: str, current_cid: str, mq_all: Sequence[MessageQueue], cid_all: Sequence[str]
) -> int | None:
    """Return the position of the current consumer, or None if allocation is impossible."""
    if not current_cid or not mq_all or not cid_all:
        return None
    try:
        return list(cid_all).index(current_cid)
    except ValueError:
        logger.warning(
            "[BUG] ConsumerId not in cidAll: consumerGroup=%s consumerId=%s cidAll=%s",
            consumer_group,
            current_cid,
            list(cid_all),
        )
        return None


def allocate_by_averagely(
    consumer_group: str,
    current_cid: str,
    mq_all: Sequence[MessageQueue],
    cid_all: Sequence[str],
) -> list[MessageQueue] | None:
    """Give each consumer a contiguous block of queues of nearly equal size."""
    index = _consumer_index(consumer_group, current_cid, mq_all, cid_all)
    if index is None:
        return None

    mq_size = len(mq_all)
    cid_size = len(cid_all)
    mod = mq_size % cid_size
    takes_extra = mod > 0 and index < mod

    if mq_size <= cid_size:
        average_size = 1
    elif takes_extra:
        average_size = mq_size // cid_size + 1
    else:
        average_size = mq_size // cid_size

    start_index = index * average_size if takes_extra else index * average_size + mod
    num = min(average_size, mq_size - start_index)
    return [mq_all[(start_index + i) % mq_size] for i in range(num)]


def allocate_by_averagely_circle(
    consumer_group: str,
    current_cid: str,
    mq_all: Sequence[MessageQueue],
    cid_all: Sequence[str],
) -> list[MessageQueue] | None:
    """Deal the queues out to consumers in turn."""
    index = _consumer_index(consumer_group, current_cid, mq_all, cid_all)
    if index is None:
        return None
    cid_size = len(cid_all)
    return [mq for i, mq in enumerate(mq_all) if i >= index and i % cid_size == index]


def allocate_by_machine_nearby(
    consumer_group: str,
    current_cid: str,
    mq_all: Sequence[MessageQueue],
    cid_all: Sequence[str],
) -> list[MessageQueue] | None:
    """Allocate by machine proximity; currently the same as averaging."""
    return allocate_by_averagely(consumer_group, current_cid, mq_all, cid_all)


def allocate_by_config(queues: Sequence[MessageQueue]) -> AllocateStrategy:
    """Return a strategy that always yields the configured queues."""
    configured = list(queues)

    def strategy(
        consumer_group: str,
        current_cid: str,
        mq_all: Sequence[MessageQueue],
        cid_all: Sequence[str],
    ) -> list[MessageQueue] | None:
        return configured

    return strategy


def allocate_by_machine_room(consumer_idcs: Sequence[str]) -> AllocateStrategy:
    """Return a strategy that shares queues of brokers in the given machine rooms."""
    idcs = list(consumer_idcs)

    def strategy(
        consumer_group: str,
        current_cid: str,
        mq_all: Sequence[MessageQueue],
        cid_all: Sequence[str],
    ) -> list[MessageQueue] | None:
        index = _consumer_index(consumer_group, current_cid, mq_all, cid_all)
        if index is None:
            return None

        premq_all: list[MessageQueue] = []
        for mq in mq_all:
            parts = mq.broker_name.split("@")
            if len(parts) == 2:
                premq_all.extend(mq for idc in idcs if idc == parts[0])

        cid_size = len(cid_all)
        mod, rem = divmod(len(premq_all), cid_size)
        start_index = mod * index
        result = list(mq_all[start_index:start_index + mod])
        if rem > index:
            result.append(premq_all[index + mod * cid_size])
        return result

    return strategy


def allocate_by_consistent_hash(virtual_node_cnt: int) -> AllocateStrategy:
    """Return a strategy that maps queues to consumers on a hash ring."""

    def strategy(
        consumer_group: str,
        current_cid: str,
        mq_all: Sequence[MessageQueue],
        cid_all: Sequence[str],
    ) -> list[MessageQueue] | None:
        if _consumer_index(consumer_group, current_cid, mq_all, cid_all) is None:
            return None

        ring = ConsistentHash(virtual_node_cnt)
        for cid in cid_all:
            ring.add(cid)

        result: list[MessageQueue] = []
        for mq in mq_all:
            try:
                client_node = ring.get(str(mq))
            except LookupError as err:
                logger.warning("[BUG] AllocateByConsistentHash err: %s", err)
                continue
            if client_node == current_cid:
                result.append(mq)
        return result

    return strategy