# rmqclient

This package holds the building blocks of a message-queue consumer. It is written in plain Python and has no third-party dependencies.

## Modules

- `rmqclient.constants`: well-known group, topic and property names. `get_retry_topic(group)` returns `"%RETRY%" + group`.
- `rmqclient.model`: the shared message types.
  - `MessageQueue`, which is frozen and hashable.
  - `MessageExt`, which has `get_property` and `with_property`.
  - `PullResult` and `PullStatus`.
  - `SendResult` and `SendStatus`.
- `rmqclient.strategy`: strategies that share a topic's queues among the consumers of a group.
  - `allocate_by_averagely`
  - `allocate_by_averagely_circle`
  - `allocate_by_machine_nearby`
  - `allocate_by_config(queues)`
  - `allocate_by_machine_room(consumer_idcs)`
  - `allocate_by_consistent_hash(virtual_node_cnt)`, which uses the CRC32 ring `ConsistentHash`.
- `rmqclient.statistics`: rolling pull and consume figures per topic and group.
  - `StatsManager`, built on `StatsItemSet` and `StatsItem`.
  - `compute_stats_data`, which turns a window of `CallSnapshot`s into a `StatsSnapshot`.
- `rmqclient.push_options`: the settings and enumerations of a push consumer.
  - `PushConsumerOptions`
  - `ConsumeFromWhere`, `MessageModel` and `ConsumeResult`
  - `where_name`

## Install

```
pip install .
pip install ".[test]"   # with pytest
```

## Allocating queues

```python
from rmqclient.model import MessageQueue
from rmqclient.strategy import allocate_by_averagely, allocate_by_consistent_hash

queues = [MessageQueue(topic="orders", broker_name="broker-a", queue_id=i) for i in range(6)]
consumers = ["10.0.0.1@worker", "10.0.0.2@worker"]

mine = allocate_by_averagely("orders-group", "10.0.0.1@worker", queues, consumers)
# queue ids 0, 1 and 2

strategy = allocate_by_consistent_hash(10)
mine = strategy("orders-group", "10.0.0.2@worker", queues, consumers)
```

Every strategy except `allocate_by_config` returns `None` in these cases:

- the current consumer id is empty;
- the queue list is empty;
- the consumer list is empty;
- the current consumer is not in the consumer list.

In the last case the strategy also logs a warning.

## Statistics

```python
from rmqclient.statistics import StatsManager

stats = StatsManager()              # starts background sampling threads
stats.increase_consume_ok_tps("orders-group", "orders", 3)
status = stats.get_consume_status("orders-group", "orders")
stats.shutdown()
```

`StatsManager(start=False)` does not start the background threads. With it, sampling is driven by hand, for example with `stats.pull_rt.sampling_in_seconds()`.

Each item keeps three windows of samples:

| Window | Filled by | Samples kept |
| --- | --- | --- |
| minute | `sampling_in_seconds` | 7 |
| hour | `sampling_in_minutes` | 7 |
| day | `sampling_in_hour` | 25 |

The figures are computed between the first and the last sample of a window.

## Push-consumer options

```python
from rmqclient.push_options import PushConsumerOptions

options = PushConsumerOptions(group_name="orders-group", pull_batch_size=5000)
problems = options.validate()
```

`validate()` fills in defaults for every limit left at zero. For example, `pull_batch_size` becomes 32 and `pull_threshold_for_queue` becomes 1024.

It does not change values that are out of range. It logs each one and returns the list of messages.

Other helpers on the options:

- `max_reconsume_times_for_retry()` gives 16 when `max_reconsume_times` is -1.
- `orderly_max_reconsume_times()` gives 2**31 - 1 when `max_reconsume_times` is -1.
- `clamp_suspend_millis()` bounds a suspend time to [10, 30000] ms.

## What this package does not do

The package does not open connections to a name server or a broker. It does not pull or send messages, and it has no consumer or producer that runs on its own.

It provides the data types, the allocation logic, the statistics and the option handling that such a client is built on.

## Tests

```
pytest
```