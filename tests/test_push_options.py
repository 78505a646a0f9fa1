import pytest

from rmqclient.constants import DEFAULT_CONSUMER_GROUP
from rmqclient.push_options import (
    ConsumeFromWhere,
    PushConsumerOptions,
    where_name,
)


@pytest.mark.parametrize(
    "where, name",
    [
        (ConsumeFromWhere.LAST_OFFSET, "CONSUME_FROM_LAST_OFFSET"),
        (ConsumeFromWhere.FIRST_OFFSET, "CONSUME_FROM_FIRST_OFFSET"),
        (ConsumeFromWhere.TIMESTAMP, "CONSUME_FROM_TIMESTAMP"),
        (99, "UNKOWN"),
    ],
)
def test_where_name(where, name):
    assert where_name(where) == name


def test_validate_fills_defaults():
    opts = PushConsumerOptions(group_name="testGroup")
    assert opts.validate() == []
    assert opts.consume_concurrently_max_span == 1000
    assert opts.pull_threshold_for_queue == 1024
    assert opts.pull_threshold_for_topic == 102400
    assert opts.pull_threshold_size_for_queue == 512
    assert opts.pull_threshold_size_for_topic == 51200
    assert opts.consume_message_batch_max_size == 1
    assert opts.pull_batch_size == 32


def test_validate_keeps_and_reports_out_of_range():
    opts = PushConsumerOptions(group_name="testGroup", pull_batch_size=5000, pull_threshold_for_queue=-3)
    problems = opts.validate()
    assert opts.pull_batch_size == 5000
    assert opts.pull_threshold_for_queue == -3
    assert len(problems) == 2
    assert any("pull_batch_size" in p for p in problems)


def test_validate_keeps_valid_values():
    opts = PushConsumerOptions(group_name="testGroup", pull_batch_size=7)
    opts.validate()
    assert opts.pull_batch_size == 7


def test_validate_reports_default_group_and_interval():
    opts = PushConsumerOptions(group_name=DEFAULT_CONSUMER_GROUP, pull_interval=-1.0)
    problems = opts.validate()
    assert any(DEFAULT_CONSUMER_GROUP in p for p in problems)
    assert any("pull_interval" in p for p in problems)


def test_max_reconsume_times_for_retry():
    assert PushConsumerOptions().max_reconsume_times_for_retry() == 16
    assert PushConsumerOptions(max_reconsume_times=5).max_reconsume_times_for_retry() == 5


def test_orderly_max_reconsume_times():
    assert PushConsumerOptions().orderly_max_reconsume_times() == 2**31 - 1
    assert PushConsumerOptions(max_reconsume_times=5).orderly_max_reconsume_times() == 5


@pytest.mark.parametrize("given, expected", [(5, 10), (50000, 30000), (500, 500), (10, 10)])
def test_clamp_suspend_millis(given, expected):
    assert PushConsumerOptions().clamp_suspend_millis(given) == expected


def test_clamp_suspend_uses_configured_time():
    opts = PushConsumerOptions(suspend_current_queue_time_millis=2500)
    assert opts.clamp_suspend_millis(-1) == 2500
    opts.suspend_current_queue_time_millis = 90000
    assert opts.clamp_suspend_millis(-1) == 30000