from rmqclient.constants import (
    DEFAULT_CONSUMER_GROUP,
    RETRY_GROUP_TOPIC_PREFIX,
    get_retry_topic,
)


def test_retry_topic_for_group():
    assert get_retry_topic("testGroup") == "%RETRY%testGroup"


def test_retry_topic_keeps_group_as_suffix():
    topic = get_retry_topic(DEFAULT_CONSUMER_GROUP)
    assert topic.startswith(RETRY_GROUP_TOPIC_PREFIX)
    assert topic[len(RETRY_GROUP_TOPIC_PREFIX):] == DEFAULT_CONSUMER_GROUP


def test_retry_topic_of_empty_group_is_prefix():
    assert get_retry_topic("") == RETRY_GROUP_TOPIC_PREFIX