import dataclasses

import pytest

from rmqclient.model import (
    MessageExt,
    MessageQueue,
    PullResult,
    PullStatus,
    SendResult,
    SendStatus,
)


def test_message_queue_equality_and_hash():
    a = MessageQueue(topic="TopicTest", broker_name="broker-a", queue_id=1)
    b = MessageQueue(topic="TopicTest", broker_name="broker-a", queue_id=1)
    assert a == b
    assert {a: 5}[b] == 5


def test_message_queue_is_immutable():
    mq = MessageQueue(topic="TopicTest")
    with pytest.raises(dataclasses.FrozenInstanceError):
        mq.topic = "other"
    assert mq.topic == "TopicTest"


def test_message_queue_str_names_fields():
    text = str(MessageQueue(topic="TopicTest", broker_name="broker-a", queue_id=3))
    assert "topic=TopicTest" in text
    assert "brokerName=broker-a" in text
    assert "queueId=3" in text


def test_missing_property_is_empty():
    assert MessageExt(topic="TopicTest").get_property("RETRY_TOPIC") == ""


def test_property_round_trip():
    msg = MessageExt(topic="TopicTest")
    msg.with_property("RETRY_TOPIC", "TopicTest")
    assert msg.get_property("RETRY_TOPIC") == "TopicTest"
    msg.with_property("RETRY_TOPIC", "other")
    assert msg.get_property("RETRY_TOPIC") == "other"


def test_messages_do_not_share_properties():
    first = MessageExt()
    second = MessageExt()
    first.with_property("k", "v")
    assert second.get_property("k") == ""


def test_pull_result_defaults():
    result = PullResult()
    assert result.status is PullStatus.FOUND
    assert result.message_exts == []
    assert result.body == b""


def test_send_result_str_carries_ids():
    mq = MessageQueue(topic="test", broker_name="broker-a", queue_id=2)
    result = SendResult(status=SendStatus.OK, msg_id="ABC", offset_msg_id="DEF", queue_offset=7, message_queue=mq)
    text = str(result)
    assert "msgIds=ABC" in text
    assert "offsetMsgId=DEF" in text
    assert "queueOffset=7" in text
    assert str(mq) in text