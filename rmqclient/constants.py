"""Well-known group, topic and property names."""

RETRY_GROUP_TOPIC_PREFIX = "%RETRY%"
DEFAULT_CONSUMER_GROUP = "DEFAULT_CONSUMER"
CLIENT_INNER_PRODUCER_GROUP = "CLIENT_INNER_PRODUCER"
SYSTEM_TOPIC_PREFIX = "rmq_sys_"

PROPERTY_RETRY_TOPIC = "RETRY_TOPIC"
PROPERTY_UNIQUE_CLIENT_MESSAGE_ID_KEY_INDEX = "UNIQ_KEY"
PROPERTY_CONSUME_START_TIME = "CONSUME_START_TIME"
PROPERTY_MSG_REGION = "MSG_REGION"
PROPERTY_TRACE_SWITCH = "TRACE_ON"
PROPERTY_PRODUCER_GROUP = "PGROUP"
PROPERTY_TAGS = "TAGS"


def get_retry_topic(group: str) -> str:
    """Return the retry topic that belongs to a consumer group."""
    return RETRY_GROUP_TOPIC_PREFIX + group