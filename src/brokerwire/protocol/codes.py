"""Protocol constants.

Keep these in one place to avoid bare integers in request handling.
"""

# Request operation codes.

SEND_MESSAGE = 10
PULL_MESSAGE = 11
QUERY_MESSAGE = 12
QUERY_CONSUMER_OFFSET = 14
UPDATE_CONSUMER_OFFSET = 15
GET_MAX_OFFSET = 30
GET_MIN_OFFSET = 31
HEART_BEAT = 34
UNREGISTER_CLIENT = 35
GET_CONSUMER_LIST_BY_GROUP = 38
GET_ROUTEINFO_BY_TOPIC = 105
GET_BROKER_CLUSTER_INFO = 106
SEND_MESSAGE_V2 = 310

# Response result codes.

SUCCESS = 0
SYSTEM_ERROR = 1
SYSTEM_BUSY = 2
REQUEST_CODE_NOT_SUPPORTED = 3
NO_PERMISSION = 16
TOPIC_NOT_EXIST = 17
PULL_NOT_FOUND = 19

# Header flag bits.

FLAG_RESPONSE = 0x1
FLAG_ONEWAY = 0x2

# Extension field names used by the secured (managed cloud) variant.

SIGNATURE = "Signature"
ACCESS_KEY = "AccessKey"
ONS_CHANNEL = "OnsChannel"

# Client identification.

LANGUAGE = "JAVA"
SECURED_LANGUAGE = "PYTHON"
VERSION = 317
