"""Wire constants of the 0.7 connless server browser protocol."""

# Control packet header: flags, ack, chunk count, token
CONTROL_HEADER = bytes([0x04, 0x00, 0x00])
TOKEN_NONE = b"\xff\xff\xff\xff"
CTRL_MSG_TOKEN = 0x05

# Control data of a token request is padded to this size
TOKEN_REQUEST_DATA_SIZE = 512

# header (7) + control message (1) + token (4)
TOKEN_RESPONSE_SIZE = 12

# Connless header: flags/version byte + server token + client token
CONNLESS_HEADER = 0x21
TOKEN_PREFIX_SIZE = 9

SIGNATURE_SIZE = 8
RESPONSE_HEADER_SIZE = TOKEN_PREFIX_SIZE + SIGNATURE_SIZE
# The token response is the shortest valid response
MIN_PREFIX_LENGTH = TOKEN_RESPONSE_SIZE

# Requests (client -> server)
REQUEST_SERVER_LIST_RAW = b"\xff\xff\xff\xffreq2"
REQUEST_SERVER_COUNT_RAW = b"\xff\xff\xff\xffcou2"
REQUEST_INFO_RAW = b"\xff\xff\xff\xffgie3"

# Responses (server -> client)
SEND_SERVER_LIST_RAW = b"\xff\xff\xff\xfflis2"
SEND_SERVER_COUNT_RAW = b"\xff\xff\xff\xffsiz2"
SEND_INFO_RAW = b"\xff\xff\xff\xffinf3"

# 16 byte IPv6 (or IPv4 mapped) address + 2 byte port
SERVER_LIST_ENTRY_SIZE = 18

MAX_BUFFER_SIZE = 1400
MAX_CHUNKS = 16
