from os import getenv

# Capacity of the rolling buffer, which is also the size of each network read
BUFFER_SIZE: int = int(getenv("HTTPCHUNKED_BUFFER_SIZE", 4096))

# The status line and headers must fit within this many bytes
MAX_HEADERS_SIZE: int = int(getenv("HTTPCHUNKED_MAX_HEADERS_SIZE", 8192))

# Upper bound for chunk-size and trailer lines
MAX_LINE_SIZE: int = int(getenv("HTTPCHUNKED_MAX_LINE_SIZE", 4096))

# Read timeout (in seconds) applied by the stream transport, 0 disables it
TIMEOUT: float = float(getenv("HTTPCHUNKED_TIMEOUT", 10.0))

LOG_LEVEL: str = getenv("HTTPCHUNKED_LOG_LEVEL", "Info")

# EOF
