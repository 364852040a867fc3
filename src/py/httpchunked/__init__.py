from .http.model import (
	HTTPClientError,
	HTTPIOError,
	StreamClosed,
	LineTooLong,
	HTTPParseError,
	MalformedStatusLine,
	MalformedHeader,
	MalformedChunkSize,
	ResponseNotStarted,
	AlreadyExhausted,
	Method,
	HTTPResponse,
	HTTPResponseLine,
	HTTPHeader,
	ContentLength,
	TransferEncodingChunked,
	ContentType,
	Host,
	Date,
	CustomHeader,
)  # NOQA: F401
from .http.parser import HTTPHeaders, parseHeader  # NOQA: F401
from .buffer import RollingBuffer  # NOQA: F401
from .transport import Transport, StreamTransport  # NOQA: F401
from .context import HTTPContext  # NOQA: F401
from .client import request  # NOQA: F401


# EOF
