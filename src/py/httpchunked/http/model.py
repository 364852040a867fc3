from datetime import datetime, timezone
from enum import Enum
from typing import NamedTuple, TypeAlias, Union

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPClientError(Exception):
	"""Base class for everything raised while exchanging a message. Any of
	these aborts the current response, and leaves the connection at an
	indeterminate position."""


class HTTPIOError(HTTPClientError):
	"""The transport failed to read or write (includes timeouts)."""


class StreamClosed(HTTPClientError):
	"""The peer closed the stream before the expected bytes arrived."""


class LineTooLong(HTTPClientError):
	"""A delimited line grew past its limit without a delimiter."""

	def __init__(self, message: str, limit: int):
		super().__init__(message)
		self.limit: int = limit


class HTTPParseError(HTTPClientError):
	pass


class MalformedStatusLine(HTTPParseError):
	pass


class MalformedHeader(HTTPParseError):
	pass


class MalformedChunkSize(HTTPParseError):
	pass


class ResponseNotStarted(HTTPClientError):
	"""The body was read before the response preamble."""


class AlreadyExhausted(HTTPClientError):
	"""The body was read after it was complete."""


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class Method(Enum):
	GET = "GET"
	HEAD = "HEAD"
	POST = "POST"
	PUT = "PUT"
	PATCH = "PATCH"
	DELETE = "DELETE"
	OPTIONS = "OPTIONS"

	def __str__(self) -> str:
		return self.value


class HTTPResponseLine(NamedTuple):
	"""Represents a response status line"""

	protocol: str
	status: int
	message: str = ""

	@property
	def isSuccess(self) -> bool:
		return 200 <= self.status < 300

	@property
	def hasBody(self) -> bool:
		"""Informational, `204 No Content` and `304 Not Modified` responses
		never carry a body, whatever their headers say."""
		return not (self.status < 200 or self.status in (204, 304))

	def __str__(self) -> str:
		return f"{self.protocol} {self.status} {self.message}".rstrip()


# NOTE: Each header renders back to its wire form (without EOL) with `str()`


class ContentLength(NamedTuple):
	length: int

	def __str__(self) -> str:
		return f"Content-Length: {self.length}"


class TransferEncodingChunked(NamedTuple):
	pass

	def __str__(self) -> str:
		return "Transfer-Encoding: chunked"


class ContentType(NamedTuple):
	mediaType: str

	def __str__(self) -> str:
		return f"Content-Type: {self.mediaType}"


class Host(NamedTuple):
	name: str
	port: int | None = None

	def __str__(self) -> str:
		return f"Host: {self.name}" if self.port is None else f"Host: {self.name}:{self.port}"


class Date(NamedTuple):
	value: datetime

	def __str__(self) -> str:
		# Naive datetimes are taken as UTC, as HTTP dates are always in GMT
		value = (
			self.value.replace(tzinfo=timezone.utc)
			if self.value.tzinfo is None
			else self.value.astimezone(timezone.utc)
		)
		return f"Date: {value.strftime('%a, %d %b %Y %H:%M:%S GMT')}"


class CustomHeader(NamedTuple):
	"""Any header that does not affect framing, preserved as-is."""

	name: str
	value: str

	def __str__(self) -> str:
		return f"{self.name}: {self.value}"


HTTPHeader: TypeAlias = Union[
	ContentLength,
	TransferEncodingChunked,
	ContentType,
	Host,
	Date,
	CustomHeader,
]


def nameof(header: HTTPHeader) -> str:
	"""Returns the normalized name of the given header."""
	if isinstance(header, CustomHeader):
		return headername(header.name)
	elif isinstance(header, ContentLength):
		return "Content-Length"
	elif isinstance(header, TransferEncodingChunked):
		return "Transfer-Encoding"
	elif isinstance(header, ContentType):
		return "Content-Type"
	elif isinstance(header, Host):
		return "Host"
	elif isinstance(header, Date):
		return "Date"
	else:
		raise ValueError(f"Unsupported header: {header!r}")


class HTTPResponse(NamedTuple):
	"""A fully loaded response, as returned by the one-shot client."""

	line: HTTPResponseLine
	headers: list[HTTPHeader]
	body: bytes

	@property
	def status(self) -> int:
		return self.line.status

	def getHeader(self, name: str) -> str | None:
		key = headername(name)
		for header in self.headers:
			if nameof(header) == key:
				return str(header).split(":", 1)[1].strip()
		return None


# EOF
