from email.utils import parsedate_to_datetime
from string import digits, hexdigits
from typing import Iterator

from ..utils.io import EOL, asText
from .model import (
	ContentLength,
	ContentType,
	CustomHeader,
	Date,
	Host,
	HTTPHeader,
	HTTPResponseLine,
	MalformedChunkSize,
	MalformedHeader,
	MalformedStatusLine,
	TransferEncodingChunked,
	headername,
	nameof,
)

DIGITS: frozenset[str] = frozenset(digits)
HEXDIGITS: frozenset[str] = frozenset(hexdigits)


# -----------------------------------------------------------------------------
#
# LINES
#
# -----------------------------------------------------------------------------


def endOfLine(data: bytes, start: int = 0) -> int:
	"""Returns the offset of the next EOL at or after `start`, or the length
	of `data` when the last line is not terminated."""
	i = data.find(EOL, start)
	return len(data) if i == -1 else i


def iterLines(data: bytes, start: int = 0) -> Iterator[bytes]:
	"""Iterates on the EOL-delimited lines of `data`, from `start`."""
	n = len(data)
	o = start
	while o < n:
		i = endOfLine(data, o)
		yield data[o:i]
		o = i + len(EOL)


# -----------------------------------------------------------------------------
#
# STATUS
#
# -----------------------------------------------------------------------------


def parseStatus(preamble: bytes) -> HTTPResponseLine:
	"""Parses the status line at the start of the preamble, as in
	`HTTP/1.1 404 Not Found`. The reason phrase is optional."""
	try:
		line = asText(preamble[: endOfLine(preamble)], "status line")
	except ValueError as e:
		raise MalformedStatusLine(str(e)) from e
	tokens = line.split(None, 2)
	if not tokens:
		raise MalformedStatusLine("Status line is empty")
	protocol = tokens[0]
	if "/1." not in protocol:
		raise MalformedStatusLine(
			f"Unsupported HTTP version, accepts 1.0 or 1.1: {protocol!r}"
		)
	if len(tokens) < 2:
		raise MalformedStatusLine(f"Status line has no status code: {line!r}")
	code = tokens[1]
	if not code or not DIGITS.issuperset(code):
		raise MalformedStatusLine(f"Status code is not an integer: {code!r}")
	return HTTPResponseLine(protocol, int(code), tokens[2].strip() if len(tokens) > 2 else "")


# -----------------------------------------------------------------------------
#
# HEADERS
#
# -----------------------------------------------------------------------------


def parseTransferEncoding(value: str) -> TransferEncodingChunked:
	# Only `chunked` is supported, so any other coding makes the framing
	# undecidable.
	for coding in value.lower().split(","):
		if coding.strip() == "chunked":
			return TransferEncodingChunked()
	raise MalformedHeader(f"Only chunked transfer-encoding is supported: {value!r}")


def parseHost(value: str) -> Host:
	name, sep, port = value.rpartition(":")
	# NOTE: IPv6 literals are bracketed, so the port is after the `]`
	if sep and port and DIGITS.issuperset(port) and not name.endswith(":"):
		return Host(name, int(port))
	return Host(value)


def parseHeader(name: str, value: str) -> HTTPHeader:
	"""Maps a header name and value to one of the recognized headers, falling
	back to `CustomHeader` for any other name."""
	key = name.strip().lower()
	value = value.strip()
	if key == "content-length":
		if not value or not DIGITS.issuperset(value):
			raise MalformedHeader(f"Content-Length is not a non-negative integer: {value!r}")
		return ContentLength(int(value))
	elif key == "transfer-encoding":
		return parseTransferEncoding(value)
	elif key == "content-type":
		return ContentType(value)
	elif key == "host":
		return parseHost(value)
	elif key == "date":
		try:
			return Date(parsedate_to_datetime(value))
		except (TypeError, ValueError, OverflowError):
			# Dates don't affect framing, so we keep the raw value
			return CustomHeader(headername(name.strip()), value)
	else:
		return CustomHeader(name.strip(), value)


def parseHeaderLine(line: bytes) -> HTTPHeader:
	try:
		text = asText(line, "header")
	except ValueError as e:
		raise MalformedHeader(str(e)) from e
	i = text.find(":")
	if i == -1:
		raise MalformedHeader(f"Header has no ':' separator: {text!r}")
	name = text[:i].strip()
	if not name:
		raise MalformedHeader(f"Header has an empty name: {text!r}")
	return parseHeader(name, text[i + 1 :])


def iterHeaders(preamble: bytes) -> Iterator[HTTPHeader]:
	"""Lazily parses the header lines that follow the status line in
	the preamble. A malformed line fails the whole iteration, as it
	indicates a corrupt response."""
	for line in iterLines(preamble, min(len(preamble), endOfLine(preamble) + len(EOL))):
		# The preamble may still hold the terminating empty line
		if not line:
			break
		yield parseHeaderLine(line)


class HTTPHeaders:
	"""Wraps the raw response preamble and gives a restartable view of its
	headers: each iteration parses them again from the start."""

	__slots__ = ["preamble"]

	def __init__(self, preamble: bytes = b""):
		self.preamble: bytes = preamble

	def __iter__(self) -> Iterator[HTTPHeader]:
		return iterHeaders(self.preamble)

	def get(self, name: str) -> HTTPHeader | None:
		key = name.lower()
		for header in self:
			if nameof(header).lower() == key:
				return header
		return None

	@property
	def contentLength(self) -> int | None:
		for header in self:
			if isinstance(header, ContentLength):
				return header.length
		return None

	@property
	def isChunked(self) -> bool:
		return any(isinstance(_, TransferEncodingChunked) for _ in self)

	def __str__(self) -> str:
		return f"HTTPHeaders({', '.join(str(_) for _ in self)})"


# -----------------------------------------------------------------------------
#
# CHUNKS
#
# -----------------------------------------------------------------------------


def parseChunkSize(line: bytes) -> int:
	"""Parses a chunk-size line (without its EOL), discarding any chunk
	extension after `;`."""
	try:
		text = asText(line, "chunk size")
	except ValueError as e:
		raise MalformedChunkSize(str(e)) from e
	size = text.split(";", 1)[0].strip()
	# NOTE: `int(…, 16)` also accepts signs, `0x` prefixes and underscores
	if not size or not HEXDIGITS.issuperset(size):
		raise MalformedChunkSize(f"Chunk size is not an hexadecimal number: {text!r}")
	return int(size, 16)


# EOF
