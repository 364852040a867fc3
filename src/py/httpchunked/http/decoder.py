from typing import Iterable, NamedTuple, TypeAlias, Union

from .. import config
from ..buffer import RollingBuffer
from ..utils.logging import event, logged, warning
from .model import (
	AlreadyExhausted,
	ContentLength,
	HTTPHeader,
	LineTooLong,
	MalformedChunkSize,
	MalformedHeader,
	ResponseNotStarted,
	TransferEncodingChunked,
)
from .parser import parseChunkSize, parseHeaderLine

# -----------------------------------------------------------------------------
#
# STATES
#
# -----------------------------------------------------------------------------


class AwaitingRequest(NamedTuple):
	"""No response has been started yet."""

	pass


class FixedLength(NamedTuple):
	"""The body is framed by `Content-Length`."""

	total: int
	consumed: int = 0

	@property
	def remaining(self) -> int:
		return self.total - self.consumed


class Chunked(NamedTuple):
	"""The body is framed by the chunked transfer-encoding. A `size` of `None`
	means the next chunk-size line must be read before any data."""

	size: int | None = None
	consumed: int = 0

	@property
	def remaining(self) -> int:
		return 0 if self.size is None else self.size - self.consumed


class Exhausted(NamedTuple):
	"""The whole body has been read."""

	pass


DecoderState: TypeAlias = Union[AwaitingRequest, FixedLength, Chunked, Exhausted]


# -----------------------------------------------------------------------------
#
# DECODER
#
# -----------------------------------------------------------------------------


class BodyDecoder:
	"""Reads exactly the bytes of a response body from the rolling buffer,
	whether it is framed by `Content-Length` or chunked. Callers loop on
	`readBodyChunk` and never need to know which framing is used."""

	__slots__ = ["buffer", "state", "trailers", "maxLineSize"]

	def __init__(self, buffer: RollingBuffer, *, maxLineSize: int | None = None):
		self.buffer: RollingBuffer = buffer
		self.state: DecoderState = AwaitingRequest()
		self.trailers: list[HTTPHeader] = []
		self.maxLineSize: int = (
			config.MAX_LINE_SIZE if maxLineSize is None else maxLineSize
		)

	def reset(self) -> "BodyDecoder":
		self.state = AwaitingRequest()
		self.trailers = []
		return self

	def start(self, headers: Iterable[HTTPHeader], *, bodiless: bool = False) -> DecoderState:
		"""Selects the framing from the response headers. Chunked framing
		takes precedence over `Content-Length` when both are present, and
		a response with neither has no body."""
		self.trailers = []
		chunked: bool = False
		length: int | None = None
		for header in headers:
			if isinstance(header, TransferEncodingChunked):
				chunked = True
			elif isinstance(header, ContentLength):
				if length is not None and length != header.length:
					raise MalformedHeader(
						f"Conflicting Content-Length values: {length} and {header.length}"
					)
				length = header.length
		if bodiless:
			self.state = Exhausted()
		elif chunked:
			if length is not None:
				warning(
					"Response has both Content-Length and chunked Transfer-Encoding, ignoring Content-Length",
					ContentLength=length,
				)
			self.state = Chunked()
		elif length:
			self.state = FixedLength(length)
		else:
			self.state = Exhausted()
		if logged(event):
			event("body.start", self.state, Bodiless=bodiless)
		return self.state

	def hasMoreBody(self) -> bool:
		state = self.state
		if isinstance(state, (AwaitingRequest, Exhausted)):
			return False
		elif isinstance(state, Chunked):
			# The end of a chunked body is only known once the last chunk
			# header is read.
			return True
		elif isinstance(state, FixedLength):
			return state.consumed < state.total
		else:
			raise RuntimeError(f"Unsupported decoder state: {state!r}")

	async def readBodyChunk(self, dest: bytearray | memoryview) -> int:
		"""Reads the next body bytes into `dest`, returning how many were
		read. The result may be shorter than `dest`, and is 0 once a chunked
		body reaches its last chunk."""
		if not len(dest):
			return 0
		state = self.state
		if isinstance(state, AwaitingRequest):
			raise ResponseNotStarted("The response has not been started")
		elif isinstance(state, Exhausted):
			raise AlreadyExhausted("The response body has already been read")
		elif isinstance(state, FixedLength):
			return await self._readFixed(state, dest)
		elif isinstance(state, Chunked):
			return await self._readChunked(state, dest)
		else:
			raise RuntimeError(f"Unsupported decoder state: {state!r}")

	async def _readFixed(self, state: FixedLength, dest: bytearray | memoryview) -> int:
		view = memoryview(dest)
		n = await self.buffer.readBytes(view[: min(len(view), state.remaining)])
		consumed = state.consumed + n
		self.state = Exhausted() if consumed == state.total else state._replace(consumed=consumed)
		return n

	async def _readChunked(self, state: Chunked, dest: bytearray | memoryview) -> int:
		if not state.remaining:
			size = parseChunkSize(await self._readLine("chunk size"))
			if logged(event):
				event("body.chunk", size)
			if size == 0:
				await self._readTrailers()
				self.state = Exhausted()
				return 0
			state = Chunked(size, 0)
		view = memoryview(dest)
		n = await self.buffer.readBytes(view[: min(len(view), state.remaining)])
		state = state._replace(consumed=state.consumed + n)
		if not state.remaining:
			# Every chunk's data is followed by an EOL
			terminator = await self._readLine("chunk terminator")
			if terminator:
				raise MalformedChunkSize(
					f"Expected EOL after {state.size} bytes chunk, got: {terminator[:16]!r}"
				)
			state = Chunked()
		self.state = state
		return n

	async def _readTrailers(self) -> None:
		"""Reads the trailer section following the last chunk, up to the
		empty line. Trailers are kept but do not change the framing."""
		while line := await self._readLine("trailer"):
			self.trailers.append(parseHeaderLine(line))
		if self.trailers and logged(event):
			event("body.trailers", [str(_) for _ in self.trailers])

	async def _readLine(self, what: str) -> bytes:
		try:
			return await self.buffer.readLine(limit=self.maxLineSize)
		except LineTooLong as e:
			raise MalformedChunkSize(
				f"The {what} line exceeds {e.limit} bytes"
			) from e

	def __str__(self) -> str:
		return f"BodyDecoder({self.state})"


# EOF
