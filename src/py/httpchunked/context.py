from typing import Any, AsyncIterator

from . import config
from .buffer import RollingBuffer
from .http.decoder import BodyDecoder
from .http.model import (
	HTTPHeader,
	HTTPResponseLine,
	LineTooLong,
	MalformedHeader,
	Method,
	ResponseNotStarted,
	headername,
)
from .http.parser import HTTPHeaders, parseStatus
from .transport import StreamTransport, Transport
from .utils.io import EOH, EOL, asBytes
from .utils.logging import debug

# --
# The context is the session object for one connection: it owns the rolling
# buffer (and through it the transport) and the body decoder. Requests are
# written as they are built, and responses are read as they come.


def ensureToken(value: str, what: str) -> str:
	# Values are written verbatim, so whitespace or EOLs would change the message
	if not value or any(_ in value for _ in " \t\r\n"):
		raise ValueError(f"Invalid {what}: {value!r}")
	return value


class HTTPContext:
	"""An HTTP/1.x exchange over a single transport, used as

	```
	await http.beginRequest(Method.GET, "/")
	await http.requestHeader("Host", "example.org")
	await http.requestHeadersEnd()
	await http.responseBegin()
	async for chunk in http.read():
		…
	```
	"""

	def __init__(
		self,
		transport: Transport,
		*,
		bufferSize: int | None = None,
		maxHeadersSize: int | None = None,
	):
		self.buffer: RollingBuffer = RollingBuffer(transport, bufferSize)
		self.decoder: BodyDecoder = BodyDecoder(self.buffer)
		self.maxHeadersSize: int = (
			config.MAX_HEADERS_SIZE if maxHeadersSize is None else maxHeadersSize
		)
		self.method: Method | str | None = None
		self.preamble: bytes | None = None
		self.line: HTTPResponseLine | None = None

	@classmethod
	async def Connect(
		cls,
		host: str,
		port: int = 80,
		*,
		timeout: float | None = None,
		bufferSize: int | None = None,
	) -> "HTTPContext":
		"""Connects to the given host over plain TCP."""
		transport = await StreamTransport.Connect(host, port, timeout=timeout)
		return cls(transport, bufferSize=bufferSize)

	# =========================================================================
	# REQUEST
	# =========================================================================

	async def beginRequest(
		self, method: Method | str, resource: str, protocol: str = "HTTP/1.1"
	) -> None:
		name = ensureToken(str(method), "method")
		self.method = method
		await self.buffer.write(
			f"{name} {ensureToken(resource, 'resource')} {protocol}\r\n".encode("ascii")
		)
		debug("Request started", Method=name, Resource=resource)

	async def requestHeader(
		self, header: HTTPHeader | str, value: str | int | None = None
	) -> None:
		"""Writes one header, given either as a header record or as a name
		and a value."""
		line = str(header) if value is None else f"{header}: {value}"
		if "\r" in line or "\n" in line:
			raise ValueError(f"Header must fit on one line: {line!r}")
		await self.buffer.write(line.encode("latin-1") + EOL)

	async def requestHeaders(self, headers: dict[str, Any]) -> None:
		for name, value in headers.items():
			await self.requestHeader(headername(name), value)

	async def requestHeadersEnd(self) -> None:
		await self.buffer.write(EOL)

	async def requestBodyChunk(self, chunk: bytes | str) -> None:
		await self.buffer.write(asBytes(chunk))

	# =========================================================================
	# RESPONSE
	# =========================================================================

	async def responseBegin(self) -> HTTPResponseLine:
		"""Reads the status line and headers, and prepares the decoder for the
		body. Bytes received past the headers stay buffered for the body."""
		self.decoder.reset()
		self.preamble = None
		self.line = None
		try:
			preamble = await self.buffer.readLine(EOH, limit=self.maxHeadersSize)
		except LineTooLong as e:
			raise MalformedHeader(
				f"Response headers exceed {self.maxHeadersSize} bytes"
			) from e
		line = parseStatus(preamble)
		self.preamble = preamble
		self.line = line
		self.decoder.start(
			self.headers,
			bodiless=not line.hasBody or str(self.method).upper() == "HEAD",
		)
		debug(
			"Response started",
			Status=line.status,
			Message=line.message,
			Body=self.decoder.state.__class__.__name__,
		)
		return line

	@property
	def status(self) -> HTTPResponseLine:
		if self.line is None:
			raise ResponseNotStarted("The response has not been started")
		return self.line

	@property
	def headers(self) -> HTTPHeaders:
		if self.preamble is None:
			raise ResponseNotStarted("The response has not been started")
		return HTTPHeaders(self.preamble)

	@property
	def trailers(self) -> list[HTTPHeader]:
		return self.decoder.trailers

	def hasMoreBody(self) -> bool:
		return self.decoder.hasMoreBody()

	async def readBodyChunk(self, dest: bytearray | memoryview) -> int:
		return await self.decoder.readBodyChunk(dest)

	async def read(self, size: int | None = None) -> AsyncIterator[bytes]:
		"""Iterates on the body, in pieces of at most `size` bytes."""
		chunk = bytearray(size or self.buffer.capacity)
		while self.decoder.hasMoreBody():
			n = await self.decoder.readBodyChunk(chunk)
			if n:
				yield bytes(chunk[:n])

	async def load(self) -> bytes:
		"""Reads the whole remaining body."""
		return b"".join([_ async for _ in self.read()])

	def responseEnd(self) -> None:
		self.decoder.reset()

	async def close(self) -> None:
		await self.buffer.close()

	async def __aenter__(self) -> "HTTPContext":
		return self

	async def __aexit__(self, type: Any, value: Any, traceback: Any) -> None:
		await self.close()

	def __str__(self) -> str:
		return f"HTTPContext({self.line}, {self.decoder.state})"


# EOF
