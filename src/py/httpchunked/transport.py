import asyncio
from abc import ABC, abstractmethod

from mypy_extensions import mypyc_attr

from . import config
from .http.model import HTTPIOError


# --
# The transport is the duplex byte stream that the rolling buffer owns. It
# is kept opaque: `read` returns `b""` at end of stream, and every failure
# surfaces as an `HTTPIOError`.


# NOTE: Transports are subclassed from interpreted code (tests, bridges), so
# the base must stay open when the package is compiled with MyPyC.
@mypyc_attr(allow_interpreted_subclasses=True)
class Transport(ABC):
	@abstractmethod
	async def read(self, size: int) -> bytes:
		"""Reads at most `size` bytes, returning `b""` once the stream is
		closed."""

	@abstractmethod
	async def writeAll(self, data: bytes) -> None: ...

	async def close(self) -> None:
		pass


class StreamTransport(Transport):
	"""Wraps an asyncio stream pair, with an optional read timeout."""

	__slots__ = ["reader", "writer", "timeout"]

	def __init__(
		self,
		reader: asyncio.StreamReader,
		writer: asyncio.StreamWriter,
		*,
		timeout: float | None = None,
	):
		self.reader: asyncio.StreamReader = reader
		self.writer: asyncio.StreamWriter = writer
		self.timeout: float | None = timeout

	@staticmethod
	async def Connect(
		host: str,
		port: int = 80,
		*,
		timeout: float | None = None,
	) -> "StreamTransport":
		"""Opens a plain TCP connection to the given host and port."""
		# A timeout of 0 disables it
		timeout = (config.TIMEOUT if timeout is None else timeout) or None
		try:
			reader, writer = await asyncio.wait_for(
				asyncio.open_connection(host=host, port=port),
				timeout=timeout,
			)
		except (OSError, asyncio.TimeoutError) as e:
			raise HTTPIOError(f"Could not connect to {host}:{port}: {e}") from e
		return StreamTransport(reader, writer, timeout=timeout)

	async def read(self, size: int) -> bytes:
		try:
			return await asyncio.wait_for(self.reader.read(size), timeout=self.timeout)
		except asyncio.TimeoutError as e:
			raise HTTPIOError(f"Read timed out after {self.timeout}s") from e
		except OSError as e:
			raise HTTPIOError(f"Read failed: {e}") from e

	async def writeAll(self, data: bytes) -> None:
		try:
			self.writer.write(data)
			await self.writer.drain()
		except OSError as e:
			raise HTTPIOError(f"Write failed: {e}") from e

	async def close(self) -> None:
		self.writer.close()
		try:
			await self.writer.wait_closed()
		except OSError:
			# The peer may already have reset the connection
			pass


# EOF
