from . import config
from .http.model import HTTPIOError, LineTooLong, StreamClosed
from .transport import Transport
from .utils.io import EOL


class RollingBuffer:
	"""Presents the transport as delimited lines and bounded byte reads. The
	buffer has a fixed capacity, the unread bytes are `storage[begin:end]`,
	and the transport is only read when these are exhausted."""

	__slots__ = ["transport", "storage", "capacity", "begin", "end"]

	def __init__(self, transport: Transport, capacity: int | None = None):
		self.transport: Transport = transport
		self.capacity: int = config.BUFFER_SIZE if capacity is None else capacity
		if self.capacity <= 0:
			raise ValueError(f"Buffer capacity must be positive, got: {self.capacity}")
		self.storage: bytearray = bytearray(self.capacity)
		self.begin: int = 0
		self.end: int = 0

	@property
	def buffered(self) -> bytes:
		"""The bytes read from the transport but not consumed yet."""
		return bytes(self.storage[self.begin : self.end])

	def __len__(self) -> int:
		return self.end - self.begin

	async def write(self, data: bytes) -> None:
		await self.transport.writeAll(data)

	async def close(self) -> None:
		await self.transport.close()

	async def readLine(self, delimiter: bytes = EOL, limit: int | None = None) -> bytes:
		"""Reads up to the next `delimiter`, returning the bytes before it and
		leaving the buffer right after it. Raises `StreamClosed` if the
		stream ends first, and `LineTooLong` when more than `limit` bytes
		come without a delimiter."""
		if not delimiter:
			raise ValueError("Delimiter must not be empty")
		size: int = len(delimiter)
		# Fast path, the whole line is already buffered
		i = self.storage.find(delimiter, self.begin, self.end)
		if i != -1 and (limit is None or i - self.begin <= limit):
			line = bytes(self.storage[self.begin : i])
			self.begin = i + size
			return line
		acc = bytearray()
		while True:
			offset = len(acc)
			acc += self.storage[self.begin : self.end]
			# We only scan the new bytes, plus enough of the previous ones
			# to catch a delimiter straddling two reads.
			i = acc.find(delimiter, max(0, offset - size + 1))
			if i != -1:
				if limit is not None and i > limit:
					raise LineTooLong(
						f"Line exceeds {limit} bytes before {delimiter!r}", limit
					)
				self.begin += i + size - offset
				del acc[i:]
				return bytes(acc)
			self.begin = self.end
			if limit is not None and len(acc) > limit + size - 1:
				raise LineTooLong(f"Line exceeds {limit} bytes before {delimiter!r}", limit)
			if not await self.refill():
				raise StreamClosed(
					f"Stream closed after {len(acc)} bytes, before {delimiter!r}"
				)

	async def readBytes(self, dest: bytearray | memoryview) -> int:
		"""Copies at most `len(dest)` bytes into `dest`, using the buffered
		bytes first and refilling at most once. The result may be shorter
		than `dest`, and is only 0 when `dest` is empty."""
		view = memoryview(dest)
		wanted = len(view)
		if not wanted:
			return 0
		copied = self.copyInto(view)
		if copied < wanted:
			# NOTE: Here the buffer is empty, as it could not fill `dest`
			if not await self.refill():
				if copied:
					return copied
				raise StreamClosed(f"Stream closed while expecting {wanted} bytes")
			copied += self.copyInto(view[copied:])
		return copied

	def copyInto(self, view: memoryview) -> int:
		n = min(len(view), self.end - self.begin)
		if n:
			view[:n] = self.storage[self.begin : self.begin + n]
			self.begin += n
		return n

	async def refill(self) -> int:
		"""Overwrites the storage with the next read from the transport,
		returning the number of bytes read (0 when the stream is closed)."""
		data = await self.transport.read(self.capacity)
		n = len(data)
		if n > self.capacity:
			raise HTTPIOError(
				f"Transport returned {n} bytes, more than the requested {self.capacity}"
			)
		self.storage[:n] = data
		self.begin = 0
		self.end = n
		return n

	def __str__(self) -> str:
		return f"RollingBuffer({self.begin}:{self.end}/{self.capacity})"


# EOF
