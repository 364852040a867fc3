import os
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterator

import pytest

sys.path.insert(
	0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src", "py")
)

from httpchunked.transport import Transport  # NOQA: E402


# ============================================================================
# In-memory transport
# ============================================================================


class MemoryTransport(Transport):
	"""Delivers the given fragments one read at a time, as the network
	would, and records everything written."""

	def __init__(self, *fragments: bytes, error: Exception | None = None):
		self.fragments: list[bytes] = [_ for _ in fragments if _]
		self.error: Exception | None = error
		self.written: bytearray = bytearray()
		self.reads: int = 0
		self.closed: bool = False

	async def read(self, size: int) -> bytes:
		self.reads += 1
		if not self.fragments:
			if self.error is not None:
				raise self.error
			return b""
		head = self.fragments[0]
		if len(head) > size:
			self.fragments[0] = head[size:]
			return head[:size]
		self.fragments.pop(0)
		return head

	async def writeAll(self, data: bytes) -> None:
		self.written += data

	async def close(self) -> None:
		self.closed = True


def split(data: bytes, size: int) -> list[bytes]:
	"""Splits `data` in fragments of `size` bytes."""
	return [data[i : i + size] for i in range(0, len(data), size)]


@pytest.fixture
def memory():
	return MemoryTransport


@pytest.fixture
def fragments():
	return split


# ============================================================================
# Local HTTP server
# ============================================================================


class Handler(BaseHTTPRequestHandler):
	protocol_version = "HTTP/1.1"

	def log_message(self, format, *args):
		pass

	def do_GET(self):
		if self.path == "/chunked":
			self.send_response(200)
			self.send_header("Content-Type", "text/plain")
			self.send_header("Transfer-Encoding", "chunked")
			self.send_header("Connection", "close")
			self.end_headers()
			for part in (b"Wiki", b"pedia", b" in ", b"chunks"):
				self.wfile.write(b"%x\r\n%s\r\n" % (len(part), part))
				self.wfile.flush()
			self.wfile.write(b"0\r\n\r\n")
		elif self.path == "/host":
			body = (self.headers.get("Host") or "").encode()
			self.send_response(200)
			self.send_header("Content-Length", str(len(body)))
			self.send_header("Connection", "close")
			self.end_headers()
			self.wfile.write(body)
		elif self.path == "/missing":
			body = b"Not here"
			self.send_response(404)
			self.send_header("Content-Length", str(len(body)))
			self.send_header("Connection", "close")
			self.end_headers()
			self.wfile.write(body)
		else:
			body = b"Hello, World!" * 1000
			self.send_response(200)
			self.send_header("Content-Length", str(len(body)))
			self.send_header("Connection", "close")
			self.end_headers()
			self.wfile.write(body)

	def do_POST(self):
		length = int(self.headers.get("Content-Length") or 0)
		body = self.rfile.read(length)
		self.send_response(200)
		self.send_header("Content-Length", str(len(body)))
		self.send_header("Connection", "close")
		self.end_headers()
		self.wfile.write(body)


@pytest.fixture(scope="module")
def server() -> Iterator[tuple[str, int]]:
	httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
	thread = threading.Thread(target=httpd.serve_forever, daemon=True)
	thread.start()
	yield httpd.server_address[0], httpd.server_address[1]
	httpd.shutdown()
	httpd.server_close()


# EOF
