import asyncio
import io
import socket

import pytest

from httpchunked import __main__ as cli
from httpchunked.client import request
from httpchunked.http.model import ContentType, HTTPIOError, TransferEncodingChunked
from httpchunked.transport import StreamTransport
from httpchunked.utils import logging


def test_request_fixed_length(server):
	host, port = server
	res = asyncio.run(request("GET", host, "/", port=port, bufferSize=256))
	assert res.status == 200
	assert res.body == b"Hello, World!" * 1000
	assert res.getHeader("content-length") == str(len(res.body))


def test_request_chunked(server):
	host, port = server
	res = asyncio.run(request("GET", host, "/chunked", port=port, bufferSize=8))
	assert res.status == 200
	assert res.body == b"Wikipedia in chunks"
	assert TransferEncodingChunked() in res.headers
	assert ContentType("text/plain") in res.headers


def test_request_with_body(server):
	host, port = server
	res = asyncio.run(request("POST", host, "/echo", port=port, body=b"ping" * 100))
	assert res.status == 200
	assert res.body == b"ping" * 100


def test_request_error_status(server):
	host, port = server
	res = asyncio.run(request("GET", host, "/missing", port=port))
	assert res.status == 404
	assert not res.line.isSuccess
	assert res.body == b"Not here"


def test_connect_refused():
	async def main():
		# We grab a free port, and close the listener right away
		srv = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
		port = srv.sockets[0].getsockname()[1]
		srv.close()
		await srv.wait_closed()
		await StreamTransport.Connect("127.0.0.1", port, timeout=2.0)

	with pytest.raises(HTTPIOError):
		asyncio.run(main())


def test_read_timeout():
	async def main():
		async def silent(reader, writer):
			await asyncio.sleep(1.0)
			writer.close()

		srv = await asyncio.start_server(silent, "127.0.0.1", 0)
		port = srv.sockets[0].getsockname()[1]
		try:
			transport = await StreamTransport.Connect("127.0.0.1", port, timeout=0.1)
			try:
				await transport.read(16)
			finally:
				await transport.close()
		finally:
			srv.close()
			await srv.wait_closed()

	with pytest.raises(HTTPIOError):
		asyncio.run(main())


# ============================================================================
# Command line
# ============================================================================


def test_cli_writes_body(server, tmp_path):
	host, port = server
	output = tmp_path / "body.txt"
	assert cli.main([f"http://{host}:{port}/chunked", "-o", str(output)]) == 0
	assert output.read_bytes() == b"Wikipedia in chunks"


def test_cli_include_headers(server, tmp_path):
	host, port = server
	output = tmp_path / "response.txt"
	assert cli.main(["-i", f"http://{host}:{port}/missing", "-o", str(output)]) == 2
	data = output.read_bytes()
	assert data.startswith(b"HTTP/1.1 404 Not Found\r\n")
	assert b"Content-Length: 8\r\n" in data
	assert data.endswith(b"\r\n\r\nNot here")


def test_cli_post_data(server, tmp_path):
	host, port = server
	output = tmp_path / "echo.txt"
	assert cli.main(["-X", "POST", "-d", "pong", f"http://{host}:{port}/", "-o", str(output)]) == 0
	assert output.read_bytes() == b"pong"


def test_cli_rejects_https(tmp_path):
	assert cli.main(["https://example.org/", "-o", str(tmp_path / "out")]) == 1


def test_cli_host_omits_credentials(server, tmp_path):
	host, port = server
	output = tmp_path / "host.txt"
	assert cli.main([f"http://user:secret@{host}:{port}/host", "-o", str(output)]) == 0
	assert output.read_bytes() == f"{host}:{port}".encode()


def test_cli_failure_traceback_in_debug(tmp_path, monkeypatch):
	stderr = io.StringIO()
	monkeypatch.setattr(logging, "ERR", stderr)
	monkeypatch.setattr(logging, "THRESHOLD", logging.LogLevel.Debug)
	# Nothing listens on a port we just released
	with socket.socket() as sock:
		sock.bind(("127.0.0.1", 0))
		port = sock.getsockname()[1]
	url = f"http://127.0.0.1:{port}/"
	assert cli.main([url, "-o", str(tmp_path / "out"), "-t", "2"]) == 1
	output = stderr.getvalue()
	assert f"!!! EXCP Request failed: {url}: [HTTPIOError]" in output
	assert "... in " in output


# EOF
