from datetime import datetime, timezone

import pytest

from httpchunked.http.model import (
	ContentLength,
	ContentType,
	CustomHeader,
	Date,
	Host,
	HTTPResponseLine,
	MalformedChunkSize,
	MalformedHeader,
	MalformedStatusLine,
	TransferEncodingChunked,
	nameof,
)
from httpchunked.http.parser import (
	HTTPHeaders,
	iterHeaders,
	parseChunkSize,
	parseHeader,
	parseStatus,
)

PREAMBLE = (
	b"HTTP/1.1 200 OK\r\n"
	b"content-length: 42\r\n"
	b"Content-Type: text/html; charset=utf-8\r\n"
	b"X-Request-Id:  abc:def \r\n"
	b"Date: Fri, 24 Nov 2023 06:58:19 GMT"
)


# ============================================================================
# Status line
# ============================================================================


def test_status_with_reason():
	assert parseStatus(b"HTTP/1.1 404 Not Found\r\nA: b") == HTTPResponseLine(
		"HTTP/1.1", 404, "Not Found"
	)


def test_status_without_reason():
	line = parseStatus(b"HTTP/1.0 204")
	assert line == HTTPResponseLine("HTTP/1.0", 204, "")
	assert not line.hasBody


def test_status_is_success():
	assert parseStatus(b"HTTP/1.1 201 Created").isSuccess
	assert not parseStatus(b"HTTP/1.1 500 Internal Server Error").isSuccess


@pytest.mark.parametrize(
	"line",
	[
		b"",
		b"HTTP/2 200 OK",
		b"ICY 200 OK",
		b"HTTP/1.1",
		b"HTTP/1.1 OK 200",
		b"HTTP/1.1 -20 Oops",
		b"HTTP/1.1 200 \xff\xfe",
	],
)
def test_status_malformed(line):
	with pytest.raises(MalformedStatusLine):
		parseStatus(line)


# ============================================================================
# Headers
# ============================================================================


def test_headers_are_recognized():
	headers = list(iterHeaders(PREAMBLE))
	assert headers == [
		ContentLength(42),
		ContentType("text/html; charset=utf-8"),
		CustomHeader("X-Request-Id", "abc:def"),
		Date(datetime(2023, 11, 24, 6, 58, 19, tzinfo=timezone.utc)),
	]


def test_headers_render_to_wire_form():
	assert [str(_) for _ in iterHeaders(PREAMBLE)] == [
		"Content-Length: 42",
		"Content-Type: text/html; charset=utf-8",
		"X-Request-Id: abc:def",
		"Date: Fri, 24 Nov 2023 06:58:19 GMT",
	]


def test_headers_are_restartable():
	headers = HTTPHeaders(PREAMBLE)
	assert list(headers) == list(headers)
	assert headers.contentLength == 42
	assert not headers.isChunked
	assert headers.get("x-request-id") == CustomHeader("X-Request-Id", "abc:def")
	assert headers.get("Content-Type") == ContentType("text/html; charset=utf-8")
	assert headers.get("Missing") is None


def test_headers_empty_block():
	assert list(HTTPHeaders(b"HTTP/1.1 204 No Content")) == []
	assert list(HTTPHeaders(b"HTTP/1.1 204 No Content\r\n")) == []


def test_headers_malformed_line_fails_iteration():
	headers = iterHeaders(b"HTTP/1.1 200 OK\r\nA: b\r\nnot a header\r\nC: d")
	assert next(headers) == CustomHeader("A", "b")
	with pytest.raises(MalformedHeader):
		next(headers)


def test_transfer_encoding_chunked():
	assert parseHeader("Transfer-Encoding", "chunked") == TransferEncodingChunked()
	assert parseHeader("TRANSFER-ENCODING", " gzip, Chunked") == TransferEncodingChunked()
	assert str(TransferEncodingChunked()) == "Transfer-Encoding: chunked"
	assert HTTPHeaders(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked").isChunked


def test_transfer_encoding_unsupported():
	with pytest.raises(MalformedHeader):
		parseHeader("Transfer-Encoding", "gzip")


@pytest.mark.parametrize("value", ["", "abc", "-1", "1.5", "+3"])
def test_content_length_malformed(value):
	with pytest.raises(MalformedHeader):
		parseHeader("Content-Length", value)


def test_host_header():
	assert parseHeader("host", " test.host.example.org") == Host("test.host.example.org")
	assert parseHeader("Host", "localhost:8080") == Host("localhost", 8080)
	assert parseHeader("Host", "[::1]:8080") == Host("[::1]", 8080)
	assert str(Host("localhost", 8080)) == "Host: localhost:8080"


def test_date_fallback_to_custom():
	assert parseHeader("date", "yesterday") == CustomHeader("Date", "yesterday")
	# Out of range years and offsets overflow the date conversion
	for value in (
		"Mon, 01 Jan 99999999999999999999 00:00:00 GMT",
		"Mon, 01 Jan 2024 00:00:00 +99999999999999999999",
	):
		assert parseHeader("Date", value) == CustomHeader("Date", value)


def test_date_renders_in_utc():
	assert (
		str(parseHeader("Date", "Fri, 24 Nov 2023 08:58:19 +0200"))
		== "Date: Fri, 24 Nov 2023 06:58:19 GMT"
	)
	assert str(Date(datetime(2023, 11, 24, 6, 58, 19))) == "Date: Fri, 24 Nov 2023 06:58:19 GMT"


def test_header_names():
	assert nameof(ContentLength(1)) == "Content-Length"
	assert nameof(CustomHeader("x-powered-by", "httpchunked")) == "X-Powered-By"


# ============================================================================
# Chunk sizes
# ============================================================================


@pytest.mark.parametrize(
	"line,size",
	[
		(b"0", 0),
		(b"4", 4),
		(b"1A", 26),
		(b"ff", 255),
		(b"5;name=value", 5),
		(b"10 ; ext", 16),
	],
)
def test_chunk_size(line, size):
	assert parseChunkSize(line) == size


@pytest.mark.parametrize("line", [b"", b"xyz", b"-1", b"0x10", b"1_0", b";ext", b"\xff"])
def test_chunk_size_malformed(line):
	with pytest.raises(MalformedChunkSize):
		parseChunkSize(line)


# EOF
