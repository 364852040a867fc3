import argparse
import asyncio
import sys
from typing import BinaryIO
from urllib.parse import urlparse

from . import config
from .context import HTTPContext
from .http.model import HTTPClientError, Method
from .utils.logging import debug, error, exception, info, logged

# --
# Fetches a URL over plain HTTP and writes the decoded body, streaming it as
# it is received.


async def fetch(
	url: str,
	*,
	method: str = "GET",
	headers: list[str] | None = None,
	data: str | None = None,
	output: BinaryIO,
	include: bool = False,
	timeout: float | None = None,
) -> int:
	uri = urlparse(url)
	if uri.scheme != "http":
		error("Only plain http:// URLs are supported", URL=url)
		return 1
	if not uri.hostname:
		error("URL has no host", URL=url)
		return 1
	port: int = uri.port or 80
	path: str = uri.path or "/"
	if uri.query:
		path = f"{path}?{uri.query}"
	payload: bytes = data.encode() if data is not None else b""
	# The Host header never carries the URL credentials
	hostname: str = f"[{uri.hostname}]" if ":" in uri.hostname else uri.hostname
	host: str = hostname if port == 80 else f"{hostname}:{port}"
	async with await HTTPContext.Connect(uri.hostname, port, timeout=timeout) as http:
		await http.beginRequest(method.upper(), path)
		await http.requestHeader("Host", host)
		for header in headers or ():
			await http.requestHeader(header)
		if data is not None or method.upper() in ("POST", "PUT", "PATCH"):
			await http.requestHeader("Content-Length", len(payload))
		await http.requestHeader("Connection", "close")
		await http.requestHeadersEnd()
		if payload:
			await http.requestBodyChunk(payload)
		line = await http.responseBegin()
		info("Response", Status=line.status, Message=line.message)
		if include:
			output.write(f"{line}\r\n".encode("latin-1"))
			for h in http.headers:
				output.write(f"{h}\r\n".encode("latin-1"))
			output.write(b"\r\n")
		total: int = 0
		async for chunk in http.read():
			output.write(chunk)
			total += len(chunk)
		output.flush()
		http.responseEnd()
		info("Body received", Size=total)
		return 0 if line.isSuccess else 2


def main(args: list[str] | None = None) -> int:
	parser = argparse.ArgumentParser(
		prog="httpchunked",
		description="Fetches a URL with the HTTP/1.1 client, decoding chunked and fixed-length bodies",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"-X",
		"--method",
		action="store",
		dest="method",
		choices=[_.value for _ in Method],
		help="The request method",
		default="GET",
	)
	parser.add_argument(
		"-H",
		"--header",
		action="append",
		dest="headers",
		metavar="'NAME: VALUE'",
		help="Header to add to the request (can be repeated)",
	)
	parser.add_argument(
		"-d",
		"--data",
		action="store",
		dest="data",
		help="Request body",
	)
	parser.add_argument(
		"-o",
		"--output",
		action="store",
		dest="output",
		help="Writes the body to the given file instead of stdout",
	)
	parser.add_argument(
		"-i",
		"--include",
		action="store_true",
		dest="include",
		help="Writes the status line and headers before the body",
	)
	parser.add_argument(
		"-t",
		"--timeout",
		action="store",
		dest="timeout",
		type=float,
		help="Read timeout in seconds",
		default=config.TIMEOUT,
	)
	parser.add_argument(
		"url",
		metavar="URL",
		help="The http:// URL to fetch",
	)
	options = parser.parse_args(args=args)
	out: BinaryIO = open(options.output, "wb") if options.output else sys.stdout.buffer
	try:
		return asyncio.run(
			fetch(
				options.url,
				method=options.method,
				headers=options.headers,
				data=options.data,
				output=out,
				include=options.include,
				timeout=options.timeout,
			)
		)
	except HTTPClientError as e:
		if logged(debug):
			exception(e, f"Request failed: {options.url}")
		else:
			error(str(e), e.__class__.__name__, URL=options.url)
		return 1
	finally:
		if options.output:
			out.close()


if __name__ == "__main__":
	sys.exit(main(sys.argv[1:]))

# EOF
