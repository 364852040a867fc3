from typing import Any

from .context import HTTPContext
from .http.model import HTTPResponse, Method, headername
from .utils.io import asBytes

# --
# A one-shot client: each request opens its own connection, which is closed
# once the response body has been read.


METHOD_HAS_BODY: set[str] = {"POST", "PUT", "PATCH"}


async def request(
	method: Method | str,
	host: str,
	path: str = "/",
	*,
	port: int = 80,
	headers: dict[str, Any] | None = None,
	body: bytes | str | None = None,
	timeout: float | None = None,
	bufferSize: int | None = None,
) -> HTTPResponse:
	"""Sends the request and returns the response with its body fully
	loaded."""
	head: dict[str, Any] = {headername(k): v for k, v in (headers or {}).items()}
	payload: bytes | None = None if body is None else asBytes(body)
	if "Host" not in head:
		head["Host"] = host if port == 80 else f"{host}:{port}"
	if "Content-Length" not in head and (
		payload is not None or str(method).upper() in METHOD_HAS_BODY
	):
		head["Content-Length"] = len(payload or b"")
	if "Connection" not in head:
		head["Connection"] = "close"
	http = await HTTPContext.Connect(host, port, timeout=timeout, bufferSize=bufferSize)
	try:
		await http.beginRequest(method, path or "/")
		await http.requestHeaders(head)
		await http.requestHeadersEnd()
		if payload:
			await http.requestBodyChunk(payload)
		line = await http.responseBegin()
		headers_list = list(http.headers)
		data = await http.load()
		http.responseEnd()
		return HTTPResponse(line, headers_list, data)
	finally:
		await http.close()


# EOF
