import asyncio
import sys

from httpchunked import HTTPContext, Method
from httpchunked.utils.logging import info

"""
Chunked Response Example

Streams a chunked response to a file, reading the body piece by piece with
`readBodyChunk`, the way the body decoder is meant to be driven.

Usage:
    python chunked.py [HOST] [PATH] [OUTPUT]
    python chunked.py anglesharp.azurewebsites.net /Chunked chunked.html
"""


async def main(host: str, path: str, output: str) -> None:
	async with await HTTPContext.Connect(host, 80) as http:
		await http.beginRequest(Method.GET, path)
		await http.requestHeader("Host", host)
		await http.requestHeader("Connection", "close")
		await http.requestHeadersEnd()
		line = await http.responseBegin()
		info("Response", Status=line.status, Message=line.message)
		for header in http.headers:
			info("Header", Value=str(header))
		if not line.isSuccess:
			return
		buf = bytearray(1024)
		total = 0
		with open(output, "wb") as f:
			while http.hasMoreBody():
				n = await http.readBodyChunk(buf)
				f.write(buf[:n])
				total += n
		http.responseEnd()
		info("Body saved", Size=total, Path=output)


if __name__ == "__main__":
	args = sys.argv[1:] + ["anglesharp.azurewebsites.net", "/Chunked", "chunked.html"][
		len(sys.argv) - 1 :
	]
	asyncio.run(main(*args[:3]))

# EOF
