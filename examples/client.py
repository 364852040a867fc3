import asyncio
import sys

from httpchunked import request
from httpchunked.utils.logging import info

"""
HTTP Client Example

Sends a one-shot request and prints the decoded body.

Usage:
    python client.py [HOST] [PATH]
    python client.py example.org /
"""


async def main(host: str, path: str) -> None:
	res = await request("GET", host, path, headers={"Accept": "*/*"})
	info("Response received", Status=res.status, Size=len(res.body))
	for header in res.headers:
		info("Header", Value=str(header))
	sys.stdout.buffer.write(res.body)


if __name__ == "__main__":
	host = sys.argv[1] if len(sys.argv) > 1 else "example.org"
	path = sys.argv[2] if len(sys.argv) > 2 else "/"
	asyncio.run(main(host, path))

# EOF
