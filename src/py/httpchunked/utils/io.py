DEFAULT_ENCODING: str = "utf8"
EOL: bytes = b"\r\n"
EOH: bytes = b"\r\n\r\n"


def asBytes(value: str | bytes | bytearray | None) -> bytes:
	if isinstance(value, bytes):
		return value
	elif isinstance(value, bytearray):
		return bytes(value)
	elif isinstance(value, str):
		return bytes(value, DEFAULT_ENCODING)
	elif value is None:
		return b""
	else:
		raise ValueError(f"Expected bytes or str, got: {value}")


def asText(value: bytes | bytearray | memoryview, what: str = "value") -> str:
	"""Decodes protocol bytes, which are expected to be ASCII. Raises
	`ValueError` with a short description of `what` otherwise."""
	try:
		return bytes(value).decode("ascii")
	except UnicodeDecodeError as e:
		raise ValueError(f"{what} contains non-ASCII bytes") from e


# EOF
