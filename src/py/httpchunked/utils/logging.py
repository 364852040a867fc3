import sys
import time
from contextvars import ContextVar
from enum import Enum
from typing import Any, Callable, NamedTuple

from .. import config
from .term import Term

ERR = sys.stderr

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="httpchunked")


class LogType(Enum):
	Message = 0
	Event = 20


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}


def parseLevel(name: str, default: LogLevel = LogLevel.Info) -> LogLevel:
	"""Returns the level matching `name` (case-insensitive), or `default`."""
	key = name.strip().lower()
	for level in LogLevel:
		if level.name.lower() == key:
			return level
	return default


# Entries below this level are dropped before being formatted
THRESHOLD: LogLevel = parseLevel(config.LOG_LEVEL)


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: Any = None
	context: dict[str, Any] | None = None


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}] {entry.name}{Term.RESET} {formatData(entry.value)} {formatData(entry.context)}{Term.RESET}\n"
		)
	else:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
		)
	ERR.flush()
	return entry


def entry(
	*,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	name: str | None = None,
	value: Any = None,
	context: dict[str, Any],
	origin: str | None = None,
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time(),
		type=type,
		level=level,
		message=message,
		name=name,
		value=value,
		context=context,
	)


def log(level: LogLevel, message: str, **context: Any) -> LogEntry | None:
	if level.value < THRESHOLD.value:
		return None
	return send(entry(message=message, level=level, context=context))


def debug(message: str, **context: Any) -> LogEntry | None:
	return log(LogLevel.Debug, message, **context)


def info(message: str, **context: Any) -> LogEntry | None:
	return log(LogLevel.Info, message, **context)


def warning(message: str, **context: Any) -> LogEntry | None:
	return log(LogLevel.Warning, message, **context)


def error(message: str, code: int | str | None = None, **context: Any) -> LogEntry | None:
	if LogLevel.Error.value < THRESHOLD.value:
		return None
	return send(
		entry(message=message, value=code, level=LogLevel.Error, context=context)
	)


def event(name: str, value: Any = None, **context: Any) -> LogEntry | None:
	"""Events are debug-level structured records, like decoder transitions."""
	if not logged(event):
		return None
	return send(
		entry(
			name=name,
			value=value,
			type=LogType.Event,
			level=LogLevel.Debug,
			context=context,
		)
	)


def exception(exception: BaseException, message: str | None = None) -> BaseException:
	"""Writes the exception and its traceback to stderr, returning the
	exception so that it can be used as `raise exception(e)`."""
	stream = ERR
	stream.write(
		f"!!! EXCP {f'{message}: ' if message else ''}[{exception.__class__.__name__}] {exception}\n"
	)
	tb = exception.__traceback__
	while tb:
		code = tb.tb_frame.f_code
		stream.write(
			f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
		)
		tb = tb.tb_next
	stream.flush()
	return exception


LOGGED_LEVEL: dict[Callable[..., Any], LogLevel] = {
	debug: LogLevel.Debug,
	event: LogLevel.Debug,
	info: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
}


def logged(item: Callable[..., Any]) -> bool:
	"""Takes one of the logging functions and tells if it currently
	produces output. This guards against building entries that would be
	dropped anyway."""
	return LOGGED_LEVEL.get(item, LogLevel.Info).value >= THRESHOLD.value


# EOF
