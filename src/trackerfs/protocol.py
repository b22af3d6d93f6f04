"""Tracker line protocol.

Request:  <command> <urlencoded args>\\r\\n
Replies:  OK <urlencoded values>\\r\\n
          ERR <code> <urlencoded message>\\r\\n
"""
from typing import Dict, Mapping
from urllib.parse import unquote_plus, urlencode

from .errors import ApplicationError, ProtocolError

CMD_GET_PATHS = "get_paths"
CMD_RENAME = "rename"
CMD_DELETE = "delete"
CMD_DEBUG = "file_debug"
CMD_CREATE_OPEN = "create_open"
CMD_CREATE_CLOSE = "create_close"

OK_PREFIX = b"OK "
ERR_PREFIX = b"ERR "
EOL = b"\r\n"

_HEX = frozenset("0123456789abcdefABCDEF")


def _has_bad_escape(field):
    i = field.find("%")
    while i != -1:
        if len(field) < i + 3 or field[i + 1] not in _HEX or field[i + 2] not in _HEX:
            return True
        i = field.find("%", i + 3)
    return False


def encode_request(command: str, args: Mapping[str, str]) -> bytes:
    return f"{command} {urlencode(list(args.items()))}\r\n".encode("ascii")


def parse_query(query: str) -> Dict[str, str]:
    values = {}
    for field in query.split("&"):
        if not field:
            continue
        if ";" in field:
            raise ProtocolError(f"invalid semicolon in reply field {field!r}")
        if _has_bad_escape(field):
            raise ProtocolError(f"invalid escape in reply field {field!r}")
        key, _, value = field.partition("=")
        key = unquote_plus(key, errors="strict")
        # first occurrence wins
        values.setdefault(key, unquote_plus(value, errors="strict"))
    return values


def decode_reply(line: bytes) -> Dict[str, str]:
    """Return the values of an OK reply, raise ApplicationError for ERR."""
    if line.startswith(OK_PREFIX) and line.endswith(EOL):
        try:
            query = line[len(OK_PREFIX):-len(EOL)].decode("utf-8")
            return parse_query(query)
        except UnicodeDecodeError as e:
            raise ProtocolError(f"undecodable tracker reply: {e}") from e

    if line.startswith(ERR_PREFIX):
        parts = line[len(ERR_PREFIX):].decode("utf-8", "replace").split(None, 1)
        if parts:
            message = unquote_plus(parts[1]).strip() if len(parts) > 1 else ""
            raise ApplicationError(parts[0], message)

    raise ProtocolError("invalid tracker reply")
