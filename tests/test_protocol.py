import pytest

from trackerfs.errors import ApplicationError, ProtocolError
from trackerfs.protocol import decode_reply, encode_request, parse_query


def test_encode_keeps_argument_order():
    line = encode_request("delete", {"domain": "media", "key": "k1"})
    assert line == b"delete domain=media&key=k1\r\n"


def test_encode_escapes_reserved_characters():
    line = encode_request("rename", {"domain": "d", "from_key": "a b&c=d", "to_key": "dir/file.txt"})
    assert line == b"rename domain=d&from_key=a+b%26c%3Dd&to_key=dir%2Ffile.txt\r\n"


def test_encode_escapes_non_ascii():
    assert encode_request("delete", {"key": "café"}) == b"delete key=caf%C3%A9\r\n"


def test_decode_ok():
    assert decode_reply(b"OK key1=val1&key2=val2\r\n") == {"key1": "val1", "key2": "val2"}


def test_decode_ok_unescapes_values():
    values = decode_reply(b"OK path1=http%3A%2F%2F10.0.0.1%3A7500%2Fdev1%2F0.fid&note=a+b\r\n")
    assert values == {"path1": "http://10.0.0.1:7500/dev1/0.fid", "note": "a b"}


def test_decode_empty_ok():
    assert decode_reply(b"OK \r\n") == {}


def test_decode_ok_first_duplicate_wins():
    assert decode_reply(b"OK a=1&a=2\r\n") == {"a": "1"}


def test_decode_ok_field_without_value():
    assert decode_reply(b"OK a&b=2\r\n") == {"a": "", "b": "2"}


def test_decode_err():
    with pytest.raises(ApplicationError) as excinfo:
        decode_reply(b"ERR unknown_key some message\r\n")
    assert excinfo.value.code == "unknown_key"
    assert excinfo.value.message == "some message"


def test_decode_err_url_encoded_message():
    with pytest.raises(ApplicationError) as excinfo:
        decode_reply(b"ERR key_exists Target+key+name+already+exists%3B+can%27t+overwrite.\r\n")
    assert excinfo.value.code == "key_exists"
    assert excinfo.value.message == "Target key name already exists; can't overwrite."


def test_decode_err_without_message():
    with pytest.raises(ApplicationError) as excinfo:
        decode_reply(b"ERR no_domain\r\n")
    assert excinfo.value.code == "no_domain"
    assert excinfo.value.message == ""


@pytest.mark.parametrize("line", [
    b"",
    b"\r\n",
    b"HELLO\r\n",
    b"OK\r\n",
    b"OK a=1\n",
    b"ok a=1\r\n",
    b"ERR \r\n",
    b"ERR",
])
def test_decode_invalid_reply(line):
    with pytest.raises(ProtocolError):
        decode_reply(line)


@pytest.mark.parametrize("line", [
    b"OK a=%zz\r\n",
    b"OK a=%4\r\n",
    b"OK a=1%\r\n",
    b"OK a=1;b=2\r\n",
    b"OK a=%FF\r\n",
    b"OK a=\xff\r\n",
])
def test_decode_malformed_query(line):
    with pytest.raises(ProtocolError):
        decode_reply(line)


def test_parse_query_skips_empty_fields():
    assert parse_query("&a=1&&b=2&") == {"a": "1", "b": "2"}


def test_parse_query_accepts_adjacent_escapes():
    assert parse_query("k=%41%42%2B%25") == {"k": "AB+%"}
