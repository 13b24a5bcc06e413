import io
import logging

import pytest

from kvbench.client import Request, TcpClient, new_client
from kvbench.errors import ProtocolError, TransportError, UnknownOperation
from kvbench.protocol import Response


def test_set_get_del_round_trip(client, kv_server):
    s = Request("set", "7", "abcd")
    client.execute_one(s)
    assert s.outcome == Response(b"", False)
    assert kv_server.store[b"7"] == b"abcd"

    g = Request("get", "7", expected="abcd")
    client.execute_one(g)
    assert g.outcome == Response(b"abcd", False)

    d = Request("del", "7")
    client.execute_one(d)
    assert b"7" not in kv_server.store

    g2 = Request("get", "7")
    client.execute_one(g2)
    assert g2.outcome == Response(b"", False)


def test_value_with_spaces_and_newlines(client):
    value = "hello world\r\n- 3 tail "
    client.execute_one(Request("set", "key with space", value))
    g = Request("get", "key with space")
    client.execute_one(g)
    assert g.outcome.payload.decode() == value


def test_error_reply(client, kv_server):
    kv_server.errors[b"bad"] = b"no such key"
    g = Request("get", "bad")
    client.execute_one(g)
    assert g.outcome == Response(b"no such key", True)


def test_pipeline_correlates_in_order(client, kv_server):
    kv_server.store[b"pre"] = b"existing"
    requests = [
        Request("set", "a", "1"),
        Request("get", "pre"),
        Request("set", "b", "22"),
        Request("get", "a"),
        Request("del", "pre"),
        Request("get", "b"),
        Request("get", "pre"),
    ]
    client.execute_pipeline(requests)
    assert [r.outcome.payload for r in requests] == [
        b"", b"existing", b"", b"1", b"", b"22", b"",
    ]
    assert [op for op, _ in kv_server.requests] == [b"S", b"G", b"S", b"G", b"D", b"G", b"G"]


def test_empty_pipeline_is_noop(client, kv_server):
    client.execute_pipeline([])
    assert kv_server.requests == []


def test_unknown_op_is_fatal_on_single_path(client, kv_server):
    with pytest.raises(UnknownOperation):
        client.execute_one(Request("incr", "a"))
    assert kv_server.requests == []


def test_unknown_op_is_skipped_in_pipeline(client, caplog):
    requests = [Request("set", "x", "v"), Request("incr", "x"), Request("get", "x")]
    with caplog.at_level(logging.ERROR, logger="kvbench.client"):
        client.execute_pipeline(requests)
    assert requests[0].outcome == Response(b"", False)
    assert requests[1].outcome is None
    assert requests[2].outcome == Response(b"v", False)
    assert "unknown cmd name: incr" in caplog.text


class BrokenSocket:
    def sendall(self, data):
        raise BrokenPipeError("broken pipe")


def test_failed_send_still_reads_response(client, caplog):
    sock, reader = client.sock, client.reader
    client.sock = BrokenSocket()
    client.reader = io.BytesIO(b"4 abcd")
    try:
        g = Request("get", "k")
        with caplog.at_level(logging.ERROR, logger="kvbench.client"):
            client.execute_one(g)
    finally:
        client.sock, client.reader = sock, reader
    assert g.outcome == Response(b"abcd", False)
    assert "[tcp-cli] failed to send get" in caplog.text


def test_failed_send_in_pipeline_still_reads_every_response(client, caplog):
    sock, reader = client.sock, client.reader
    client.sock = BrokenSocket()
    client.reader = io.BytesIO(b"1 a- 1 e0 ")
    requests = [Request("get", "a"), Request("get", "b"), Request("set", "c", "x")]
    try:
        with caplog.at_level(logging.ERROR, logger="kvbench.client"):
            client.execute_pipeline(requests)
    finally:
        client.sock, client.reader = sock, reader
    assert [r.outcome for r in requests] == [
        Response(b"a", False), Response(b"e", True), Response(b"", False),
    ]
    assert caplog.text.count("[pipeline] failed to send") == 3
    assert "[tcp-cli]" not in caplog.text


class FailingReader:
    def read(self, n=-1):
        raise ConnectionResetError("reset by peer")


def test_failed_read_raises_transport_error(client):
    reader = client.reader
    client.reader = FailingReader()
    try:
        with pytest.raises(TransportError):
            client.execute_one(Request("get", "k"))
    finally:
        client.reader = reader


def test_truncated_reply_raises_protocol_error(client):
    reader = client.reader
    client.reader = io.BytesIO(b"9 abc")
    try:
        with pytest.raises(ProtocolError):
            client.execute_one(Request("get", "k"))
    finally:
        client.reader = reader


def test_connect_failure():
    with pytest.raises(TransportError):
        TcpClient("127.0.0.1", 1, timeout=1)


def test_factory(kv_server):
    cli = new_client("tcp", kv_server.host, kv_server.port)
    try:
        assert isinstance(cli, TcpClient)
    finally:
        cli.close()
    with pytest.raises(NotImplementedError):
        new_client("redis", kv_server.host, kv_server.port)
    with pytest.raises(NotImplementedError):
        new_client("http", kv_server.host, kv_server.port)
    with pytest.raises(ValueError):
        new_client("memcache", kv_server.host, kv_server.port)
