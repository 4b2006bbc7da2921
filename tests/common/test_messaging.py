import pickle
import threading

import pytest

from karma.motor.common.errors import EndpointFault, SerializationError
from karma.motor.common.messaging import PickleSerializer, ReplyServer, RequestClient
from karma.motor.common.messaging.utils import create_request_socket


def _serve_once(server, handler):
    thread = threading.Thread(target=server.poll_once, args=(handler,), kwargs={"timeout_ms": 5000}, daemon=True)
    thread.start()
    return thread


def test_pickle_serializer_type_check():
    serializer = PickleSerializer(expected_type=list)
    assert serializer.decode(serializer.encode(["ack", 1.0])) == ["ack", 1.0]
    with pytest.raises(SerializationError):
        serializer.decode(pickle.dumps({"verb": "push"}))
    with pytest.raises(SerializationError):
        serializer.decode(b"not a pickle")


def test_request_reply(free_port):
    port = free_port()
    server = ReplyServer("127.0.0.1", port)
    client = RequestClient("127.0.0.1", port, name="motor", timeout=5.0)
    try:
        thread = _serve_once(server, lambda request: ["ack"] + request[1:])
        assert client.request(["tool", "get"]) == ["ack", "get"]
        thread.join(timeout=5)
    finally:
        client.close()
        server.close()


def test_request_timeout_raises_and_recovers(free_port):
    port = free_port()
    client = RequestClient("127.0.0.1", port, name="right_arm", timeout=0.2)
    try:
        with pytest.raises(EndpointFault) as info:
            client.request({"verb": "check_motion_done", "args": []})
        assert info.value.endpoint == "right_arm"
        assert info.value.verb == "check_motion_done"

        # the stuck socket was replaced, so a late server is reachable
        server = ReplyServer("127.0.0.1", port)
        try:
            thread = _serve_once(server, lambda request: {"ok": True, "value": True, "error": ""})
            reply = client.request({"verb": "check_motion_done", "args": []}, timeout=5.0)
            assert reply["value"] is True
            thread.join(timeout=5)
        finally:
            server.close()
    finally:
        client.close()


def test_undecodable_request_gets_error_reply(free_port):
    port = free_port()
    server = ReplyServer("127.0.0.1", port, error_reply=["nack"])
    raw = create_request_socket("127.0.0.1", port)
    try:
        thread = _serve_once(server, lambda request: ["ack"])
        raw.send(b"garbage")
        assert raw.poll(5000)
        assert pickle.loads(raw.recv()) == ["nack"]
        thread.join(timeout=5)
    finally:
        raw.close(linger=0)
        server.close()


def test_poll_once_without_request(free_port):
    port = free_port()
    server = ReplyServer("127.0.0.1", port)
    try:
        assert not server.poll_once(lambda request: ["ack"], timeout_ms=10)
    finally:
        server.close()
