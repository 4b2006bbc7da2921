import logging
from typing import Any

from karma.motor.common.errors import EndpointFault
from karma.motor.common.messaging import RequestClient

logger = logging.getLogger(__name__)


class RemoteEndpoint:
    """Verb/args calls over a :class:`RequestClient`.

    Wire format:
    - request: ``{"verb": str, "args": list}``
    - reply: ``{"ok": bool, "value": Any, "error": str}``

    ``stop`` travels on a dedicated socket because it is issued from the
    interrupt thread while the worker may be blocked on the main one.
    """

    def __init__(self, name: str, host: str, port: int, timeout: float):
        self._name = name
        self._client = RequestClient(host, port, name=name, timeout=timeout)
        self._stop_client = RequestClient(host, port, name=f"{name}/stop", timeout=timeout)

    @property
    def name(self) -> str:
        return self._name

    def _call(self, verb: str, *args: Any) -> Any:
        return self._check(verb, self._client.request({"verb": verb, "args": list(args)}, verb=verb))

    def _call_stop(self) -> None:
        self._check("stop", self._stop_client.request({"verb": "stop", "args": []}, verb="stop"))

    def _check(self, verb: str, reply: Any) -> Any:
        if not isinstance(reply, dict):
            raise EndpointFault(self._name, verb, f"malformed reply {reply!r}")
        if not reply.get("ok", False):
            raise EndpointFault(self._name, verb, reply.get("error", "refused"))
        return reply.get("value")

    def close(self):
        self._client.close()
        self._stop_client.close()
