"""Request id assignment and client address resolution."""

import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

_REQUEST_ID_KEY = "telemetry_tracker.request_id"
_CLIENT_ADDR_KEY = "telemetry_tracker.client_addr"

MAX_REQUEST_ID_LENGTH = 128


def ensure_request_id(scope: Scope) -> str:
    """Return the request id stored in ``scope``, assigning one if absent."""
    state = scope.setdefault("state", {})
    request_id = state.get(_REQUEST_ID_KEY)
    if not request_id:
        request_id = uuid.uuid4().hex
        state[_REQUEST_ID_KEY] = request_id
    return request_id


def get_request_id(scope: Scope) -> str | None:
    return scope.get("state", {}).get(_REQUEST_ID_KEY)


def get_client_addr(scope: Scope) -> str:
    """Resolved client address, falling back to the socket peer."""
    addr = scope.get("state", {}).get(_CLIENT_ADDR_KEY)
    if addr:
        return addr
    client = scope.get("client")
    return client[0] if client else "unknown"


class RequestContextMiddleware:
    """Assigns a request id and resolves the real client address.

    The id is taken from ``header_name`` when present (an upstream proxy
    assigned it) or generated, stored in the ASGI scope state and echoed
    on the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Request-ID",
        trust_forwarded_headers: bool = True,
    ) -> None:
        self.app = app
        self.header_name = header_name
        self.trust_forwarded_headers = trust_forwarded_headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        state = scope.setdefault("state", {})

        incoming = headers.get(self.header_name, "").strip()
        if incoming:
            state[_REQUEST_ID_KEY] = incoming[:MAX_REQUEST_ID_LENGTH]
        request_id = ensure_request_id(scope)

        if self.trust_forwarded_headers:
            forwarded = self._forwarded_addr(headers)
            if forwarded:
                state[_CLIENT_ADDR_KEY] = forwarded

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[self.header_name] = request_id
            await send(message)

        await self.app(scope, receive, send_wrapper)

    @staticmethod
    def _forwarded_addr(headers: Headers) -> str | None:
        # X-Forwarded-For: first entry is the original client
        forwarded_for = headers.get("x-forwarded-for")
        if forwarded_for:
            first = forwarded_for.split(",")[0].strip()
            if first:
                return first

        real_ip = headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()

        return None
