"""Pass-through ASGI send wrapper that observes status and body size."""

from starlette.types import Message, Send


class ResponseRecorder:
    """Wraps an ASGI ``send`` callable and records what goes through it.

    Messages are forwarded unchanged and never buffered. The first
    ``http.response.start`` status is the recorded one; later start
    messages are still forwarded. A body sent without a prior start
    records status 200.
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self._status: int | None = None
        self._bytes_written = 0

    @property
    def status(self) -> int | None:
        """First status observed, or None while no response has started."""
        return self._status

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def started(self) -> bool:
        return self._status is not None

    async def __call__(self, message: Message) -> None:
        message_type = message["type"]
        if message_type == "http.response.start":
            if self._status is None:
                self._status = int(message["status"])
        elif message_type == "http.response.body":
            if self._status is None:
                self._status = 200
            self._bytes_written += len(message.get("body", b""))
        await self._send(message)
