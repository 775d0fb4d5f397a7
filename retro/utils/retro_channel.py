from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Protocol

from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)

Sender = Callable[[Dict[str, Any]], Awaitable[None]]


class RetroChannel(Protocol):
    """Anything idea controls can push outbound events to."""

    def push(self, event: str, payload: Any) -> Any: ...


@dataclass(frozen=True)
class ChannelMessage:
    """A single event pushed towards the retro channel."""

    event: str
    payload: Any

    def to_json(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "payload": to_jsonable_python(self.payload, by_alias=True),
        }


class BufferedRetroChannel:
    """Collects pushed events in order and forwards them to an async sender.

    ``sender`` is typically a WebSocket's ``send_json``. Pushing never
    blocks; delivery happens on ``flush``.
    """

    def __init__(self, retro_id: str, *, sender: Optional[Sender] = None) -> None:
        self.retro_id = retro_id
        self._sender = sender
        self._pending: Deque[ChannelMessage] = deque()

    def push(self, event: str, payload: Any) -> ChannelMessage:
        message = ChannelMessage(event=event, payload=payload)
        self._pending.append(message)
        logger.debug("Queued retro event: retro_id=%s event=%s", self.retro_id, event)
        return message

    @property
    def pending(self) -> List[ChannelMessage]:
        return list(self._pending)

    def drain(self) -> List[ChannelMessage]:
        """Return and forget every queued message."""
        messages = list(self._pending)
        self._pending.clear()
        return messages

    async def flush(self) -> int:
        """Send queued messages in order, stopping at the first failure."""
        if self._sender is None:
            raise RuntimeError(f"Retro channel {self.retro_id} has no sender attached")
        sent = 0
        while self._pending:
            message = self._pending[0]
            try:
                await self._sender(message.to_json())
            except Exception:  # noqa: BLE001
                logger.warning(
                    "Failed to deliver retro event: retro_id=%s event=%s",
                    self.retro_id,
                    message.event,
                    exc_info=True,
                )
                break
            self._pending.popleft()
            sent += 1
        return sent
