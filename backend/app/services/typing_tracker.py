"""Auto-expiring "user A is typing to user B" signals."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

USER_TYPING = "userTyping"
USER_STOPPED_TYPING = "userStoppedTyping"


@dataclass(frozen=True)
class Emission:
    """Instruction to emit one event to one user."""

    event: str
    target_user_id: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class TypingSignal:
    from_user_id: str
    to_user_id: str
    expires_at: float
    generation: int

    def seconds_remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())


ExpiryCallback = Callable[[Emission], object]


class TypingTracker:
    """Hold at most one typing signal per sender, each with its own expiry timer.

    Every mutation is synchronous, so on a single event loop replacing a
    signal and an expiry firing can never interleave. Each installed signal
    carries a fresh generation number; a timer only retracts the signal it
    was scheduled for, even if it wakes up after being cancelled.
    """

    def __init__(
        self,
        timeout_seconds: float = 3.0,
        on_expire: ExpiryCallback | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.on_expire = on_expire
        self._signals: dict[str, TypingSignal] = {}
        self._timers: dict[str, asyncio.Task] = {}
        self._generation = 0

    def get(self, user_id: str) -> TypingSignal | None:
        return self._signals.get(user_id)

    def __len__(self) -> int:
        return len(self._signals)

    def start_typing(self, from_user_id: str, to_user_id: str) -> Emission:
        """Install or refresh the sender's signal and restart its timer.

        A previous recipient of a redirected signal is not notified.
        """
        self._cancel_timer(from_user_id)
        self._generation += 1
        signal = TypingSignal(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            expires_at=time.monotonic() + self.timeout_seconds,
            generation=self._generation,
        )
        self._signals[from_user_id] = signal
        self._timers[from_user_id] = asyncio.create_task(
            self._run_expiry(from_user_id, signal.generation, signal.expires_at),
            name=f"typing-expiry-{from_user_id}",
        )
        return Emission(USER_TYPING, to_user_id, {"userId": from_user_id})

    def stop_typing(self, from_user_id: str) -> Emission | None:
        """Retract the sender's signal, if any."""
        signal = self._signals.pop(from_user_id, None)
        self._cancel_timer(from_user_id)
        if signal is None:
            return None
        return Emission(USER_STOPPED_TYPING, signal.to_user_id, {"userId": from_user_id})

    def clear_on_disconnect(self, user_id: str) -> Emission | None:
        return self.stop_typing(user_id)

    def expire(self, from_user_id: str, generation: int) -> Emission | None:
        """Retract the signal if it is still the one installed at ``generation``."""
        signal = self._signals.get(from_user_id)
        if signal is None or signal.generation != generation:
            return None
        del self._signals[from_user_id]
        self._timers.pop(from_user_id, None)
        logger.debug("Typing signal expired for user %s", from_user_id)
        return Emission(USER_STOPPED_TYPING, signal.to_user_id, {"userId": from_user_id})

    def close(self) -> None:
        """Cancel every pending timer and drop all signals."""
        for task in self._timers.values():
            task.cancel()
        self._timers.clear()
        self._signals.clear()

    def _cancel_timer(self, user_id: str) -> None:
        task = self._timers.pop(user_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _run_expiry(self, from_user_id: str, generation: int, deadline: float) -> None:
        await asyncio.sleep(max(0.0, deadline - time.monotonic()))
        emission = self.expire(from_user_id, generation)
        if emission is None or self.on_expire is None:
            return
        try:
            self.on_expire(emission)
        except Exception as exc:
            logger.error("Typing expiry delivery failed for user %s: %s", from_user_id, exc)
