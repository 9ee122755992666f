"""
In-memory conversation store.

Holds one bounded turn log per conversation id. Logs live only for the
lifetime of the process.

Usage:
    store = InMemoryConversationStore(
        policy=WindowPolicy(size=10, includes_system=False),
        seed_system_prompt="You are a JavaScript expert.",
    )

    history = await store.get_history("c1")
    retained = await store.append_and_trim(
        "c1", [Turn.user("Hello"), Turn.assistant("Hi")]
    )
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..domain.entities import Turn, WindowPolicy
from ..domain.exceptions import InvalidArgumentError
from ..domain.ports import IConversationStore

logger = logging.getLogger(__name__)


@dataclass
class _Session:
    turns: list[Turn]
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemoryConversationStore(IConversationStore):
    """Process-local conversation store with a sliding window.

    Each conversation id gets its own ``asyncio.Lock``, stored with its
    turns; appends to the same id are serialized so turn pairs from
    concurrent requests never interleave. Appends to different ids proceed
    independently.

    Attributes:
        policy: Default window policy
        seed_system_prompt: System turn placed at the head of new sessions
    """

    def __init__(
        self,
        policy: Optional[WindowPolicy] = None,
        seed_system_prompt: Optional[str] = None,
    ):
        self.policy = policy or WindowPolicy()
        _validate_window_size(self.policy.size)
        self.seed_system_prompt = seed_system_prompt
        self._sessions: dict[str, _Session] = {}

    async def get_history(self, conversation_id: str) -> list[Turn]:
        session = self._sessions.get(conversation_id)
        if session is None:
            return []
        return list(session.turns)

    async def append_and_trim(
        self,
        conversation_id: str,
        new_turns: list[Turn],
        window_size: Optional[int] = None,
    ) -> list[Turn]:
        policy = self.policy
        if window_size is not None:
            _validate_window_size(window_size)
            policy = WindowPolicy(size=window_size, includes_system=policy.includes_system)

        session = self._sessions.get(conversation_id)
        if session is None:
            session = _Session(turns=self._new_session(conversation_id))
            self._sessions[conversation_id] = session

        async with session.lock:
            turns = policy.apply(session.turns + list(new_turns))
            session.turns = turns

        logger.debug(
            f"Conversation {conversation_id}: appended {len(new_turns)} turn(s), "
            f"{len(turns)} retained"
        )
        return list(turns)

    def _new_session(self, conversation_id: str) -> list[Turn]:
        logger.info(f"Starting conversation {conversation_id}")
        if self.seed_system_prompt:
            return [Turn.system(self.seed_system_prompt)]
        return []

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._sessions


def _validate_window_size(size: object) -> None:
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise InvalidArgumentError(f"window_size must be a positive integer, got {size!r}")
