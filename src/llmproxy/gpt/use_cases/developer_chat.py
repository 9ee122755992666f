"""JavaScript/TypeScript developer chat.

A plain chat completion over a bounded conversation. The seeded system
turn lives in the conversation store and is kept outside the window.
"""

import logging

from openai import AsyncOpenAI

from ...agent.domain.entities import Turn, WindowPolicy
from ...agent.memory import InMemoryConversationStore

logger = logging.getLogger(__name__)

CHAT_MODEL = "gpt-4.1-nano"
MAX_HISTORY = 10

JAVASCRIPT_DEVELOPER_PROMPT = """You are an expert assistant in web and mobile development, focused on JavaScript and TypeScript.

Provide answers with clean code, offering simple and scalable solutions."""


def create_developer_chat_store(window_size: int = MAX_HISTORY) -> InMemoryConversationStore:
    return InMemoryConversationStore(
        policy=WindowPolicy(size=window_size, includes_system=False),
        seed_system_prompt=JAVASCRIPT_DEVELOPER_PROMPT,
    )


class JavascriptDeveloperUseCase:
    def __init__(self, client: AsyncOpenAI, store: InMemoryConversationStore):
        self.client = client
        self.store = store

    async def execute(self, prompt: str, conversation_id: str) -> str:
        history = await self.store.get_history(conversation_id)
        if not history and self.store.seed_system_prompt:
            history = [Turn.system(self.store.seed_system_prompt)]

        messages = [{"role": t.role.value, "content": t.content} for t in history]
        messages.append({"role": "user", "content": prompt})

        completion = await self.client.chat.completions.create(
            model=CHAT_MODEL,
            messages=messages,
        )
        answer = completion.choices[0].message.content or ""

        retained = await self.store.append_and_trim(
            conversation_id, [Turn.user(prompt), Turn.assistant(answer)]
        )
        logger.debug(f"JavaScript chat {conversation_id}: {len(retained)} turn(s) stored")
        return answer
