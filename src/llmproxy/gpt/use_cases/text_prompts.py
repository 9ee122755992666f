"""Single-shot text completion use cases.

Each use case wraps one chat completion call:
- Orthography check (JSON mode)
- Basic prompt
- Pros/cons discussion, plain and streamed
- Translation
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from openai import AsyncOpenAI

from ...api.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

TEXT_MODEL = "gpt-4.1-nano"

ORTHOGRAPHY_PROMPT = """You will be given texts in various languages that may contain spelling and grammar mistakes.
Words must exist in the language of the text and must not be invented.
Your task is to correct them and return the result as JSON,
including the percentage of correctness achieved by the user.

If there are no mistakes, return a congratulations message.

Output example:
{
  "userScore": number,
  "errors": [],  // ["mistake -> fix"]
  "message": string  // Use emojis and text to congratulate the user when there are no mistakes
}"""

PROS_CONS_PROMPT = """You will be given a question and your task is to answer it with pros and cons.
The answer must be formatted as markdown,
and the pros and cons must be presented as lists."""


def _log_usage(name: str, usage: Any) -> None:
    if usage is not None:
        logger.info(
            f"{name} usage: prompt={usage.prompt_tokens} "
            f"completion={usage.completion_tokens} total={usage.total_tokens}"
        )


@dataclass
class OrthographyResult:
    user_score: float = 0
    errors: list[str] = field(default_factory=list)
    message: str = ""


class OrthographyUseCase:
    """Correct spelling and grammar, scoring the user's text."""

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def execute(self, prompt: str) -> OrthographyResult:
        completion = await self.client.chat.completions.create(
            model=TEXT_MODEL,
            messages=[
                {"role": "system", "content": ORTHOGRAPHY_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            max_tokens=150,
        )
        _log_usage("orthography", completion.usage)

        content = completion.choices[0].message.content or "{}"
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise UpstreamServiceError(
                "Orthography check returned malformed JSON", service="openai", cause=e
            ) from e

        return OrthographyResult(
            user_score=data.get("userScore", 0),
            errors=[str(err) for err in data.get("errors", [])],
            message=data.get("message", ""),
        )


class BasicPromptUseCase:
    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def execute(self, prompt: str) -> str:
        completion = await self.client.chat.completions.create(
            model=TEXT_MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=150,
        )
        return completion.choices[0].message.content or ""


class ProsConsDiscusserUseCase:
    """Answer a question with markdown pros and cons lists."""

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def execute(self, prompt: str) -> dict[str, str]:
        completion = await self.client.chat.completions.create(
            model=TEXT_MODEL,
            messages=[
                {"role": "system", "content": PROS_CONS_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=600,
        )
        _log_usage("pros-cons", completion.usage)

        message = completion.choices[0].message
        return {"role": message.role, "content": message.content or ""}


class ProsConsDiscusserStreamUseCase:
    """Streamed variant of ProsConsDiscusserUseCase yielding text deltas."""

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def execute(self, prompt: str) -> AsyncIterator[str]:
        stream = await self.client.chat.completions.create(
            model=TEXT_MODEL,
            messages=[
                {"role": "system", "content": PROS_CONS_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=600,
            stream=True,
        )

        async def deltas() -> AsyncIterator[str]:
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content

        return deltas()


class TranslateUseCase:
    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def execute(self, prompt: str, lang: str) -> str:
        completion = await self.client.chat.completions.create(
            model=TEXT_MODEL,
            messages=[
                {
                    "role": "system",
                    "content": f"Translate the following text into {lang}: {prompt}",
                },
            ],
        )
        _log_usage("translate", completion.usage)
        return completion.choices[0].message.content or ""
