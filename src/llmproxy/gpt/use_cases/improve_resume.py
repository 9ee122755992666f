"""Resume rewriting use case (Responses API)."""

import logging
from dataclasses import dataclass
from typing import Optional

from openai import AsyncOpenAI

from ...api.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

RESUME_MODEL = "gpt-4o-mini"

RESUME_SYSTEM_PROMPT = """You are an expert in recruiting and resume writing.
You specialize in optimizing resumes to maximize the chances of landing interviews.
You know how ATS systems work and what recruiters look for.
**CONSTRAINT: The final answer must be formatted using Markdown.**"""

RESUME_USER_PROMPT = """TASK:
Completely rewrite this resume to make it professional, clear and optimized for the following goal:

GOAL: "{goal}"

INSTRUCTIONS:
- Integrate valuable information from the additional form
- Use keywords relevant to the goal (ATS-friendly)
- Highlight measurable achievements
- Prioritize relevant experience
- Use action verbs
- Keep a clear format
- Remove redundancy

OUTPUT FORMAT:
Return ONLY the final resume with these sections:
1. Contact Details
2. Professional Summary
3. Professional Experience
4. Education
5. Technical Skills
6. Languages

---
ORIGINAL RESUME:
{cv}

---
ADDITIONAL INFORMATION:
{form}

---
OPTIMIZED RESUME:
"""


@dataclass
class ImproveResumeResult:
    improved_cv: str
    tokens_used: int
    model: str


class ImproveResumeUseCase:
    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def execute(self, cv: str, goal: str, form: Optional[str] = None) -> ImproveResumeResult:
        if not cv.strip() or not goal.strip():
            raise ValueError("The resume and the goal are required")

        response = await self.client.responses.create(
            model=RESUME_MODEL,
            input=[
                {"role": "system", "content": RESUME_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": RESUME_USER_PROMPT.format(
                        goal=goal,
                        cv=cv,
                        form=form or "No additional information was provided",
                    ),
                },
            ],
            max_output_tokens=3000,
            temperature=0.3,
        )

        text = (response.output_text or "").strip()
        if not text:
            raise UpstreamServiceError("The model returned no content", service="openai")

        tokens = response.usage.total_tokens if response.usage else 0
        logger.info(f"Improved resume with {response.model} using {tokens} tokens")
        return ImproveResumeResult(improved_cv=text, tokens_used=tokens, model=response.model)
