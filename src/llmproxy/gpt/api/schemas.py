"""Pydantic schemas for the /gpt endpoints (camelCase on the wire)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ========== Requests ==========


class PromptRequest(CamelModel):
    prompt: str = Field(..., min_length=1)


class TranslateRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    lang: str = Field(..., min_length=1)


class TextToAudioRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    voice: Optional[str] = None


class ImageGenerationRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    original_image: Optional[str] = None
    mask_image: Optional[str] = None


class ImageVariationRequest(CamelModel):
    base_image: str = Field(..., min_length=1)


class JavascriptDeveloperRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    conversation_id: str = Field(..., min_length=1)


class ImproveResumeRequest(CamelModel):
    cv: str = Field(..., min_length=1, max_length=15000)
    form: Optional[str] = Field(None, max_length=10000)
    goal: str = Field(..., min_length=1, max_length=500)


# ========== Responses ==========


class MessageResponse(CamelModel):
    message: str


class RoleContentResponse(CamelModel):
    role: str
    content: str


class OrthographyResponse(CamelModel):
    user_score: float
    errors: list[str]
    message: str


class ImageResponse(CamelModel):
    url: str
    openai_url: str = Field(..., alias="openAIUrl")
    revised_prompt: Optional[str] = None


class ImproveResumeResponse(CamelModel):
    improved_cv: str
    tokens_used: int
    model: str
