"""OpenAI pass-through use cases."""
from .audio import AudioToTextUseCase, TextToAudioUseCase
from .developer_chat import JavascriptDeveloperUseCase, create_developer_chat_store
from .images import ImageGenerationUseCase, ImageResult, ImageVariationUseCase
from .improve_resume import ImproveResumeResult, ImproveResumeUseCase
from .text_prompts import (
    BasicPromptUseCase,
    OrthographyResult,
    OrthographyUseCase,
    ProsConsDiscusserStreamUseCase,
    ProsConsDiscusserUseCase,
    TranslateUseCase,
)

__all__ = [
    "AudioToTextUseCase",
    "BasicPromptUseCase",
    "ImageGenerationUseCase",
    "ImageResult",
    "ImageVariationUseCase",
    "ImproveResumeResult",
    "ImproveResumeUseCase",
    "JavascriptDeveloperUseCase",
    "OrthographyResult",
    "OrthographyUseCase",
    "ProsConsDiscusserStreamUseCase",
    "ProsConsDiscusserUseCase",
    "TextToAudioUseCase",
    "TranslateUseCase",
    "create_developer_chat_store",
]
