"""FastAPI router for the OpenAI pass-through endpoints."""

import contextlib
import logging
from typing import Optional

import openai
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse, StreamingResponse
from openai import AsyncOpenAI

from ...agent.memory import InMemoryConversationStore
from ...api.error_sanitizer import sanitize_error_message
from ...api.exceptions import LLMProxyError
from ..storage import AudioFileValidator, GeneratedFileStore
from ..use_cases import (
    AudioToTextUseCase,
    BasicPromptUseCase,
    ImageGenerationUseCase,
    ImageResult,
    ImageVariationUseCase,
    ImproveResumeUseCase,
    JavascriptDeveloperUseCase,
    OrthographyUseCase,
    ProsConsDiscusserStreamUseCase,
    ProsConsDiscusserUseCase,
    TextToAudioUseCase,
    TranslateUseCase,
)
from .dependencies import (
    get_audio_validator,
    get_developer_chat_store,
    get_file_store,
    get_openai_client,
    get_server_url,
)
from .schemas import (
    ImageGenerationRequest,
    ImageResponse,
    ImageVariationRequest,
    ImproveResumeRequest,
    ImproveResumeResponse,
    JavascriptDeveloperRequest,
    MessageResponse,
    OrthographyResponse,
    PromptRequest,
    RoleContentResponse,
    TextToAudioRequest,
    TranslateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gpt", tags=["gpt"])


@contextlib.contextmanager
def _map_errors(action: str):
    """Translate use-case failures into sanitized HTTP errors."""
    try:
        yield
    except LLMProxyError as e:
        logger.error(f"{action} failed: {e}")
        raise HTTPException(
            status_code=e.status_code,
            detail=sanitize_error_message(e.message),
        ) from e
    except openai.APIError as e:
        logger.error(f"{action} failed at OpenAI: {e}")
        raise HTTPException(
            status_code=502,
            detail=sanitize_error_message(str(e), f"{action} failed"),
        ) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=sanitize_error_message(str(e))) from e


def _image_response(result: ImageResult) -> ImageResponse:
    return ImageResponse(
        url=result.url,
        openai_url=result.openai_url,
        revised_prompt=result.revised_prompt,
    )


# ========== Text ==========


@router.post("/orthography-check", response_model=OrthographyResponse)
async def orthography_check(
    request: PromptRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
) -> OrthographyResponse:
    with _map_errors("Orthography check"):
        result = await OrthographyUseCase(client).execute(request.prompt)
    return OrthographyResponse(
        user_score=result.user_score,
        errors=result.errors,
        message=result.message,
    )


@router.post("/basic-prompt", response_model=MessageResponse)
async def basic_prompt(
    request: PromptRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
) -> MessageResponse:
    with _map_errors("Basic prompt"):
        message = await BasicPromptUseCase(client).execute(request.prompt)
    return MessageResponse(message=message)


@router.post("/pros-cons-discusser", response_model=RoleContentResponse)
async def pros_cons_discusser(
    request: PromptRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
) -> RoleContentResponse:
    with _map_errors("Pros/cons discussion"):
        result = await ProsConsDiscusserUseCase(client).execute(request.prompt)
    return RoleContentResponse(**result)


@router.post("/pros-cons-discusser-stream")
async def pros_cons_discusser_stream(
    request: PromptRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
) -> StreamingResponse:
    """Stream the pros/cons answer as plain text deltas."""
    with _map_errors("Pros/cons stream"):
        deltas = await ProsConsDiscusserStreamUseCase(client).execute(request.prompt)
    return StreamingResponse(deltas, media_type="text/plain; charset=utf-8")


@router.post("/translate", response_model=MessageResponse)
async def translate(
    request: TranslateRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
) -> MessageResponse:
    with _map_errors("Translation"):
        message = await TranslateUseCase(client).execute(request.prompt, request.lang)
    return MessageResponse(message=message)


@router.post("/javascript-developer", response_model=MessageResponse)
async def javascript_developer(
    request: JavascriptDeveloperRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
    store: InMemoryConversationStore = Depends(get_developer_chat_store),
) -> MessageResponse:
    with _map_errors("JavaScript developer chat"):
        message = await JavascriptDeveloperUseCase(client, store).execute(
            request.prompt, request.conversation_id
        )
    return MessageResponse(message=message)


@router.post("/improve-resume", response_model=ImproveResumeResponse)
async def improve_resume(
    request: ImproveResumeRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
) -> ImproveResumeResponse:
    with _map_errors("Resume improvement"):
        result = await ImproveResumeUseCase(client).execute(
            cv=request.cv, goal=request.goal, form=request.form
        )
    return ImproveResumeResponse(
        improved_cv=result.improved_cv,
        tokens_used=result.tokens_used,
        model=result.model,
    )


# ========== Audio ==========


@router.post("/text-to-audio")
async def text_to_audio(
    request: TextToAudioRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
    store: GeneratedFileStore = Depends(get_file_store),
) -> FileResponse:
    with _map_errors("Text to audio"):
        path = await TextToAudioUseCase(client, store).execute(request.prompt, request.voice)
    return FileResponse(path, media_type="audio/mp3")


@router.get("/text-to-audio/{file_id}")
async def text_to_audio_getter(
    file_id: str,
    store: GeneratedFileStore = Depends(get_file_store),
) -> FileResponse:
    with _map_errors("Audio lookup"):
        path = store.audio_path(file_id)
    return FileResponse(path, media_type="audio/mp3")


@router.post("/audio-to-text")
async def audio_to_text(
    file: UploadFile = File(...),
    prompt: Optional[str] = Form(None),
    client: AsyncOpenAI = Depends(get_openai_client),
    store: GeneratedFileStore = Depends(get_file_store),
    validator: AudioFileValidator = Depends(get_audio_validator),
) -> dict:
    content = await file.read()
    with _map_errors("Audio to text"):
        validator.validate(file.filename, file.content_type, len(content))
        path = store.save_upload(file.filename or "upload", content)
        return await AudioToTextUseCase(client).execute(path, prompt)


# ========== Images ==========


@router.post("/image-generation", response_model=ImageResponse)
async def image_generation(
    request: ImageGenerationRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
    store: GeneratedFileStore = Depends(get_file_store),
    server_url: str = Depends(get_server_url),
) -> ImageResponse:
    with _map_errors("Image generation"):
        result = await ImageGenerationUseCase(client, store, server_url).execute(
            prompt=request.prompt,
            original_image=request.original_image,
            mask_image=request.mask_image,
        )
    return _image_response(result)


@router.get("/image-generation/{file_name}")
async def image_generation_getter(
    file_name: str,
    store: GeneratedFileStore = Depends(get_file_store),
) -> FileResponse:
    with _map_errors("Image lookup"):
        path = store.image_path(file_name)
    return FileResponse(path, media_type="image/png")


@router.post("/image-variation", response_model=ImageResponse)
async def image_variation(
    request: ImageVariationRequest,
    client: AsyncOpenAI = Depends(get_openai_client),
    store: GeneratedFileStore = Depends(get_file_store),
    server_url: str = Depends(get_server_url),
) -> ImageResponse:
    with _map_errors("Image variation"):
        result = await ImageVariationUseCase(client, store, server_url).execute(
            request.base_image
        )
    return _image_response(result)
