"""Shared fixtures for /gpt tests."""

import base64
import io
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from PIL import Image

from src.llmproxy.gpt.storage import GeneratedFileStore


def make_png(color=(255, 0, 0), mode="RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


def chat_completion(content, role="assistant", usage=None):
    message = MagicMock()
    message.content = content
    message.role = role
    completion = MagicMock()
    completion.choices = [MagicMock(message=message)]
    completion.usage = usage
    return completion


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_base64(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode()


@pytest.fixture
def mock_openai():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=chat_completion("Hello"))
    client.audio.speech.create = AsyncMock()
    client.audio.transcriptions.create = AsyncMock()
    client.images.generate = AsyncMock()
    client.images.edit = AsyncMock()
    client.images.create_variation = AsyncMock()
    client.responses.create = AsyncMock()
    return client


@pytest.fixture
def completion_factory():
    return chat_completion


@pytest.fixture
def image_session(png_bytes):
    """Mocked aiohttp session serving a PNG for every URL but /missing.png."""
    session = MagicMock()
    session.requested = []

    def get(url, **kwargs):
        session.requested.append(url)
        response = MagicMock()
        response.read = AsyncMock(return_value=png_bytes)
        if url.endswith("/missing.png"):
            response.raise_for_status.side_effect = aiohttp.ClientResponseError(
                request_info=MagicMock(), history=(), status=404, message="Not Found"
            )
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=None)
        return response

    session.get = MagicMock(side_effect=get)
    session.close = AsyncMock()
    return session


@pytest.fixture
def file_store(tmp_path, image_session):
    store = GeneratedFileStore(tmp_path / "generated", session=image_session)
    store.ensure_dirs()
    return store
