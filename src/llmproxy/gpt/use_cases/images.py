"""Image use cases: generation, masked edit and variation.

Results are downloaded from OpenAI, stored locally as PNG and served back
from ``{server_url}/gpt/image-generation/{file_name}``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from openai import AsyncOpenAI

from ...api.exceptions import UpstreamServiceError
from ..storage import GeneratedFileStore

logger = logging.getLogger(__name__)

IMAGE_SIZE = "1024x1024"


@dataclass
class ImageResult:
    url: str
    openai_url: str
    revised_prompt: Optional[str] = None


class _ImageUseCase:
    def __init__(self, client: AsyncOpenAI, store: GeneratedFileStore, server_url: str):
        self.client = client
        self.store = store
        self.server_url = server_url.rstrip("/")

    async def _publish(self, response: Any) -> ImageResult:
        if not response.data or not response.data[0].url:
            raise UpstreamServiceError("OpenAI returned no image", service="openai")

        image = response.data[0]
        path = await self.store.download_image_as_png(image.url)
        return ImageResult(
            url=f"{self.server_url}/gpt/image-generation/{path.name}",
            openai_url=image.url,
            revised_prompt=getattr(image, "revised_prompt", None),
        )


class ImageGenerationUseCase(_ImageUseCase):
    """Generate a new image, or edit one when both image and mask are given.

    Args (execute):
        prompt: Image description
        original_image: URL of the image to edit
        mask_image: Base64 PNG mask (transparent areas are repainted)
    """

    async def execute(
        self,
        prompt: str,
        original_image: Optional[str] = None,
        mask_image: Optional[str] = None,
    ) -> ImageResult:
        if not original_image or not mask_image:
            response = await self.client.images.generate(
                model="dall-e-3",
                prompt=prompt,
                n=1,
                size=IMAGE_SIZE,
                quality="standard",
                response_format="url",
            )
            return await self._publish(response)

        image_path = await self.store.download_image_as_png(original_image)
        mask_path = await self.store.save_base64_image_as_png(mask_image)

        response = await self.client.images.edit(
            model="dall-e-2",
            prompt=prompt,
            image=image_path,
            mask=mask_path,
            n=1,
            size=IMAGE_SIZE,
            response_format="url",
        )
        return await self._publish(response)


class ImageVariationUseCase(_ImageUseCase):
    async def execute(self, base_image: str) -> ImageResult:
        image_path = await self.store.download_image_as_png(base_image)

        response = await self.client.images.create_variation(
            model="dall-e-2",
            image=image_path,
            n=1,
            size=IMAGE_SIZE,
            response_format="url",
        )
        return await self._publish(response)
