import time

from fastapi import status
from openai import APIStatusError, AsyncOpenAI, OpenAIError, PermissionDeniedError

from app.config import settings
from app.services.image_interface import ImageProviderInterface, ProviderImage
from app.utils.exceptions import ImageGenerationError
from app.utils.logger import setup_logger

logger = setup_logger("openai_image_client")


class OpenAIImageClient(ImageProviderInterface):
    """
    Image provider backed by the OpenAI Images API (dall-e-2, dall-e-3, gpt-image-1).
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        default_model: str = settings.default_image_model,
    ):
        if not api_key:
            logger.error("OpenAI API key is required but not provided")
            raise ValueError("OpenAI API key is required.")

        self.api_key = api_key
        self.base_url = base_url
        self.default_model = default_model

        client_args = {"api_key": self.api_key}
        if self.base_url:
            client_args["base_url"] = self.base_url

        self._client = AsyncOpenAI(**client_args)
        logger.info(
            f"OpenAI image client initialized. Base URL: {self.base_url or 'Default'}, Default Model: {self.default_model}"
        )

    async def generate_image(self, prompt: str, model: str, size: str) -> ProviderImage:
        effective_model = model or self.default_model
        logger.debug(
            f"Requesting image from OpenAI with model: {effective_model}, size: {size}, prompt length: {len(prompt)}"
        )

        start_time = time.perf_counter()
        try:
            response = await self._client.images.generate(
                model=effective_model,
                prompt=prompt,
                size=size,
                n=1,
            )
        except PermissionDeniedError as e:
            logger.warning(f"OpenAI refused image generation for {effective_model}: {e}")
            raise ImageGenerationError(
                e.message, status_code=status.HTTP_403_FORBIDDEN
            ) from e
        except APIStatusError as e:
            logger.error(
                f"OpenAI API error {e.status_code} for model {effective_model}: {e}",
                exc_info=True,
            )
            # Unverified organisations get this for gpt-image-1
            if "must be verified" in str(e.message):
                raise ImageGenerationError(
                    e.message, status_code=status.HTTP_403_FORBIDDEN
                ) from e
            raise ImageGenerationError(e.message) from e
        except OpenAIError as e:
            logger.error(
                f"OpenAI client error for model {effective_model}: {type(e).__name__}: {e}",
                exc_info=True,
            )
            raise ImageGenerationError("Image generation failed.") from e

        duration = time.perf_counter() - start_time
        datum = response.data[0] if response.data else None
        if datum is None or not (datum.url or datum.b64_json):
            logger.error(f"OpenAI returned no image data for model {effective_model}")
            raise ImageGenerationError("Image generation failed.")

        logger.info(
            f"OpenAI generate_image completed for model {effective_model} in {duration:.2f}s"
        )
        return ProviderImage(
            url=datum.url,
            b64_data=datum.b64_json,
            model=effective_model,
            size=size,
        )

    async def close(self):
        await self._client.close()
