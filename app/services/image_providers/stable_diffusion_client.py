import base64
import time

import httpx

from app.config import settings
from app.services.image_interface import ImageProviderInterface, ProviderImage
from app.utils.exceptions import ImageGenerationError
from app.utils.logger import setup_logger

logger = setup_logger("stable_diffusion_client")

TXT2IMG_PATH = "/sdapi/v1/txt2img"


def parse_size(size: str) -> tuple[int, int]:
    """Split ``"768x768"`` into ``(768, 768)``."""
    try:
        width, height = size.lower().split("x", 1)
        return int(width), int(height)
    except ValueError as e:
        raise ValueError(f"Invalid image size: {size!r}") from e


class StableDiffusionClient(ImageProviderInterface):
    """
    Image provider for a Stable Diffusion WebUI instance (txt2img API).
    """

    provider_name = "stable_diffusion"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        request_timeout: float = settings.stable_diffusion_timeout,
    ):
        if not base_url:
            raise ValueError("Stable Diffusion base URL is required.")

        self.base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if api_key:
            token = base64.b64encode(api_key.encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url, headers=headers, timeout=request_timeout
        )
        logger.info(f"Stable Diffusion client initialized for {self.base_url}")

    @staticmethod
    def build_payload(prompt: str, size: str) -> dict:
        width, height = parse_size(size)
        return {
            "prompt": prompt,
            "negative_prompt": "blurry, low quality",
            "steps": 24,
            "cfg_scale": 7,
            "width": width,
            "height": height,
            "sampler_index": "DPM++ 2M Karras",
            "seed": -1,
            "batch_size": 1,
            "n_iter": 1,
            "send_images": True,
            "save_images": False,
        }

    async def generate_image(self, prompt: str, model: str, size: str) -> ProviderImage:
        start_time = time.perf_counter()
        try:
            response = await self._client.post(
                TXT2IMG_PATH, json=self.build_payload(prompt, size)
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Stable Diffusion returned {e.response.status_code}: {e.response.text[:200]}"
            )
            raise ImageGenerationError("Image generation failed.") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Stable Diffusion request failed: {e}", exc_info=True)
            raise ImageGenerationError("Image generation failed.") from e

        images = data.get("images") if isinstance(data, dict) else None
        if not images:
            logger.error("Stable Diffusion response contained no images")
            raise ImageGenerationError("Image generation failed.")

        logger.info(
            f"Stable Diffusion txt2img completed in {time.perf_counter() - start_time:.2f}s"
        )
        return ProviderImage(b64_data=images[0], model=model, size=size)

    async def close(self):
        await self._client.aclose()
