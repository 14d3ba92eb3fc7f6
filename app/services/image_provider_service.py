"""
Image Provider Manager - Centralized management of image-generation providers.

Keeps one initialised client per provider (OpenAI, Stable Diffusion), built
lazily from settings, and routes a requested model name to its provider.
"""

from typing import Any

from app.config import settings
from app.services.image_interface import ImageProviderInterface
from app.services.image_providers.openai_client import OpenAIImageClient
from app.services.image_providers.stable_diffusion_client import StableDiffusionClient
from app.utils.logger import setup_logger

logger = setup_logger("image_provider_service")

OPENAI = "openai"
STABLE_DIFFUSION = "stable_diffusion"

# Client instances cache
_initialized_clients: dict[str, ImageProviderInterface] = {}

_client_constructors: dict[str, type[ImageProviderInterface]] = {
    OPENAI: OpenAIImageClient,
    STABLE_DIFFUSION: StableDiffusionClient,
}

_STABLE_DIFFUSION_PREFIXES = ("stable-diffusion", "sd-", "sdxl")


def resolve_provider_for_model(model: str) -> str:
    """Map a model identifier onto the provider that serves it."""
    if model.lower().startswith(_STABLE_DIFFUSION_PREFIXES):
        return STABLE_DIFFUSION
    return OPENAI


def image_size_for_provider(provider_name: str) -> str:
    if provider_name == STABLE_DIFFUSION:
        return settings.stable_diffusion_image_size
    return settings.default_image_size


def _get_client_config(provider_name: str) -> dict[str, Any]:
    if provider_name == OPENAI:
        return {
            "api_key": settings.openai_api_key,
            "base_url": settings.openai_base_url,
            "default_model": settings.default_image_model,
        }
    if provider_name == STABLE_DIFFUSION:
        return {
            "base_url": settings.stable_diffusion_api_url,
            "api_key": settings.stable_diffusion_api_key,
        }
    logger.warning(f"Unknown provider name: {provider_name}")
    return {}


def _is_configured(provider_name: str, config: dict[str, Any]) -> bool:
    if provider_name == OPENAI:
        return bool(config.get("api_key"))
    if provider_name == STABLE_DIFFUSION:
        return bool(config.get("base_url"))
    return False


def _build_client(provider_name: str) -> ImageProviderInterface | None:
    config = _get_client_config(provider_name)
    if not _is_configured(provider_name, config):
        logger.warning(f"{provider_name} is not configured. Skipping initialization.")
        return None

    constructor_args = {k: v for k, v in config.items() if v is not None}
    try:
        return _client_constructors[provider_name](**constructor_args)
    except ValueError as ve:
        logger.error(f"Configuration error initializing {provider_name} client: {ve}")
    except Exception as e:
        logger.error(f"Failed to initialize {provider_name} client: {e}", exc_info=True)
    return None


def initialize_all_image_clients():
    """Initialize all image clients that have configuration available."""
    logger.info("Initializing image provider clients...")
    successful, skipped = [], []

    for provider_name in _client_constructors:
        if provider_name in _initialized_clients:
            continue
        client = _build_client(provider_name)
        if client is None:
            skipped.append(provider_name)
            continue
        _initialized_clients[provider_name] = client
        successful.append(provider_name)

    logger.info(
        f"Image client initialization complete. Successful: {successful}, Skipped or failed: {skipped}"
    )


async def close_all_image_clients():
    """Close all initialized image clients."""
    if not _initialized_clients:
        logger.info("No image clients to close.")
        return

    for provider_name, client_instance in _initialized_clients.items():
        try:
            await client_instance.close()
            logger.info(f"{provider_name} client closed successfully.")
        except Exception as e:
            logger.error(f"Error closing {provider_name} client: {e}", exc_info=True)

    _initialized_clients.clear()


def get_image_client(provider_name: str = OPENAI) -> ImageProviderInterface | None:
    """
    Get an initialized image client for the specified provider.

    Returns None if the provider is unknown or not configured.
    """
    provider_name = provider_name.lower()
    client = _initialized_clients.get(provider_name)
    if client:
        return client

    if provider_name not in _client_constructors:
        logger.error(
            f"Unknown provider name: {provider_name}. Available providers: {list(_client_constructors)}"
        )
        return None

    logger.info(f"{provider_name} client not pre-initialized. Initializing on demand.")
    client = _build_client(provider_name)
    if client is not None:
        _initialized_clients[provider_name] = client
    return client
