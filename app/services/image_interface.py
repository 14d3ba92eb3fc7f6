"""
Abstract interface for external image-generation providers.

Every provider returns a ``ProviderImage`` carrying either a remote URL or an
inline base64 payload; the storage layer knows how to persist both forms.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, model_validator


class ProviderImage(BaseModel):
    """One generated image as returned by a provider."""

    url: str | None = None
    b64_data: str | None = None
    model: str
    size: str

    @model_validator(mode="after")
    def check_payload(self) -> "ProviderImage":
        if not self.url and not self.b64_data:
            raise ValueError("ProviderImage needs either url or b64_data")
        return self

    @property
    def source(self) -> str:
        """The value handed to the storage layer (URL or base64 data)."""
        return self.url or self.b64_data

    def as_data_url(self) -> str:
        """A value usable directly as an ``<img src>``."""
        if self.url:
            return self.url
        return f"data:image/png;base64,{self.b64_data}"


class ImageProviderInterface(ABC):
    """
    Abstract Base Class for image-generation providers.
    """

    provider_name: str = "unknown"

    @abstractmethod
    async def generate_image(self, prompt: str, model: str, size: str) -> ProviderImage:
        """
        Generate a single image.

        Raises ``ImageGenerationError`` when the provider fails or refuses.
        """

    async def close(self):
        """
        Optional method to close any underlying connections or clients.
        """
        return
