from typing import ClassVar

from fieldreport.config.settings import Settings
from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.pillow_adapter import PillowBackend


class ImagingBackendFactory:
    """Creates the imaging backend selected in settings."""

    ADAPTERS: ClassVar[dict[str, type[BaseImagingBackend]]] = {
        "pillow": PillowBackend,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseImagingBackend:
        name = settings.imaging_backend.lower()
        adapter_cls = cls.ADAPTERS.get(name)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown imaging backend '{name}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls(font_path=settings.font_path or None)  # type: ignore[call-arg]
