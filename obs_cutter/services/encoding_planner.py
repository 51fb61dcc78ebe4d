"""
Maps quality preset names to concrete encoder settings.

The mapping is pure: no filesystem, no subprocess, no defaults. An unknown
name is a configuration error and is never silently replaced by another
preset.
"""
from enum import Enum
from typing import Tuple

from ..config.video import QUALITY_PRESETS
from ..domain.exceptions import UnknownPresetException
from ..domain.jobs import EncodeParameters


class QualityPreset(Enum):
    """Quality presets, from largest/best to smallest."""

    LOSSLESS = "lossless"
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def parameters(self) -> EncodeParameters:
        encoder, crf, speed = QUALITY_PRESETS[self.value]
        return EncodeParameters(encoder=encoder, crf=crf, preset=speed)


def preset_names() -> Tuple[str, ...]:
    """The recognised preset names, in declaration order."""
    return tuple(preset.value for preset in QualityPreset)


def resolve(preset_name: str) -> EncodeParameters:
    """
    Resolves a preset name (case-sensitive) to its encoder parameters.

    Raises:
        UnknownPresetException: If `preset_name` is not "lossless", "high" or "medium".
    """
    try:
        preset = QualityPreset(preset_name)
    except ValueError:
        raise UnknownPresetException(preset_name, preset_names()) from None
    return preset.parameters
