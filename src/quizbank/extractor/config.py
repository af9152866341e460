"""
Module: extractor.config

Purpose:
    Configuration dataclasses and enums for the extraction pipeline.
    Provides immutable settings for line grouping, page rendering and
    the generative model request.

Key Classes:
    - ExtractionConfig: Main configuration for extraction
    - ExtractionMode: Heuristic vs model-assisted path
    - ContinuationPolicy: What to do with text lines after options
    - CollisionPolicy: What to do with duplicate model-generated ids

Dependencies:
    - dataclasses: For frozen dataclass support

Used By:
    - extractor.pipeline: Uses ExtractionConfig for pipeline settings
    - extractor.segmenter: Uses ContinuationPolicy
    - extractor.model_extractor: Uses CollisionPolicy and render settings
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ExtractionMode(str, Enum):
    """Which extraction path a run uses."""
    HEURISTIC = "heuristic"
    AI = "ai"


class ContinuationPolicy(str, Enum):
    """
    Handling of non-option lines that follow a question's options.

    DROP keeps question and option text unchanged (lines are discarded).
    APPEND_TO_LAST_OPTION joins the line onto the most recent option,
    which suits options that wrap onto a second line.
    """
    DROP = "drop"
    APPEND_TO_LAST_OPTION = "append"


class CollisionPolicy(str, Enum):
    """
    Handling of duplicate question ids across model-extracted pages.

    OVERWRITE keeps the later record (last page wins).
    KEEP_FIRST keeps the earlier record and discards the later one.
    SUFFIX stores the later record under "<id>_2", "<id>_3", ...
    """
    OVERWRITE = "overwrite"
    KEEP_FIRST = "keep-first"
    SUFFIX = "suffix"


# Named Gemini variants offered for the model-assisted path
AVAILABLE_MODELS: Tuple[str, ...] = (
    "gemini-2.0-flash",
    "gemini-2.0-flash-lite",
    "gemini-1.5-flash",
    "gemini-1.5-pro",
    "gemini-2.5-flash",
    "gemini-2.5-pro",
)
DEFAULT_MODEL = "gemini-2.0-flash"

DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Configuration for question extraction pipeline.

    Attributes:
        line_threshold: Max baseline difference (PDF points) for two
            fragments to count as the same visual line (default 5.0)
        render_scale: Upscale factor used when rendering pages for the
            model (default 2.0)
        max_image_side: Longest image side in pixels sent to the model;
            larger renders are downsampled (default 3000)
        continuation_policy: Lines after options (default DROP)
        collision_policy: Duplicate model ids (default OVERWRITE)
        endpoint: Base URL of the generative model REST API
        request_timeout: Seconds to wait for a model reply; None waits
            indefinitely (default None)
    """
    line_threshold: float = 5.0
    render_scale: float = 2.0
    max_image_side: int = 3000
    continuation_policy: ContinuationPolicy = ContinuationPolicy.DROP
    collision_policy: CollisionPolicy = CollisionPolicy.OVERWRITE
    endpoint: str = DEFAULT_ENDPOINT
    request_timeout: Optional[float] = None
