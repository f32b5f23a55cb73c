"""Detection request and result shapes shared by every label detector."""

from __future__ import annotations

from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

LabelSourceType = Literal[
    "attribute",
    "associated",
    "ancestor",
    "sibling",
    "child",
    "text-content",
    "computed",
    "framework",
    "proximity",
    "fallback",
]


class DetectionContext(BaseModel):
    """Immutable snapshot of one detection request.

    ``element`` is an opaque handle passed through to detectors untouched.
    The markup layer decides what it is (a BeautifulSoup ``Tag`` for the
    built-in detectors).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    element: Any
    document: Any = None
    window: Any = None
    is_in_iframe: bool = False
    is_in_shadow_dom: bool = False
    shadow_root: Any = None
    event: Any = None
    page_url: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)


class DetectionOptions(BaseModel):
    """Tunables applied uniformly to every detector result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_length: int = Field(default=100, ge=4)
    min_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    normalize_whitespace: bool = True
    trim: bool = True
    check_visibility: bool = False
    transform: Optional[Callable[[str], str]] = None


class LabelSource(BaseModel):
    """Where a label came from and by which mechanism."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    element: Any = None
    type: LabelSourceType
    xpath: Optional[str] = None
    attribute: Optional[str] = None


class LabelMetadata(BaseModel):
    """Provenance details recorded alongside a detected label."""

    raw_text: str = ""
    truncated: bool = False
    original_length: int = 0
    selector: Optional[str] = None
    framework: Optional[str] = None
    extra: dict[str, Any] = Field(default_factory=dict)


class DetectionResult(BaseModel):
    """One detector's verdict for one element."""

    label: str
    confidence: float = Field(ge=0.0, le=1.0)
    strategy: str
    source: LabelSource
    metadata: LabelMetadata = Field(default_factory=LabelMetadata)
