"""LabelRequest Pydantic model with strict validation (extra=forbid)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.resolution import ResolutionStrategy


class LabelRequest(BaseModel):
    """Incoming request body for the POST /labels endpoint.

    ``selector`` is a CSS selector narrowing which elements get labeled;
    without it every visible, enabled form control on the page is labeled.
    Extra fields are rejected with a 422 response.
    """

    model_config = ConfigDict(extra="forbid")

    html: str
    url: str = ""
    selector: Optional[str] = None
    strategy: Optional[ResolutionStrategy] = None
    min_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
