"""LabelResponse Pydantic model with one entry per labeled element."""

from pydantic import BaseModel


class ElementLabel(BaseModel):
    """Resolved label for a single element of the submitted page."""

    index: int
    tag: str
    xpath: str
    label: str
    confidence: float
    detector: str
    success: bool
    candidates: int


class LabelResponse(BaseModel):
    """Response body for the POST /labels endpoint."""

    labels: list[ElementLabel]
