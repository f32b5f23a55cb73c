"""FastAPI application for the form labeler.

Exports ``app`` for use with ``uvicorn main:app``.
"""

import json
import logging
import traceback
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Load .env from the service directory so LABELER_* overrides are set
load_dotenv(Path(__file__).resolve().parent / ".env")

from labels.defaults import get_default_resolver
from models.request import LabelRequest
from models.response import ElementLabel, LabelResponse
from parsing.candidates import find_form_controls
from parsing.context import build_context
from parsing.pruning import prune_html
from parsing.selectors import element_xpath


# ---------------------------------------------------------------------------
# Structured JSON logging
# ---------------------------------------------------------------------------

class StructuredFormatter(logging.Formatter):
    """JSON-lines formatter for structured log output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Include optional extra fields when present
        for key in ("url", "detector", "strategy", "element_count"):
            val = getattr(record, key, None)
            if val is not None:
                log_data[key] = val
        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


_handler = logging.StreamHandler()
_handler.setFormatter(StructuredFormatter())

logger = logging.getLogger("labeler")
logger.addHandler(_handler)
logger.setLevel(logging.INFO)
# Prevent propagation to root logger to avoid duplicate output
logger.propagate = False


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="Form Labeler")


# ---------------------------------------------------------------------------
# Global exception handler -- the service must never crash
# ---------------------------------------------------------------------------

SAFE_EMPTY_RESPONSE = {"labels": []}


@app.exception_handler(Exception)
async def catch_all_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions and return an empty label list."""
    logger.error(
        "Unhandled exception: %s: %s\n%s",
        type(exc).__name__,
        exc,
        traceback.format_exc(),
    )
    return JSONResponse(status_code=200, content=SAFE_EMPTY_RESPONSE)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
async def health() -> dict:
    """Health check."""
    return {"status": "healthy"}


@app.post("/labels", response_model=LabelResponse)
async def labels(request: LabelRequest) -> LabelResponse:
    """Label the form controls of a page snapshot.

    Parses and prunes the HTML, picks the elements to label (the request
    selector, or every visible enabled form control) and resolves each
    one through the default resolver.
    """
    soup = prune_html(request.html)
    elements = find_form_controls(soup, request.selector)
    logger.info(
        "labels request",
        extra={"url": request.url, "element_count": len(elements)},
    )

    overrides = request.model_dump(
        include={"strategy", "min_confidence"}, exclude_none=True
    )
    resolver = get_default_resolver()

    entries: list[ElementLabel] = []
    for index, element in enumerate(elements):
        resolved = resolver.resolve(
            build_context(element, page_url=request.url), overrides
        )
        entries.append(
            ElementLabel(
                index=index,
                tag=element.name,
                xpath=element_xpath(element),
                label=resolved.label,
                confidence=round(resolved.confidence, 4),
                detector=resolved.detector_name,
                success=resolved.success,
                candidates=len(resolved.candidates),
            )
        )

    logger.info(
        "labels response",
        extra={
            "element_count": len(entries),
            "strategy": overrides.get("strategy", resolver.strategy).value,
        },
    )
    return LabelResponse(labels=entries)
