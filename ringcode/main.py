"""RingCode microservice -- FastAPI application.

Endpoints:
    POST /encode        -- Encode text to a PNG ring code
    POST /encode/svg    -- Encode text to an SVG ring code
    POST /decode        -- Decode an uploaded image to text
    GET  /styles        -- List available color styles
    GET  /capacity      -- Bit capacity and per-level payload limits
    GET  /health        -- Health check
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .decoder import decode_image
from .encoder import capacity_table, encode
from .layout import LAYOUT
from .redundancy import RedundancyScheme
from .renderer import DEFAULT_SIZE, MIN_DECODABLE_SIZE, render_png, render_svg
from .search import SearchConfig
from .styles import DEFAULT_STYLE, STYLES

structlog.configure(
    processors=[
        structlog.dev.ConsoleRenderer(),
    ],
)

logger = structlog.get_logger(__name__)

VERSION = "0.1.0"

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

app = FastAPI(
    title="ringcode",
    description="Concentric-ring visual code encoder/decoder for short text",
    version=VERSION,
)


# --------------------------------------------------------------------------
# Request / Response models
# --------------------------------------------------------------------------


class EncodeRequest(BaseModel):
    """Request body for /encode and /encode/svg."""

    text: str = Field(
        ...,
        min_length=1,
        description="Text to encode (UTF-8, up to 149 bytes at ecc level 0)",
        examples=["hello, ring"],
    )
    ecc_level: int = Field(
        default=2,
        ge=0,
        le=3,
        description="ECC level: 0-3 (8/16/32/64 redundancy bytes)",
    )
    style: str = Field(
        default=DEFAULT_STYLE,
        description="Color style key",
        examples=["classic", "cyber", "noir"],
    )
    size: int = Field(
        default=DEFAULT_SIZE,
        ge=MIN_DECODABLE_SIZE,
        le=2048,
        description="Output image size in pixels (square); smaller codes do not decode reliably",
    )
    reed_solomon: bool = Field(
        default=False,
        description="Use Reed-Solomon redundancy (frame version 4) instead of parity",
    )


class HypothesisModel(BaseModel):
    variant: int
    inverted: bool
    bias: float
    mode: str
    anchor: int


class DecodeResponse(BaseModel):
    """Response body for /decode."""

    text: str | None = Field(
        description="Decoded text, or null if decode failed",
    )
    status: str = Field(
        description="decoded, exhausted, limit_reached or not_started",
    )
    hypothesis: HypothesisModel | None = Field(
        default=None,
        description="Parameters of the hypothesis that validated",
    )
    hypotheses_tried: int = Field(default=0)
    corrected_errors: int = Field(default=0)
    error: str | None = Field(
        default=None,
        description="Error message if decode failed",
    )


class StyleResponse(BaseModel):
    key: str
    name: str
    background: str
    foreground: str


class CapacityResponse(BaseModel):
    total_bits: int
    data_bits: int
    max_payload_bytes: dict[int, int]


class HealthResponse(BaseModel):
    """Response body for /health."""

    status: str
    service: str
    version: str


# --------------------------------------------------------------------------
# Endpoints
# --------------------------------------------------------------------------


def _encode_bits(request: EncodeRequest) -> list[int]:
    scheme = RedundancyScheme.REED_SOLOMON if request.reed_solomon else RedundancyScheme.PARITY
    return encode(request.text, request.ecc_level, scheme)


@app.post(
    "/encode",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "PNG-encoded ring code"},
        422: {"description": "Invalid input or text too long"},
    },
)
async def encode_png(request: EncodeRequest) -> Response:
    """Encode text into a ring code PNG image."""
    try:
        bits = _encode_bits(request)
        png_bytes = render_png(bits, request.size, request.style)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("encode_png_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Encoding failed")

    return Response(content=png_bytes, media_type="image/png")


@app.post(
    "/encode/svg",
    response_class=Response,
    responses={
        200: {
            "content": {"image/svg+xml": {}},
            "description": "SVG-encoded ring code",
        },
        422: {"description": "Invalid input or text too long"},
    },
)
async def encode_svg_endpoint(request: EncodeRequest) -> Response:
    """Encode text into a ring code SVG image."""
    try:
        bits = _encode_bits(request)
        svg_content = render_svg(bits, request.size, request.style)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("encode_svg_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Encoding failed")

    return Response(content=svg_content, media_type="image/svg+xml")


@app.post("/decode", response_model=DecodeResponse)
async def decode_endpoint(file: UploadFile = File(...)) -> DecodeResponse:
    """Decode an uploaded ring code image back to text."""
    if file.content_type and file.content_type not in (
        "image/png",
        "image/jpeg",
        "image/webp",
    ):
        raise HTTPException(
            status_code=422,
            detail=(f"Unsupported image type: {file.content_type}. " "Use PNG, JPEG, or WebP."),
        )

    image_bytes = await file.read()
    if len(image_bytes) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Image too large (max 10MB)")

    result = decode_image(image_bytes, config=SearchConfig(timeout=30.0))

    hypothesis = None
    if result.hypothesis is not None:
        hypothesis = HypothesisModel(**result.hypothesis.as_dict())

    return DecodeResponse(
        text=result.text,
        status=result.status.value,
        hypothesis=hypothesis,
        hypotheses_tried=result.hypotheses_tried,
        corrected_errors=result.corrected_errors,
        error=result.error,
    )


@app.get("/styles", response_model=list[StyleResponse])
async def list_styles() -> list[StyleResponse]:
    """List the available color styles."""
    return [
        StyleResponse(key=s.key, name=s.name, background=s.background, foreground=s.foreground)
        for s in STYLES
    ]


@app.get("/capacity", response_model=CapacityResponse)
async def capacity() -> CapacityResponse:
    """Report the layout capacity and per-level payload limits."""
    return CapacityResponse(
        total_bits=LAYOUT.total_capacity_bits(),
        data_bits=LAYOUT.data_capacity_bits(),
        max_payload_bytes=capacity_table(),
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint for Docker and load balancer probes."""
    return HealthResponse(
        status="healthy",
        service="ringcode",
        version=VERSION,
    )
