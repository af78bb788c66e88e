from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
import random
import logging
from backend.request_models import *
from backend.errors import *
from backend.image_search import get_images, get_provider
from backend.image_acquisition import ImageAcquisition
from backend.image_organization import plan, summarize_board
from backend.image_supply import (
    get_screen_dimensions,
    estimate_required_count,
    required_count_for_ratio,
    required_count_for_board,
)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    InvalidInputError: 400,
    ProviderAuthError: 502,
    ProviderRateLimitedError: 429,
    ProviderHttpError: 502,
    ProviderNetworkError: 503,
}

@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 500)
    logger.warning("%s %s failed: %s (%s)", request.method, request.url.path, exc, exc.code)
    return JSONResponse(status_code=status, content=exc.to_dict())

def _rng(seed: int | None) -> random.Random:
    return random.Random(seed) if seed is not None else random.Random()

def _board(images, width, height, mode, required_count, seed) -> BoardResponse:
    placements = plan(images, width, height, mode, rng=_rng(seed))
    return BoardResponse(
        width=width,
        height=height,
        mode=mode,
        required_count=required_count,
        sources=images,
        placements=placements,
        summary=summarize_board(placements, width, height),
    )

@app.get("/api/health")
def health_check() -> StatusResponse:
    return StatusResponse(status_code=200)

@app.post("/api/dimensions")
def dimensions(input: DimensionsRequest) -> DimensionsResponse:
    dims = get_screen_dimensions(input.ratio, input.max_width)
    return DimensionsResponse(width=dims.width, height=dims.height)

@app.post("/api/required_count")
def required_count(input: RequiredCountRequest) -> RequiredCountResponse:
    dims = get_screen_dimensions(input.ratio, input.max_width)
    if input.mode is None:
        count = required_count_for_board(input.ratio, input.max_width)
    else:
        count = required_count_for_ratio(input.ratio, input.mode, input.max_width, input.current_count)
    return RequiredCountResponse(width=dims.width, height=dims.height, required_count=count)

@app.post("/api/get_images")
def get_preview_images(keyword: ImageRequest, provider=Depends(get_provider)) -> ImagesResponse:
    if not keyword.keyword.strip():
        raise InvalidInputError("Please enter a keyword")
    images = get_images(keyword.keyword.strip(), provider=provider)
    return ImagesResponse(images=images, keyword=keyword.keyword)

@app.post("/api/acquire")
def acquire_images(input: AcquireRequest, provider=Depends(get_provider)) -> AcquireResponse:
    images = ImageAcquisition(provider=provider).acquire(input.main_keyword, input.sub_keywords, input.required_count)
    return AcquireResponse(images=images)

@app.post("/api/generate_board")
def generate_board(input: BoardRequest, provider=Depends(get_provider)) -> BoardResponse:
    dims = get_screen_dimensions(input.ratio, input.max_width)
    # sized for either mode so a regenerate can switch modes without refetching
    required = required_count_for_board(input.ratio, input.max_width)
    images = ImageAcquisition(provider=provider, rng=_rng(input.seed)).acquire(
        input.main_keyword, input.sub_keywords, required)
    if not images:
        logger.info("No images found for %r", input.main_keyword)
    return _board(images, dims.width, dims.height, input.mode, required, input.seed)

@app.post("/api/regenerate")
def regenerate(input: RegenerateRequest) -> BoardResponse:
    required = estimate_required_count(input.width, input.height, input.mode, len(input.images))
    return _board(input.images, input.width, input.height, input.mode, required, input.seed)
