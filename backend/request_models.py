from pydantic import BaseModel, Field

from backend.image_supply import ScreenRatio, LayoutMode
from backend.image_search import SourceImage
from backend.image_organization import PlacedImage, BoardSummary
from backend.constants import DEFAULT_MAX_WIDTH, MAX_CANVAS_SIDE

class StatusResponse(BaseModel):
    status_code: int
    detail: str | None = None

class DimensionsRequest(BaseModel):
    ratio: ScreenRatio = ScreenRatio.PORTRAIT
    max_width: int = Field(DEFAULT_MAX_WIDTH, gt=0, le=MAX_CANVAS_SIDE)

class DimensionsResponse(BaseModel):
    width: int
    height: int

class RequiredCountRequest(DimensionsRequest):
    mode: LayoutMode | None = None
    current_count: int = Field(0, ge=0)

class RequiredCountResponse(DimensionsResponse):
    required_count: int

class ImageRequest(BaseModel):
    keyword: str

class ImagesResponse(BaseModel):
    images: list[str]
    keyword: str

class AcquireRequest(BaseModel):
    main_keyword: str
    sub_keywords: list[str] = []
    required_count: int = Field(gt=0)

class AcquireResponse(BaseModel):
    images: list[SourceImage]

class BoardRequest(BaseModel):
    main_keyword: str
    sub_keywords: list[str] = []
    ratio: ScreenRatio = ScreenRatio.PORTRAIT
    mode: LayoutMode = LayoutMode.FREE
    max_width: int = Field(DEFAULT_MAX_WIDTH, gt=0, le=MAX_CANVAS_SIDE)
    seed: int | None = None

class RegenerateRequest(BaseModel):
    images: list[SourceImage]
    width: int = Field(gt=0, le=MAX_CANVAS_SIDE)
    height: int = Field(gt=0, le=MAX_CANVAS_SIDE)
    mode: LayoutMode = LayoutMode.FREE
    seed: int | None = None

class BoardResponse(BaseModel):
    width: int
    height: int
    mode: LayoutMode
    required_count: int
    sources: list[SourceImage]
    placements: list[PlacedImage]
    summary: BoardSummary
