import math
import random
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from backend.organizer_helpers import *
from backend.constants import *
from backend.image_search import SourceImage
from backend.image_supply import LayoutMode

logger = logging.getLogger(__name__)

DUPLICATE_MARKER = "-dup-"

@dataclass
class PlacedImage:
    identity: str
    url: str
    x: float
    y: float
    width: float
    height: float
    scale: float = 1.0
    rotation: float = 0.0
    original_width: int = 0
    original_height: int = 0

@dataclass
class BoardSummary:
    placed_count: int
    duplicate_count: int
    area_coverage: float     # summed placement area / canvas area, overlaps counted twice
    visible_coverage: float  # share of the canvas under at least one placement

def _duplicate_identity(image: SourceImage, index: int) -> str:
    return f"{image.identity}{DUPLICATE_MARKER}{index}"

def _square_placement(image: SourceImage, identity: str, x: float, y: float, side: float) -> PlacedImage:
    return PlacedImage(
        identity=identity, url=image.display_url,
        x=x, y=y, width=side, height=side,
        scale=1.0, rotation=0.0,
        original_width=image.width, original_height=image.height,
    )

def _stacked_board(images: Sequence[SourceImage], canvas_width: float, canvas_height: float) -> List[PlacedImage]:
    slots = stacked_layout(len(images), canvas_width, canvas_height)
    return [_square_placement(img, img.identity, x, y, side) for img, (x, y, side) in zip(images, slots)]

def plan_grid(images: Sequence[SourceImage], canvas_width: float, canvas_height: float) -> List[PlacedImage]:
    """
    Symmetric square-cell grid sized to reach the coverage target.

    When the first grid for the unique images falls short, the whole grid is solved again
    for an inflated count; cells past the unique set reuse images under a `-dup-<index>`
    identity. Never raises: unsolvable canvases get a single stacked column instead.
    """
    if not images:
        return []
    CW, CH = sanitize_side(canvas_width), sanitize_side(canvas_height)
    target = CW*CH*COVERAGE_FACTOR
    unique = len(images)

    count = unique
    sol = solve_grid(count, CW, CH)
    if grid_is_sound(sol):
        cell_area = sol.cell_size*sol.cell_size
        covered = count*cell_area
        if covered < target:
            count = unique + math.ceil((target-covered)/cell_area)
            sol = solve_grid(count, CW, CH)
            logger.debug("Grid top-up: %d unique images -> %d cells", unique, count)

    if not grid_is_sound(sol):
        logger.debug("No grid fits %sx%s for %d cells, stacking instead", CW, CH, count)
        return _stacked_board(images, CW, CH)

    offset = grid_offsets(sol, CW, CH)
    placements = []
    for i in range(count):
        if i < unique:
            image = images[i]; identity = image.identity
        else:
            image = images[i % unique]; identity = _duplicate_identity(image, i)
        x, y = grid_cell_position(i, sol, offset)
        placements.append(_square_placement(image, identity, x, y, sol.cell_size))
    logger.debug("Grid %dx%d, cell %.1f, %d placements", sol.cols, sol.rows, sol.cell_size, len(placements))
    return placements

def _free_placement(image: SourceImage, identity: str, canvas_width: float, canvas_height: float,
                    base_size: float, rng: random.Random) -> PlacedImage:
    x, y, w, h, scale, rotation = draw_free_geometry(image.width, image.height, canvas_width, canvas_height, base_size, rng)
    return PlacedImage(
        identity=identity, url=image.display_url,
        x=x, y=y, width=w, height=h,
        scale=scale, rotation=rotation,
        original_width=image.width, original_height=image.height,
    )

def plan_free(images: Sequence[SourceImage], canvas_width: float, canvas_height: float,
              rng: Optional[random.Random] = None) -> List[PlacedImage]:
    """
    Organic overlapping layout: every unique image once, randomly scaled, rotated and
    positioned, then round-robin duplicates until the coverage target is met.

    Duplicates are capped at min(2 * unique, 50), so very small image sets can end
    below the target rather than repeating the same photo dozens of times.
    """
    if not images:
        return []
    rng = rng or random.Random()
    CW, CH = sanitize_side(canvas_width), sanitize_side(canvas_height)
    target = CW*CH*COVERAGE_FACTOR
    base_size = min(CW, CH)*FREE_BASE_FRACTION

    placements = [_free_placement(img, img.identity, CW, CH, base_size, rng) for img in images]
    covered = total_area(placements)

    unique = len(images)
    budget = min(unique*FREE_DUPLICATE_MULTIPLE, FREE_TOP_UP_CAP)
    added = 0
    while covered < target and added < budget:
        image = images[added % unique]
        p = _free_placement(image, _duplicate_identity(image, len(placements)), CW, CH, base_size, rng)
        placements.append(p)
        covered += p.width*p.height
        added += 1

    if covered < target:
        logger.debug("Free layout stopped at %.0f%% coverage after %d duplicates", 100*covered/(CW*CH), added)
    return placements

def plan(images: Sequence[SourceImage], canvas_width: float, canvas_height: float,
         mode: LayoutMode = LayoutMode.FREE, rng: Optional[random.Random] = None) -> List[PlacedImage]:
    try:
        mode = LayoutMode(mode)
    except ValueError:
        logger.warning("Unknown layout mode %r, using free", mode)
        mode = LayoutMode.FREE
    if mode is LayoutMode.GRID:
        return plan_grid(images, canvas_width, canvas_height)
    return plan_free(images, canvas_width, canvas_height, rng=rng)

def summarize_board(placements: Sequence[PlacedImage], canvas_width: float, canvas_height: float) -> BoardSummary:
    CW, CH = sanitize_side(canvas_width), sanitize_side(canvas_height)
    rects = [(p.x, p.y, p.width, p.height) for p in placements]
    return BoardSummary(
        placed_count=len(placements),
        duplicate_count=sum(1 for p in placements if DUPLICATE_MARKER in p.identity),
        area_coverage=total_area(placements)/(CW*CH),
        visible_coverage=visible_coverage(rects, CW, CH) if placements else 0.0,
    )
