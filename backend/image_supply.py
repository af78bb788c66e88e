import math
import logging
from dataclasses import dataclass
from enum import Enum

from backend.constants import *
from backend.errors import InvalidInputError

logger = logging.getLogger(__name__)


class ScreenRatio(str, Enum):
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"


class LayoutMode(str, Enum):
    FREE = "free"
    GRID = "grid"


@dataclass(frozen=True)
class CanvasDimensions:
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


def _require_positive(**values):
    for name, value in values.items():
        if not value or value <= 0 or not math.isfinite(value):
            raise InvalidInputError(f"{name} must be a positive number", details={name: value})


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _enum_value(enum_type, value, name):
    try:
        return enum_type(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        raise InvalidInputError(f"{name} must be one of {choices}", details={name: value}) from None


def get_screen_dimensions(ratio: ScreenRatio, max_width: int = DEFAULT_MAX_WIDTH) -> CanvasDimensions:
    """Width is the caller's budget; height follows the ratio, halves rounded up."""
    _require_positive(max_width=max_width)
    ratio = _enum_value(ScreenRatio, ratio, "ratio")
    if ratio is ScreenRatio.PORTRAIT:
        return CanvasDimensions(width=max_width, height=_round_half_up(max_width * 16 / 9))
    return CanvasDimensions(width=max_width, height=_round_half_up(max_width * 9 / 16))


def estimate_required_count(canvas_width: float, canvas_height: float,
                            mode: LayoutMode, current_count: int = 0) -> int:
    """
    Estimate how many images a board needs to reach the coverage target, before any
    image is fetched. The layout engine re-checks coverage on the real images, so this
    only has to be in the right neighbourhood.
    """
    _require_positive(canvas_width=canvas_width, canvas_height=canvas_height)
    mode = _enum_value(LayoutMode, mode, "mode")
    target_coverage = canvas_width * canvas_height * COVERAGE_FACTOR

    if mode is LayoutMode.GRID:
        aspect = canvas_width / canvas_height
        current_count = max(0, int(current_count or 0))
        assumed = max(1, current_count)
        cols = max(1, math.ceil(math.sqrt(current_count * aspect) or 1))
        rows = max(1, math.ceil(assumed / cols))
        cell_w = (canvas_width - GRID_GAP * (cols - 1)) / cols
        cell_h = (canvas_height - GRID_GAP * (rows - 1)) / rows
        cell_size = max(1.0, min(cell_w, cell_h))
        required = math.ceil(target_coverage / (cell_size * cell_size))
        # final grid is re-solved on the true count and rarely tiles perfectly
        estimate = math.ceil(required * GRID_SAFETY_FACTOR)
    else:
        base_size = min(canvas_width, canvas_height) * FREE_BASE_FRACTION
        avg_w = base_size * FREE_AVERAGE_SCALE
        avg_h = avg_w / FREE_AVERAGE_ASPECT
        avg_area = max(1.0, avg_w * avg_h)
        required = math.ceil(target_coverage / avg_area)
        estimate = math.ceil(required * FREE_SAFETY_FACTOR)

    estimate = max(1, estimate)
    logger.debug("Estimated %d images for %sx%s in %s mode", estimate, canvas_width, canvas_height, mode.value)
    return estimate


def required_count_for_ratio(ratio: ScreenRatio, mode: LayoutMode,
                             max_width: int = DEFAULT_MAX_WIDTH, current_count: int = 0) -> int:
    dims = get_screen_dimensions(ratio, max_width)
    return estimate_required_count(dims.width, dims.height, mode, current_count)


def required_count_for_board(ratio: ScreenRatio, max_width: int = DEFAULT_MAX_WIDTH) -> int:
    """Fetch size that serves both modes, so switching modes never needs a refetch."""
    return max(
        required_count_for_ratio(ratio, LayoutMode.FREE, max_width),
        required_count_for_ratio(ratio, LayoutMode.GRID, max_width),
    )
