import math, random
from dataclasses import dataclass
from typing import Iterable, List, Tuple
import numpy as np
from backend.constants import *

@dataclass(frozen=True)
class GridSolution:
    cols: int
    rows: int
    cell_size: float
    raw_cell_size: float  # before the 1px floor; < 1 means the canvas can't hold the grid

    def used_size(self, gap: float = GRID_GAP) -> Tuple[float, float]:
        used_w = self.cols * self.cell_size + (self.cols - 1) * gap
        used_h = self.rows * self.cell_size + (self.rows - 1) * gap
        return used_w, used_h

def sanitize_side(value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(value) or value < 1:
        return 1.0
    return value

def total_area(placements) -> float:
    return sum(p.width*p.height for p in placements)

def solve_grid(count: int, canvas_width: float, canvas_height: float, gap: float = GRID_GAP) -> GridSolution:
    """
    Fit `count` square cells onto the canvas: columns follow the canvas aspect, then rows and
    columns are shrunk while a whole row/column would stay empty.
    """
    count = max(1, int(count))
    aspect = canvas_width / max(1.0, canvas_height)
    cols = max(1, math.ceil(math.sqrt(count*aspect)))
    rows = max(1, math.ceil(count/cols))
    while rows > 1 and (rows-1)*cols >= count:
        rows -= 1
    while cols > 1 and rows*(cols-1) >= count:
        cols -= 1
        rows = max(1, math.ceil(count/cols))
    rows = max(1, math.ceil(count/cols))
    cell_w = (canvas_width - gap*(cols-1)) / cols
    cell_h = (canvas_height - gap*(rows-1)) / rows
    raw = min(cell_w, cell_h)
    return GridSolution(cols=cols, rows=rows, cell_size=max(1.0, raw), raw_cell_size=raw)

def grid_is_sound(sol: GridSolution) -> bool:
    values = (sol.cols, sol.rows, sol.cell_size, sol.raw_cell_size)
    return all(math.isfinite(v) for v in values) and sol.cols >= 1 and sol.rows >= 1 and sol.raw_cell_size >= 1

def grid_offsets(sol: GridSolution, canvas_width: float, canvas_height: float) -> Tuple[float, float]:
    used_w, used_h = sol.used_size()
    return (canvas_width-used_w)/2, (canvas_height-used_h)/2

def grid_cell_position(index: int, sol: GridSolution, offset: Tuple[float, float]) -> Tuple[float, float]:
    row, col = divmod(index, sol.cols)
    return (offset[0] + col*(sol.cell_size+GRID_GAP),
            offset[1] + row*(sol.cell_size+GRID_GAP))

def stacked_layout(count: int, canvas_width: float, canvas_height: float) -> List[Tuple[float, float, float]]:
    """Single column of gap-separated squares, used when no grid fits."""
    n = max(1, min(count, FALLBACK_MAX_IMAGES))
    side = max(FALLBACK_MIN_SIDE, (canvas_height - GRID_GAP*(n-1)) / n)
    x = max(0.0, (canvas_width-side)/2)
    return [(x, i*(side+GRID_GAP), side) for i in range(n)]

def draw_free_geometry(src_w: int, src_h: int, canvas_width: float, canvas_height: float,
                       base_size: float, rng: random.Random):
    aspect = max(1, src_w) / max(1, src_h)
    scale = FREE_SCALE_MIN + rng.random()*(FREE_SCALE_MAX-FREE_SCALE_MIN)
    width = base_size*scale
    height = width/aspect
    rotation = (rng.random()-0.5)*2*FREE_MAX_ROTATION
    keep = 1.0 - FREE_VISIBLE_FRACTION
    max_x = canvas_width - width*keep
    max_y = canvas_height - height*keep
    x = max(0.0, rng.random()*max_x)
    y = max(0.0, rng.random()*max_y)
    return x, y, width, height, scale, rotation

def visible_coverage(rects: Iterable[Tuple[float, float, float, float]], canvas_width: float,
                     canvas_height: float, step: int = COVERAGE_SAMPLE_STEP) -> float:
    """Share of the canvas covered by at least one rect (x, y, w, h), sampled on a step-px mask."""
    step = max(step, math.ceil(math.sqrt(canvas_width*canvas_height/MAX_MASK_CELLS)))
    cols = max(1, math.ceil(canvas_width/step)); rows = max(1, math.ceil(canvas_height/step))
    mask = np.zeros((rows, cols), dtype=bool)
    for x, y, w, h in rects:
        x0 = int(np.clip(math.floor(x/step), 0, cols)); x1 = int(np.clip(math.ceil((x+w)/step), 0, cols))
        y0 = int(np.clip(math.floor(y/step), 0, rows)); y1 = int(np.clip(math.ceil((y+h)/step), 0, rows))
        if x1 > x0 and y1 > y0:
            mask[y0:y1, x0:x1] = True
    return float(mask.mean())
