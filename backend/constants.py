# BOARD GEOMETRY CONSTANTS - image_supply.py / image_organization.py
DEFAULT_MAX_WIDTH = 400
MAX_CANVAS_SIDE = 10_000   # largest width or height accepted over HTTP
COVERAGE_FACTOR = 1.1   # placed area goal, relative to canvas area

GRID_GAP = 4
GRID_SAFETY_FACTOR = 1.2

FREE_BASE_FRACTION = 0.3   # base image side, relative to the shorter canvas side
FREE_AVERAGE_ASPECT = 4 / 3
FREE_AVERAGE_SCALE = 1.0
FREE_SAFETY_FACTOR = 1.3
FREE_SCALE_MIN = 0.8
FREE_SCALE_MAX = 1.2
FREE_MAX_ROTATION = 5.0
FREE_VISIBLE_FRACTION = 0.2   # share of each image that must stay on the canvas
FREE_TOP_UP_CAP = 50
FREE_DUPLICATE_MULTIPLE = 2

# Single-column fallback when the grid can't be solved
FALLBACK_MIN_SIDE = 50
FALLBACK_MAX_IMAGES = 20

COVERAGE_SAMPLE_STEP = 4   # px per mask cell when measuring visible coverage
MAX_MASK_CELLS = 1_000_000   # coverage mask budget; the step widens on larger canvases

# IMAGE ACQUISITION CONSTANTS - image_acquisition.py / image_search.py
PEXELS_SEARCH_URL = "https://api.pexels.com/v1/search"
PEXELS_TIMEOUT = 15

PAGE_SIZE = 30
MAX_PAGES = 5
PREVIEW_COUNT = 10
KEYWORD_WORKERS = 4

QUERY_VARIATIONS = [
    "{keyword}",
    "{keyword} aesthetic",
    "{keyword} lifestyle",
    "{keyword} minimal",
    "{keyword} inspirational",
    "{keyword} quote typography",
]

TEXT_MARKERS = ("quote", "typography", "text")
TEXT_MAX_FRACTION = 0.30
