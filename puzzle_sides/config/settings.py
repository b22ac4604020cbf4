"""Configuration settings for the puzzle side matcher."""

# Input configuration
DATA_DIR = "data"
INPUT_NAMES = [
    "00_photo_six_parts_downscaled_x4",
    # "00_photo_six_parts",
    # "01_eight_parts",
    # "02_eight_parts_shuffled",
    # "03_eight_parts_shuffled2",
]
INPUT_EXTENSION = ".jpg"

# Foreground thresholding: threshold = factor * percentile of the border intensities
BACKGROUND_PERCENTILE = 90
BACKGROUND_FACTOR = 1.5

# Mask cleanup
MORPHOLOGY_STRENGTH = 6
EXTRA_EROSION = 2  # keeps side colors away from dark background pixels

# Piece extraction
EXPECTED_PIECE_COUNTS = (6, 8)
CORNERS_PER_PIECE = 4

# Side matching
BLUR_STRENGTH = 2.0
DIFFERENCE_PLOT_SCALE = 100.0

# Processing parameters
DEFAULT_MAX_WORKERS = None  # Use all available cores
USE_PARALLEL = True
MORPHOLOGY_MIN_BAND_ROWS = 32
WORKER_MEMORY_GB = 0.5

# Debug output
DEBUG_DIR = "debug"
DRAW_MATCHING_PLOTS = True
DEBUG_COLOR_SEED = 2391
DEBUG_SUBDIRS = {
    'objects': 'objects',
}

# Logging
LOG_DIR = "logs"
LOG_PREFIX = "puzzle_sides"
DEFAULT_VERBOSITY = "INFO"

# Hand-verified answers: (objA, sideA) -> (objB, sideB).
# Object and side numbering is deterministic from run to run, so these stay valid.
EXPECTED_MATCHES = {
    "00_photo_six_parts_downscaled_x4": {
        (0, 0): (1, 2),
        (0, 1): (3, 3),
        (1, 0): (2, 3),
        (1, 1): (5, 3),
        (1, 2): (0, 0),
        (2, 2): (4, 3),
        (2, 3): (1, 0),
        (3, 0): (5, 2),
        (3, 3): (0, 1),
        (4, 2): (5, 0),
        (4, 3): (2, 2),
        (5, 0): (4, 2),
        (5, 2): (3, 0),
        (5, 3): (1, 1),
    },
}
