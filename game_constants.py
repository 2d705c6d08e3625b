GRID_SIZE = 15

MIN_STEPS = 1
MAX_STEPS = 15

ADVANCED_BAND = (14, 20)
MIN_ADVANCED_REPETITIONS = 2

LOOPS_FROM_LEVEL = 10
GUIDE_LINES_UNTIL_LEVEL = 5
TIME_LIMIT_FROM_LEVEL = 10
BASE_TIME_LIMIT_S = 60
TIME_LIMIT_STEP_S = 5
MIN_TIME_LIMIT_S = 10
MAX_REQUIRED_ENERGY = 3

STEP_MS = 300
FPS = 60


def is_advanced(level) -> bool:
    if level is None:
        return False
    low, high = ADVANCED_BAND
    return low <= level <= high
