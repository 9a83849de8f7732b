WHITE = (235, 235, 235)
GREY = (140, 140, 140)
CYAN = (80, 220, 240)
GREEN = (60, 210, 90)
AMBER = (255, 191, 0)
RED = (230, 40, 40)

TRACK = (255, 255, 255)
GHOST = (150, 110, 230)
SELECTED = (90, 200, 255)
SAFE = GREEN
CAUTION = AMBER
ERROR = RED


def lerp_rgb(x, a, b):
    """Blend color a toward b by x in [0, 1]."""
    return tuple(int(round((1 - x) * ca + x * cb)) for ca, cb in zip(a, b))
