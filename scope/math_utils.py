import math
from typing import Tuple

Vec2 = Tuple[float, float]

def norm(a: Vec2) -> float:
    return math.hypot(a[0], a[1])

def add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0]+b[0], a[1]+b[1])

def sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0]-b[0], a[1]-b[1])

def mul(a: Vec2, k: float) -> Vec2:
    return (a[0]*k, a[1]*k)

def normalize(a: Vec2) -> Vec2:
    """Unit vector along a; the zero vector stays zero instead of NaN."""
    n = norm(a)
    if n <= 1e-9:
        return (0.0, 0.0)
    return (a[0]/n, a[1]/n)

def is_zero(a: Vec2) -> bool:
    return a[0] == 0 and a[1] == 0

def clamp_length(a: Vec2, max_len: float) -> Vec2:
    n = norm(a)
    if n > max_len:
        return mul(a, max_len / n)
    return a

def wrap_heading(h: float) -> float:
    """Wrap a heading into [0, 360)."""
    h = math.fmod(h, 360.0)
    if h < 0:
        h += 360.0
    if h >= 360.0:
        # tiny negatives round up to exactly 360
        h -= 360.0
    return h

def heading_difference(a: float, b: float) -> float:
    """Smallest angle between two headings, in [0, 180]."""
    d = abs(wrap_heading(a) - wrap_heading(b))
    return 360.0 - d if d > 180.0 else d
