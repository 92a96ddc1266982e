"""Planar geometry helpers: orientation and segment intersection."""

from __future__ import annotations

import math
from typing import Tuple

Point = Tuple[float, float]

EPSILON = 1e-9


def orientation(p: Point, q: Point, r: Point) -> int:
    """Return 1 for a counter-clockwise turn p->q->r, -1 for clockwise, 0 if collinear."""

    cross = (q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0])
    if abs(cross) <= EPSILON:
        return 0
    return 1 if cross > 0 else -1


def _within_box(p: Point, q: Point, r: Point) -> bool:
    """For collinear p, q, r: whether r lies on the closed segment pq."""

    return (
        min(p[0], q[0]) - EPSILON <= r[0] <= max(p[0], q[0]) + EPSILON
        and min(p[1], q[1]) - EPSILON <= r[1] <= max(p[1], q[1]) + EPSILON
    )


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Closed-segment intersection test for p1p2 against p3p4.

    Touching and collinear overlap both count. Callers that treat a shared
    endpoint as harmless (untangle edges, bridges) filter those pairs by id
    before calling.
    """

    o1 = orientation(p1, p2, p3)
    o2 = orientation(p1, p2, p4)
    o3 = orientation(p3, p4, p1)
    o4 = orientation(p3, p4, p2)

    if o1 != o2 and o3 != o4:
        return True
    if o1 == 0 and _within_box(p1, p2, p3):
        return True
    if o2 == 0 and _within_box(p1, p2, p4):
        return True
    if o3 == 0 and _within_box(p3, p4, p1):
        return True
    if o4 == 0 and _within_box(p3, p4, p2):
        return True
    return False


def point_inside_segment(point: Point, a: Point, b: Point) -> bool:
    """True when ``point`` lies on segment ab strictly between its endpoints."""

    if orientation(a, b, point) != 0 or not _within_box(a, b, point):
        return False
    return not (same_point(point, a) or same_point(point, b))


def same_point(p: Point, q: Point) -> bool:
    return abs(p[0] - q[0]) <= EPSILON and abs(p[1] - q[1]) <= EPSILON


def distance(p: Point, q: Point) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])
