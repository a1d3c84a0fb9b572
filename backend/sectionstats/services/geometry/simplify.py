"""
Trace Simplifier - Douglas-Peucker reduction of GPS polylines.

Distances are planar in degrees. At the tolerances used for map
rendering (~5m) the distortion of treating lat/lng as a plane is
negligible.
"""
import math
from typing import List, Optional, Sequence, Tuple

from sectionstats.core.config import settings

Point = Tuple[float, float]  # (lat, lng)


def perpendicular_distance(point: Point, start: Point, end: Point) -> float:
    """
    Distance from a point to the line through start and end.

    Args:
        point: Point to measure
        start: First chord point
        end: Last chord point

    Returns:
        Distance in degrees; distance to start if the chord has no length
    """
    dx = end[1] - start[1]
    dy = end[0] - start[0]
    px = point[1] - start[1]
    py = point[0] - start[0]

    length = math.hypot(dx, dy)
    if length == 0:
        return math.hypot(px, py)

    # |cross product| / |chord|
    return abs(dy * px - dx * py) / length


def simplify_polyline(
    points: Sequence[Point],
    tolerance: Optional[float] = None
) -> List[Point]:
    """
    Reduce a polyline's point count while keeping its shape.

    Args:
        points: Ordered (lat, lng) points
        tolerance: Max allowed deviation in degrees, settings default if None

    Returns:
        Subsequence of the input that always keeps both endpoints
    """
    if tolerance is None:
        tolerance = settings.SIMPLIFY_TOLERANCE
    if tolerance < 0:
        raise ValueError(f"Tolerance must not be negative: {tolerance}")

    if len(points) <= 2:
        return list(points)

    keep = [False] * len(points)
    keep[0] = keep[-1] = True

    # Explicit stack; track length is unbounded
    stack = [(0, len(points) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        max_dist = 0.0
        max_index = first
        for i in range(first + 1, last):
            dist = perpendicular_distance(points[i], points[first], points[last])
            if dist > max_dist:
                max_dist = dist
                max_index = i

        if max_dist > tolerance:
            keep[max_index] = True
            stack.append((first, max_index))
            stack.append((max_index, last))

    return [point for point, kept in zip(points, keep) if kept]
