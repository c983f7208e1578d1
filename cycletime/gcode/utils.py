"""
Geometry and rate helpers for GCODE time estimation

Arc resolution (IJK centers, R-format arcs, direction tie-break), distances,
angle normalization and spindle/feed conversions.
"""

import math

import numpy as np

# Plane -> (first axis, second axis, first offset, second offset)
PLANE_AXES = {
    "G17": ("X", "Y", "I", "J"),
    "G18": ("Z", "X", "K", "I"),
    "G19": ("Y", "Z", "J", "K"),
}

FULL_TURN = 2 * math.pi
EPSILON = 1e-9


def plane_axes(plane: str) -> tuple[str, str, str, str]:
    """Axes and center-offset letters of an arc plane (defaults to G17)"""
    return PLANE_AXES.get(plane, PLANE_AXES["G17"])


def calculate_distance(start, end) -> float:
    """
    Euclidean distance between two points of equal dimension

    Args:
        start: Starting coordinates
        end: Ending coordinates

    Returns:
        Distance in mm
    """
    delta = np.asarray(end, dtype=float) - np.asarray(start, dtype=float)
    return float(np.linalg.norm(delta))


def ijk_to_center(start: tuple[float, float], offsets: tuple[float, float]) -> tuple[float, float]:
    """Arc center from the start point and incremental center offsets"""
    return start[0] + offsets[0], start[1] + offsets[1]


def arc_sweep(start: tuple[float, float], end: tuple[float, float],
              center: tuple[float, float], clockwise: bool) -> float:
    """
    Signed angular sweep from start to end around center

    Clockwise arcs never sweep positive and counter-clockwise arcs never
    sweep negative; a sweep with the wrong sign goes the other way round.
    Coincident start and end points describe a full circle.

    Returns:
        Sweep in radians
    """
    start_angle = math.atan2(start[1] - center[1], start[0] - center[0])
    end_angle = math.atan2(end[1] - center[1], end[0] - center[0])
    delta = end_angle - start_angle

    if calculate_distance(start, end) < EPSILON:
        return -FULL_TURN if clockwise else FULL_TURN
    if clockwise and delta > 0:
        delta -= FULL_TURN
    elif not clockwise and delta < 0:
        delta += FULL_TURN
    return delta


def arc_length(start: tuple[float, float], end: tuple[float, float],
               center: tuple[float, float], clockwise: bool) -> float:
    """
    Length of a circular arc given its center

    Args:
        start: Start point in the arc plane
        end: End point in the arc plane
        center: Absolute arc center
        clockwise: True for G2, False for G3

    Returns:
        Arc length in mm (0 for a degenerate radius)
    """
    radius = calculate_distance(start, center)
    if radius < EPSILON:
        return 0.0
    return radius * abs(arc_sweep(start, end, center, clockwise))


def radius_arc_length(start: tuple[float, float], end: tuple[float, float], radius: float) -> float:
    """
    Length of an R-format arc

    A positive radius takes the minor arc and a negative one the major arc.
    A chord longer than the diameter is clamped to a half circle.

    Returns:
        Arc length in mm; the straight chord when the radius is zero
    """
    chord = calculate_distance(start, end)
    r = abs(radius)
    if r < EPSILON:
        return chord
    half_angle = math.asin(float(np.clip(chord / (2 * r), 0.0, 1.0)))
    sweep = 2 * half_angle
    if radius < 0:
        sweep = FULL_TURN - sweep
    return r * sweep


def shortest_angle(delta_deg: float) -> float:
    """Normalize an angular move into [-180, 180) degrees"""
    return (delta_deg + 180.0) % 360.0 - 180.0


def rotary_arc_length(radius: float, delta_deg: float) -> float:
    """Path length swept at ``radius`` by a rotary move of ``delta_deg``"""
    return abs(radius) * math.radians(abs(delta_deg))


def clamp_rpm(rpm: float, ceiling: float) -> float:
    """Clamp spindle speed into [0, ceiling]; non-finite speeds become the ceiling"""
    if not np.isfinite(rpm):
        return ceiling
    return float(np.clip(rpm, 0.0, ceiling))


def css_rpm(surface_speed: float, radius: float, ceiling: float) -> float:
    """
    Spindle speed holding a constant surface speed

    Args:
        surface_speed: Cutting speed Vc in m/min
        radius: Current radius in mm
        ceiling: RPM limit

    Returns:
        min(1000 * Vc / (pi * r), ceiling); the ceiling when r is ~0
    """
    if surface_speed <= 0:
        return 0.0
    if abs(radius) < EPSILON:
        return clamp_rpm(math.inf, ceiling)
    return clamp_rpm(1000.0 * surface_speed / (math.pi * abs(radius)), ceiling)


def feed_to_minutes(distance: float, feed_rate: float) -> float:
    """
    Time to travel a distance at a feed rate

    Args:
        distance: Distance to travel in mm
        feed_rate: Feed rate in mm/min

    Returns:
        Duration in minutes, 0 when the feed rate is not positive
    """
    if feed_rate <= 0 or not np.isfinite(feed_rate):
        return 0.0
    return abs(distance) / feed_rate
