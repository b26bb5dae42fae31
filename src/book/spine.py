"""Bone-chain maths for the page-curl animation.

Each page is a chain of jointed segments. Every frame, each segment gets a
yaw (the turn about the spine) and a pitch (a slight fold) computed from how
open the page is, where the segment sits on the chain, and how far into a
turn the page is. Nothing here keeps state: the caller owns the timestamp of
the last open/close change and the current angles.
"""

import math
from dataclasses import dataclass

PAGE_WIDTH = 1.28
PAGE_HEIGHT = 1.71
PAGE_DEPTH = 0.003
PAGE_SEGMENTS = 30
SEGMENT_WIDTH = PAGE_WIDTH / PAGE_SEGMENTS
BONE_COUNT = PAGE_SEGMENTS + 1

EASING_FACTOR = 0.5
EASING_FACTOR_FOLD = 0.3
INSIDE_CURVE_STRENGTH = 0.18
OUTSIDE_CURVE_STRENGTH = 0.05
TURNING_CURVE_STRENGTH = 0.09

TURN_DURATION = 0.4  # seconds
# Segments before this index curl inwards, the rest outwards.
INSIDE_SEGMENTS = 8
# Per-page fan-out so stacked pages do not overlap when the book is open.
PAGE_FAN_DEGREES = 0.8


@dataclass(frozen=True, slots=True)
class SegmentAngles:
    """Target rotation of one segment, in radians."""

    yaw: float
    pitch: float


def turning_progress(now: float, turned_at: float, duration: float = TURN_DURATION) -> float:
    """Sin-shaped turn intensity: 0 at the change, 1 mid-turn, 0 after ``duration``."""
    elapsed = min(duration, max(0.0, now - turned_at)) / duration
    return math.sin(elapsed * math.pi)


def target_rotation(opened: bool, book_closed: bool, physical_slot: int) -> float:
    """Rigid rotation a page is heading for."""
    rotation = -math.pi / 2 if opened else math.pi / 2
    if not book_closed:
        rotation += math.radians(physical_slot * PAGE_FAN_DEGREES)
    return rotation


def bend_angles(
    segment: int,
    *,
    opened: bool,
    book_closed: bool,
    physical_slot: int,
    turning: float,
    bone_count: int = BONE_COUNT,
) -> SegmentAngles:
    """Target yaw and pitch of one segment for the current frame.

    ``turning`` is the output of :func:`turning_progress`. When the book is
    fully closed the page is rigid: segment 0 takes the whole rotation and
    every other segment stays flat.
    """
    rotation = target_rotation(opened, book_closed, physical_slot)

    if book_closed:
        return SegmentAngles(yaw=rotation if segment == 0 else 0.0, pitch=0.0)

    inside = math.sin(segment * 0.2 + 0.25) if segment < INSIDE_SEGMENTS else 0.0
    outside = math.cos(segment * 0.3 + 0.09) if segment >= INSIDE_SEGMENTS else 0.0
    turning_intensity = math.sin(segment * math.pi / bone_count) * turning

    yaw = (
        INSIDE_CURVE_STRENGTH * inside * rotation
        - OUTSIDE_CURVE_STRENGTH * outside * rotation
        + TURNING_CURVE_STRENGTH * turning_intensity * rotation
    )

    fold = math.radians(math.copysign(2, rotation))
    fold_intensity = (
        math.sin(segment * math.pi / bone_count - 0.5) * turning
        if segment > INSIDE_SEGMENTS
        else 0.0
    )
    return SegmentAngles(yaw=yaw, pitch=fold * fold_intensity)


def spine_angles(
    *,
    opened: bool,
    book_closed: bool,
    physical_slot: int,
    turning: float,
    bone_count: int = BONE_COUNT,
) -> list[SegmentAngles]:
    """Targets for every segment of one page."""
    return [
        bend_angles(
            segment,
            opened=opened,
            book_closed=book_closed,
            physical_slot=physical_slot,
            turning=turning,
            bone_count=bone_count,
        )
        for segment in range(bone_count)
    ]


def damp_angle(current: float, target: float, smooth_time: float, delta: float) -> float:
    """Ease ``current`` toward ``target`` along the shortest arc.

    Frame-rate independent: two half-length steps land where one full step
    does.
    """
    if delta <= 0:
        return current
    difference = (target - current + math.pi) % (2 * math.pi) - math.pi
    factor = 1.0 - math.exp(-delta / max(smooth_time, 1e-6) * 4.0)
    return current + difference * factor
