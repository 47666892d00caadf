"""
Flight Paths - Where Is the Aircraft at Time t?

A FlightPath is a list of timed waypoints plus an interpolation rule.
It holds no playback state: every query is a pure function of time, so
one path can drive any number of animated objects at different clocks.

INTERPOLATION:

1. LINEAR
   Straight segments between waypoints. Velocity jumps at each waypoint.

2. CATMULL-ROM (cardinal spline)
   Passes through every waypoint with a continuous tangent. Each segment
   [p1, p2] uses a 4-point window [p0, p1, p2, p3]; at the ends the
   window repeats the boundary waypoint. With s = (1 - tension) / 2:

       P(t) = p0*b0 + p1*b1 + p2*b2 + p3*b3
       b0 = -s t^3 + 2s t^2 - s t
       b1 = (2 - s) t^3 + (s - 3) t^2 + 1
       b2 = (s - 2) t^3 + (3 - 2s) t^2 + s t
       b3 = s t^3 - s t^2

   tension 0.5 gives s = 0.25; tension 0 is the classic Catmull-Rom.

TIME:
- Waypoints are sorted by time on construction; total duration is the
  last waypoint's time.
- Looping paths wrap t past the end back to the start.
- Non-looping paths clamp t to [0, total_duration].

DERIVED MOTION:
- Velocity: forward difference over VELOCITY_DELTA seconds.
- Heading: atan2(east, north), 0 = north (+Y), pi/2 = east (+X).
- Pitch: atan2(vertical speed, horizontal speed), positive = climbing.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple
import logging
import math

from .vector import Vec3, EPSILON

logger = logging.getLogger(__name__)

# Forward-difference step for velocity (seconds)
VELOCITY_DELTA = 0.001

# Distance integration rate for get_distance_at_time (samples per second)
DISTANCE_SAMPLE_RATE = 100

# Start and end within this distance make a closed path (meters)
CLOSED_TOLERANCE = 1e-6

DEFAULT_TENSION = 0.5


class InterpolationType(str, Enum):
    LINEAR = "linear"
    CATMULL_ROM = "catmull_rom"


class WaypointType(str, Enum):
    SHARP = "sharp"    # corner, no smoothing intended
    SMOOTH = "smooth"  # fly through
    STOP = "stop"      # come to rest


@dataclass(frozen=True)
class Waypoint:
    """A position the path must pass through at a given time."""
    position: Vec3
    time: float                        # seconds from path start
    speed: Optional[float] = None      # m/s, informational
    type: WaypointType = WaypointType.SMOOTH

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_dict(),
            "time": self.time,
            "speed": self.speed,
            "type": self.type.value,
        }


def _require_positive_speed(speed: float) -> None:
    if speed <= 0:
        raise ValueError(f"Speed must be positive, got {speed}")


class FlightPath:
    """
    Immutable time-parameterized path.

    Usage:
        path = FlightPath.create_with_speed(
            [Vec3(0, 0, 50), Vec3(500, 0, 80), Vec3(500, 500, 80)],
            speed=25.0,
            interpolation_type=InterpolationType.CATMULL_ROM,
        )
        path.get_position_at_time(10.0)
        path.get_heading_at_time(10.0)
    """

    def __init__(
        self,
        waypoints: Iterable[Waypoint],
        interpolation_type: InterpolationType = InterpolationType.LINEAR,
        is_looping: bool = False,
        tension: float = DEFAULT_TENSION,
    ):
        self._waypoints: Tuple[Waypoint, ...] = tuple(sorted(waypoints, key=lambda w: w.time))
        self._interpolation_type = interpolation_type
        self._is_looping = is_looping
        self._tension = tension
        logger.debug(
            f"FlightPath: {len(self._waypoints)} waypoints, {interpolation_type.value}, "
            f"looping={is_looping}, duration={self.total_duration:.2f}s"
        )

    # ------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------

    @classmethod
    def create_linear(cls, waypoints: Iterable[Waypoint], is_looping: bool = False) -> FlightPath:
        return cls(waypoints, InterpolationType.LINEAR, is_looping)

    @classmethod
    def create_spline(
        cls, waypoints: Iterable[Waypoint], is_looping: bool = False, tension: float = DEFAULT_TENSION
    ) -> FlightPath:
        return cls(waypoints, InterpolationType.CATMULL_ROM, is_looping, tension)

    @classmethod
    def create_with_speed(
        cls,
        positions: Iterable[Vec3],
        speed: float,
        interpolation_type: InterpolationType = InterpolationType.LINEAR,
    ) -> FlightPath:
        """Times derived from straight-line distance at constant speed."""
        _require_positive_speed(speed)

        waypoints: List[Waypoint] = []
        time = 0.0
        previous: Optional[Vec3] = None
        for position in positions:
            if previous is not None:
                time += previous.distance_to(position) / speed
            waypoints.append(Waypoint(position, time, speed))
            previous = position
        return cls(waypoints, interpolation_type)

    @classmethod
    def create_direct(cls, start: Vec3, end: Vec3, speed: float) -> FlightPath:
        """Straight line from start to end."""
        _require_positive_speed(speed)
        duration = start.distance_to(end) / speed
        return cls([Waypoint(start, 0.0, speed), Waypoint(end, duration, speed)])

    @classmethod
    def create_safe(
        cls, start: Vec3, end: Vec3, speed: float, safe_altitude: float = 50.0
    ) -> FlightPath:
        """
        Climb, cruise, descend.

        Cruise altitude is at least safe_altitude and at least 20 m above
        the higher endpoint. Climb and descent legs are skipped when an
        endpoint is already at cruise altitude.
        """
        _require_positive_speed(speed)
        cruise = max(safe_altitude, max(start.z, end.z) + 20.0)

        legs = [start]
        if start.z < cruise:
            legs.append(start.with_z(cruise))
        legs.append(Vec3(end.x, end.y, cruise))
        if end.z < cruise:
            legs.append(end)

        return cls.create_with_speed(legs, speed)

    @classmethod
    def create_orbit(
        cls, center: Vec3, radius: float, altitude: float, duration: float, segments: int = 36
    ) -> FlightPath:
        """Closed circle at center.z + altitude, counter-clockwise from +X."""
        step = 2 * math.pi / segments
        time_step = duration / segments
        waypoints = [
            Waypoint(
                Vec3(
                    center.x + radius * math.cos(i * step),
                    center.y + radius * math.sin(i * step),
                    center.z + altitude,
                ),
                i * time_step,
            )
            for i in range(segments + 1)
        ]
        return cls(waypoints, InterpolationType.CATMULL_ROM, is_looping=True)

    @classmethod
    def create_figure_eight(
        cls, center: Vec3, size: float, altitude: float, duration: float, segments: int = 72
    ) -> FlightPath:
        """Lemniscate of Gerono: x = size sin(t), y = size sin(t) cos(t)."""
        time_step = duration / segments
        waypoints = []
        for i in range(segments + 1):
            t = i / segments * 2 * math.pi
            waypoints.append(Waypoint(
                Vec3(
                    center.x + size * math.sin(t),
                    center.y + size * math.sin(t) * math.cos(t),
                    center.z + altitude,
                ),
                i * time_step,
            ))
        return cls(waypoints, InterpolationType.CATMULL_ROM, is_looping=True)

    # ------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------

    @property
    def waypoints(self) -> Tuple[Waypoint, ...]:
        return self._waypoints

    @property
    def interpolation_type(self) -> InterpolationType:
        return self._interpolation_type

    @property
    def is_looping(self) -> bool:
        return self._is_looping

    @property
    def tension(self) -> float:
        return self._tension

    @property
    def total_duration(self) -> float:
        return self._waypoints[-1].time if self._waypoints else 0.0

    @property
    def total_distance(self) -> float:
        """Straight-line length through the waypoints."""
        return sum(
            self._waypoints[i - 1].position.distance_to(self._waypoints[i].position)
            for i in range(1, len(self._waypoints))
        )

    @property
    def is_closed(self) -> bool:
        return (
            len(self._waypoints) > 1
            and self._waypoints[0].position.distance_to(self._waypoints[-1].position) < CLOSED_TOLERANCE
        )

    @property
    def start_position(self) -> Vec3:
        return self._waypoints[0].position if self._waypoints else Vec3.zero()

    @property
    def final_position(self) -> Vec3:
        return self._waypoints[-1].position if self._waypoints else Vec3.zero()

    # ------------------------------------------------------------
    # Position
    # ------------------------------------------------------------

    def _wrap(self, time: float) -> float:
        duration = self.total_duration
        if self._is_looping and duration > 0 and time > duration:
            time %= duration
        return time

    def get_position_at_time(self, time: float) -> Vec3:
        if not self._waypoints:
            return Vec3.zero()
        if len(self._waypoints) == 1:
            return self._waypoints[0].position

        time = max(0.0, min(self._wrap(time), self.total_duration))
        if time <= self._waypoints[0].time:
            return self._waypoints[0].position

        index = self._find_segment(time)
        w0 = self._waypoints[index]
        w1 = self._waypoints[index + 1]

        duration = w1.time - w0.time
        t = (time - w0.time) / duration if duration > 0 else 0.0

        if self._interpolation_type == InterpolationType.CATMULL_ROM:
            return self._catmull_rom(index, t)
        return w0.position.lerp(w1.position, t)

    def _find_segment(self, time: float) -> int:
        """First segment whose time span contains `time`."""
        for i in range(len(self._waypoints) - 1):
            if self._waypoints[i].time <= time <= self._waypoints[i + 1].time:
                return i
        return len(self._waypoints) - 2

    def _catmull_rom(self, index: int, t: float) -> Vec3:
        last = len(self._waypoints) - 1
        p0 = self._waypoints[max(0, index - 1)].position
        p1 = self._waypoints[index].position
        p2 = self._waypoints[min(last, index + 1)].position
        p3 = self._waypoints[min(last, index + 2)].position

        t2 = t * t
        t3 = t2 * t
        s = (1.0 - self._tension) / 2.0

        b0 = -s * t3 + 2 * s * t2 - s * t
        b1 = (2 - s) * t3 + (s - 3) * t2 + 1
        b2 = (s - 2) * t3 + (3 - 2 * s) * t2 + s * t
        b3 = s * t3 - s * t2

        return p0 * b0 + p1 * b1 + p2 * b2 + p3 * b3

    # ------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------

    def get_velocity_at_time(self, time: float) -> Vec3:
        p0 = self.get_position_at_time(time)
        p1 = self.get_position_at_time(time + VELOCITY_DELTA)
        return (p1 - p0) / VELOCITY_DELTA

    def get_direction_at_time(self, time: float) -> Vec3:
        velocity = self.get_velocity_at_time(time)
        if velocity.magnitude() > EPSILON:
            return velocity.normalized()
        return Vec3.unit_x()

    def get_speed_at_time(self, time: float) -> float:
        return self.get_velocity_at_time(time).magnitude()

    def get_altitude_at_time(self, time: float) -> float:
        return self.get_position_at_time(time).z

    def get_heading_at_time(self, time: float) -> float:
        """Radians, 0 = north (+Y), pi/2 = east (+X)."""
        direction = self.get_direction_at_time(time)
        return math.atan2(direction.x, direction.y)

    def get_pitch_at_time(self, time: float) -> float:
        """Radians, positive = climbing."""
        v = self.get_velocity_at_time(time)
        return math.atan2(v.z, math.hypot(v.x, v.y))

    def get_distance_at_time(self, time: float) -> float:
        """Arc length flown by `time`, integrated at DISTANCE_SAMPLE_RATE Hz."""
        if len(self._waypoints) < 2 or time <= 0:
            return 0.0

        samples = int(time * DISTANCE_SAMPLE_RATE)
        distance = 0.0
        previous = self._waypoints[0].position
        for i in range(1, samples + 1):
            position = self.get_position_at_time(time * i / samples)
            distance += previous.distance_to(position)
            previous = position
        return distance

    # ------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------

    def get_current_waypoint_index(self, time: float) -> int:
        """Index of the last waypoint already passed."""
        if not self._waypoints:
            return 0

        time = self._wrap(time)
        for i in range(len(self._waypoints) - 1, -1, -1):
            if time >= self._waypoints[i].time:
                return i
        return 0

    def get_next_waypoint(self, time: float) -> Optional[Waypoint]:
        if not self._waypoints:
            return None
        index = self.get_current_waypoint_index(time)
        if index < len(self._waypoints) - 1:
            return self._waypoints[index + 1]
        return self._waypoints[0] if self._is_looping else None

    def get_progress(self, time: float) -> float:
        """Fraction of the path completed, 0.0 to 1.0."""
        duration = self.total_duration
        if duration <= 0:
            return 0.0
        if self._is_looping:
            return (time % duration) / duration
        return max(0.0, min(1.0, time / duration))

    def sample_path(self, sample_count: int) -> List[Vec3]:
        """sample_count + 1 evenly spaced positions from start to end."""
        if sample_count < 1:
            raise ValueError(f"Sample count must be at least 1, got {sample_count}")
        duration = self.total_duration
        return [
            self.get_position_at_time(duration * i / sample_count)
            for i in range(sample_count + 1)
        ]

    def __len__(self) -> int:
        return len(self._waypoints)

    def __repr__(self) -> str:
        return (
            f"FlightPath({len(self._waypoints)} waypoints, {self._interpolation_type.value}, "
            f"duration={self.total_duration:.2f}s, looping={self._is_looping})"
        )
