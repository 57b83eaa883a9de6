"""ATC position state machine.

Decides which controller position (ground, tower, approach, center) is
talking to the pilot. The pilot can pin a position manually; otherwise the
position is derived from altitude, height above ground and distance to the
tuned airport.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from geoatc.core.logging_system import get_logger
from geoatc.telemetry.aircraft_state import AircraftState

logger = get_logger(__name__)

AUTO = "auto"


class ATCPosition(Enum):
    """Concrete controller positions."""

    GROUND = "ground"
    TOWER = "tower"
    APPROACH = "approach"
    CENTER = "center"

    @property
    def label(self) -> str:
        """Get upper-case label used in prompts and titles (e.g., "TOWER")."""
        return self.value.upper()

    @property
    def display_name(self) -> str:
        """Get human-readable name for menus."""
        return POSITION_DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, name: "str | ATCPosition | None") -> "ATCPosition | None":
        """Parse a position name.

        Args:
            name: Position name (any case), an ATCPosition, or "auto"/None.

        Returns:
            The concrete position, or None for auto mode.

        Raises:
            ValueError: If the name is not a known position.
        """
        if name is None or isinstance(name, ATCPosition):
            return name

        key = name.strip().lower()
        if key == AUTO:
            return None
        if key == "departure":
            return cls.APPROACH
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown ATC position: {name!r}") from None


POSITION_DISPLAY_NAMES: dict[ATCPosition, str] = {
    ATCPosition.GROUND: "Ground Control",
    ATCPosition.TOWER: "Tower",
    ATCPosition.APPROACH: "Approach/Departure",
    ATCPosition.CENTER: "Area Control",
}

AUTO_DISPLAY_NAME = "Auto-select (based on altitude/distance)"

# Position used before any telemetry has been seen
DEFAULT_POSITION = ATCPosition.TOWER


@dataclass(frozen=True)
class PositionThresholds:
    """Altitude and distance limits for automatic position selection.

    Attributes:
        ground_max_agl_ft: Max height above ground to count as on the ground.
        tower_max_alt_ft: Tower handles traffic below this altitude (MSL).
        approach_max_alt_ft: Approach handles traffic below this altitude (MSL).
        center_min_alt_ft: Center handles traffic at or above this altitude (MSL).
        tower_range_nm: Tower range from the airport.
        approach_range_nm: Approach range from the airport.
    """

    ground_max_agl_ft: float = 50.0
    tower_max_alt_ft: float = 3000.0
    approach_max_alt_ft: float = 18000.0
    center_min_alt_ft: float = 18000.0
    tower_range_nm: float = 50.0
    approach_range_nm: float = 100.0


def select_position(
    on_ground: bool,
    height_agl_ft: float,
    altitude_msl_ft: float,
    distance_nm: float,
    thresholds: PositionThresholds = PositionThresholds(),
) -> ATCPosition:
    """Pick the controller position for an aircraft.

    Rules are checked in order, first match wins.

    Args:
        on_ground: Gear in contact with the ground.
        height_agl_ft: Height above ground in feet.
        altitude_msl_ft: Altitude above sea level in feet.
        distance_nm: Distance to the tuned airport in nautical miles.
        thresholds: Limits to apply.

    Returns:
        The selected position.
    """
    if on_ground and height_agl_ft < thresholds.ground_max_agl_ft:
        return ATCPosition.GROUND
    if altitude_msl_ft < thresholds.tower_max_alt_ft and distance_nm <= thresholds.tower_range_nm:
        return ATCPosition.TOWER
    if (
        altitude_msl_ft < thresholds.approach_max_alt_ft
        and distance_nm <= thresholds.approach_range_nm
    ):
        return ATCPosition.APPROACH
    if altitude_msl_ft >= thresholds.center_min_alt_ft:
        return ATCPosition.CENTER
    return ATCPosition.TOWER if distance_nm <= thresholds.approach_range_nm else ATCPosition.CENTER


class PositionSelector:
    """Tracks override mode and effective position for one session.

    ``override`` is None in auto mode. ``effective_position`` is always a
    concrete position.
    """

    def __init__(
        self,
        thresholds: PositionThresholds | None = None,
        initial_position: ATCPosition = DEFAULT_POSITION,
    ) -> None:
        """Initialize selector in auto mode.

        Args:
            thresholds: Selection limits (defaults if None).
            initial_position: Effective position before the first recompute.
        """
        self.thresholds = thresholds or PositionThresholds()
        self._override: ATCPosition | None = None
        self._effective_position = initial_position
        self._listeners: list[Callable[[ATCPosition, ATCPosition], None]] = []

    @property
    def override(self) -> ATCPosition | None:
        """Get manual override, None when in auto mode."""
        return self._override

    @property
    def is_auto(self) -> bool:
        """Check if the position is selected automatically."""
        return self._override is None

    @property
    def effective_position(self) -> ATCPosition:
        """Get the position currently talking to the pilot."""
        return self._effective_position

    def set_override(self, position: "ATCPosition | str | None") -> ATCPosition:
        """Pin a position, or return to auto mode.

        Args:
            position: Concrete position, its name, or "auto"/None.

        Returns:
            The effective position after the change.

        Raises:
            ValueError: If a name is given that is not a known position.
        """
        parsed = ATCPosition.parse(position)
        self._override = parsed
        if parsed is not None:
            self._set_effective(parsed)
        logger.info("Position override set to %s", parsed.value if parsed else AUTO)
        return self._effective_position

    def recompute(self, state: AircraftState, distance_nm: float) -> ATCPosition:
        """Re-derive the position from telemetry when in auto mode.

        No-op while a manual override is set.

        Args:
            state: Fresh aircraft snapshot.
            distance_nm: Distance to the tuned airport.

        Returns:
            The effective position.
        """
        if not self.is_auto:
            return self._effective_position

        position = select_position(
            state.on_ground,
            state.height_agl_ft,
            state.altitude_msl_ft,
            distance_nm,
            self.thresholds,
        )
        logger.debug(
            "Auto position: %s (alt=%.0f agl=%.0f ground=%s dist=%.1f)",
            position.value,
            state.altitude_msl_ft,
            state.height_agl_ft,
            state.on_ground,
            distance_nm,
        )
        self._set_effective(position)
        return position

    def apply_switch(self, position: ATCPosition) -> ATCPosition:
        """Move to a position requested in conversation.

        The override mode is left untouched, so auto mode may select a
        different position on the next recompute.

        Args:
            position: Position to switch to.

        Returns:
            The effective position.
        """
        self._set_effective(position)
        return position

    def add_change_listener(self, listener: Callable[[ATCPosition, ATCPosition], None]) -> None:
        """Add a listener for effective position changes.

        Args:
            listener: Callback function(old_position, new_position).
        """
        self._listeners.append(listener)

    def remove_change_listener(self, listener: Callable[[ATCPosition, ATCPosition], None]) -> None:
        """Remove a change listener.

        Args:
            listener: Callback to remove.
        """
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_effective(self, position: ATCPosition) -> None:
        old_position = self._effective_position
        self._effective_position = position
        if old_position == position:
            return

        for listener in self._listeners:
            listener(old_position, position)
