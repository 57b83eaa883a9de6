"""Prompt assembly for the controller text-completion service.

The prompt is a fixed template, in this order:

1. role statement naming the airport and position, with the position's
   responsibilities
2. current aircraft situation
3. the last few turns of the conversation
4. the new pilot line and an open "ATC (<position>):" cue

Also holds the stock replies used when the completion service fails.
"""

import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from geoatc.navigation.geo_math import bearing_deg, compass_octant, distance_nm
from geoatc.services.atc.position_selector import ATCPosition

if TYPE_CHECKING:
    from geoatc.airports.directory import Airport
    from geoatc.services.atc.conversation import Turn
    from geoatc.telemetry.aircraft_state import AircraftInfo, AircraftState

POSITION_INSTRUCTIONS: dict[ATCPosition, str] = {
    ATCPosition.GROUND: (
        "As GROUND CONTROL, you handle:\n"
        "- Taxi instructions and clearances\n"
        "- Gate and parking assignments\n"
        "- Ground traffic coordination\n"
        "- Pushback and startup clearances\n"
        "- Airport surface movement\n"
        'Use phrases like: "Taxi to runway via...", "Hold position", '
        '"Gate 3 via taxiway Alpha"\n'
    ),
    ATCPosition.TOWER: (
        "As TOWER CONTROL, you handle:\n"
        "- Takeoff and landing clearances\n"
        "- Runway assignments\n"
        "- Local traffic coordination\n"
        "- Pattern operations\n"
        "- Wake turbulence advisories\n"
        'Use phrases like: "Cleared for takeoff", "Cleared to land", '
        '"Enter left downwind", "Number 2 following..."\n'
    ),
    ATCPosition.APPROACH: (
        "As APPROACH/DEPARTURE CONTROL, you handle:\n"
        "- Arrival and departure sequencing\n"
        "- Radar vectors\n"
        "- Altitude and speed assignments\n"
        "- Traffic separation\n"
        "- Instrument approaches\n"
        'Use phrases like: "Turn heading 270", "Descend and maintain 3000", '
        '"Contact tower 118.7", "Cleared ILS approach"\n'
    ),
    ATCPosition.CENTER: (
        "As AREA CONTROL, you handle:\n"
        "- En-route traffic\n"
        "- Altitude and route clearances\n"
        "- Oceanic/remote area control\n"
        "- Flight level changes\n"
        "- Long-range navigation\n"
        'Use phrases like: "Climb and maintain FL330", "Direct to WAYPOINT", '
        '"Report crossing", "Resume own navigation"\n'
    ),
}

SITUATION_UNAVAILABLE = "- Aircraft data unavailable\n"

FALLBACK_RESPONSES: tuple[str, ...] = (
    "Roger, standby.",
    "Copy that.",
    "Affirmative.",
    "Say again?",
    "Unable, traffic in the area.",
    "Wilco.",
    "Maintain current heading and altitude.",
)


def describe_situation(
    airport_code: str,
    state: "AircraftState | None",
    airport: "Airport | None" = None,
    aircraft_info: "AircraftInfo | None" = None,
    ground_max_agl_ft: float = 50.0,
    vicinity_radius_nm: float = 10.0,
) -> str:
    """Render the aircraft situation block.

    On the ground only altitudes are reported. In the air the block adds
    distance, heading and airspeed, then either a vicinity note or the
    direction of the aircraft as seen from the airport.

    Args:
        airport_code: Tuned airport code.
        state: Aircraft snapshot, None if unavailable.
        airport: Tuned airport, needed for distance and direction.
        aircraft_info: Optional callsign/type line.
        ground_max_agl_ft: Height below which the aircraft counts as on the ground.
        vicinity_radius_nm: Distance below which no direction is given.

    Returns:
        One "- " line per fact, newline-terminated.
    """
    if state is None:
        return SITUATION_UNAVAILABLE

    lines = []
    if aircraft_info is not None:
        lines.append(f"- Aircraft: {aircraft_info.aircraft_type}, callsign {aircraft_info.callsign}")

    if state.on_ground and state.height_agl_ft < ground_max_agl_ft:
        lines.append(f"- Aircraft is ON GROUND at {airport_code}")
        lines.append(
            f"- Altitude: {state.altitude_msl_ft:.0f}ft MSL ({state.height_agl_ft:.0f}ft AGL)"
        )
        return "\n".join(lines) + "\n"

    lines.append(f"- Altitude: {state.altitude_msl_ft:.0f}ft MSL")

    if airport is None:
        lines.append(f"- Distance from {airport_code}: unknown")
    else:
        distance = distance_nm(state.latitude, state.longitude, airport.latitude, airport.longitude)
        lines.append(f"- Distance from {airport_code}: {distance:.1f} NM")

    lines.append(f"- Heading: {state.heading_deg:.0f}°")
    lines.append(f"- Airspeed: {state.airspeed_kt:.0f} kts")

    if airport is not None:
        if distance < vicinity_radius_nm:
            lines.append(f"- Position: In the vicinity of {airport_code}")
        else:
            octant = compass_octant(
                bearing_deg(airport.latitude, airport.longitude, state.latitude, state.longitude)
            )
            lines.append(f"- Bearing: {octant.full_name.upper()} of airport")

    return "\n".join(lines) + "\n"


def format_history(history: Sequence["Turn"]) -> str:
    """Render turns as "Pilot:" / "ATC (<position>):" lines.

    Args:
        history: Turns, oldest first.

    Returns:
        One line per turn, newline-terminated (empty for no turns).
    """
    lines = []
    for turn in history:
        speaker = "Pilot" if turn.role.value == "pilot" else f"ATC ({turn.position.value})"
        lines.append(f"{speaker}: {turn.text}\n")
    return "".join(lines)


def build_atc_prompt(
    airport_code: str,
    position: ATCPosition,
    pilot_text: str,
    state: "AircraftState | None",
    airport: "Airport | None" = None,
    history: Sequence["Turn"] = (),
    aircraft_info: "AircraftInfo | None" = None,
    ground_max_agl_ft: float = 50.0,
    vicinity_radius_nm: float = 10.0,
) -> str:
    """Assemble the full prompt.

    Args:
        airport_code: Tuned airport code.
        position: Effective controller position.
        pilot_text: New pilot message.
        state: Aircraft snapshot, None if unavailable.
        airport: Tuned airport.
        history: Previous turns to include, oldest first.
        aircraft_info: Optional callsign/type information.
        ground_max_agl_ft: Height below which the aircraft counts as on the ground.
        vicinity_radius_nm: Distance below which no direction is given.

    Returns:
        Prompt text ending with "ATC (<position>):".
    """
    prompt = (
        f"You are an ATC controller at {airport_code} airport, "
        f"working as {position.label} control.\n\n"
    )
    prompt += POSITION_INSTRUCTIONS[position]
    prompt += "\nCurrent aircraft situation:\n"
    prompt += describe_situation(
        airport_code,
        state,
        airport,
        aircraft_info,
        ground_max_agl_ft=ground_max_agl_ft,
        vicinity_radius_nm=vicinity_radius_nm,
    )
    prompt += "\nRecent communication:\n"
    prompt += format_history(history)
    prompt += f"\nPilot: {pilot_text}\n"
    prompt += f"ATC ({position.value}):"
    return prompt


def fallback_response(rng: random.Random | None = None) -> str:
    """Pick a stock reply for when the completion service fails.

    Args:
        rng: Random source (module-level random if None).

    Returns:
        One of FALLBACK_RESPONSES.
    """
    return (rng or random).choice(FALLBACK_RESPONSES)
