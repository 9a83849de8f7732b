"""Range warnings/violations and miles-in-trail (MIT) spacing."""
import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import config
from .geo import Point2LL, estimated_future_distance, heading_between, nm_distance
from .math_utils import heading_difference
from .models import (
    Aircraft, AircraftId, AircraftPair, ConflictKind, FlightRules, MITResult,
    RangeConflict, RangeLimits, RangeLimitsTable, Severity, aircraft_pair,
)

log = logging.getLogger(__name__)


def default_range_limits() -> RangeLimitsTable:
    table: RangeLimitsTable = {}
    for rules in FlightRules:
        table[rules] = RangeLimits(**config.get_range_limits(rules.name))
    return table


def parse_flight_rules(value) -> FlightRules:
    """Map an input value to FlightRules; unknown values degrade to VFR."""
    if isinstance(value, FlightRules):
        return value
    try:
        return FlightRules[str(value).strip().upper()]
    except KeyError:
        log.warning("unknown flight rules %r; treating as VFR", value)
        return FlightRules.VFR


def limits_for_pair(a: Aircraft, b: Aircraft, range_limits: RangeLimitsTable) -> RangeLimits:
    """Pick the table entry for a pair; mixed rules use the stricter entry."""
    if a.rules == b.rules:
        return range_limits[a.rules]
    # ties go to the category declared first
    candidates = sorted((a.rules, b.rules), key=lambda r: r.value)
    return min((range_limits[r] for r in candidates), key=lambda lim: lim.strictness_key())


def get_conflicts(aircraft: Sequence[Aircraft],
                  range_limits: RangeLimitsTable) -> Tuple[List[RangeConflict], List[RangeConflict]]:
    """Classify every pair as warning, violation, or nothing.

    Callers pass in non-ghost aircraft that already passed the altitude and
    lost-track filters.
    """
    warnings: List[RangeConflict] = []
    violations: List[RangeConflict] = []

    ordered = sorted(aircraft, key=lambda ac: ac.callsign)
    for i, ac1 in enumerate(ordered):
        for ac2 in ordered[i + 1:]:
            r = limits_for_pair(ac1, ac2, range_limits)
            ldist = nm_distance(ac1.position, ac2.position)
            vdist = abs(ac1.altitude_ft - ac2.altitude_ft)

            if ldist < r.violation_lateral_nm and vdist < r.violation_vertical_ft:
                kind = ConflictKind.VIOLATION
                out = violations
            elif ldist < r.warning_lateral_nm and vdist < r.warning_vertical_ft:
                kind = ConflictKind.WARNING
                out = warnings
            else:
                continue
            out.append(RangeConflict(kind=kind, aircraft=(ac1.callsign, ac2.callsign),
                                     lateral_nm=ldist, vertical_ft=vdist, limits=r))
    return warnings, violations


def conflict_pairs(*conflict_lists: Iterable[RangeConflict]) -> Set[AircraftPair]:
    pairs: Set[AircraftPair] = set()
    for conflicts in conflict_lists:
        for c in conflicts:
            pairs.add(c.pair)
    return pairs


def mit_severity(distance_nm: float) -> Severity:
    if distance_nm > config.MIT_SAFE_NM:
        return Severity.SAFE
    if distance_nm > config.MIT_CAUTION_NM:
        return Severity.CAUTION
    return Severity.DANGER


def _mit_result(leading: Aircraft, trailing: Aircraft, distance_nm: float) -> MITResult:
    projected = estimated_future_distance(
        leading.position, leading.heading_vector(),
        trailing.position, trailing.heading_vector(),
        config.MIT_HORIZON_S,
    )
    return MITResult(leading=leading.callsign, trailing=trailing.callsign,
                     distance_nm=distance_nm, projected_nm=projected,
                     severity=mit_severity(distance_nm))


def explicit_mit(sequence: Sequence[AircraftId],
                 aircraft: Mapping[AircraftId, Aircraft],
                 suppressed: Set[AircraftPair]) -> List[MITResult]:
    """Spacing between each consecutive pair of a controller-given sequence."""
    results: List[MITResult] = []
    for front_id, trailing_id in zip(sequence, sequence[1:]):
        # don't draw if there's a range warning for these two
        if aircraft_pair(front_id, trailing_id) in suppressed:
            continue
        front, trailing = aircraft.get(front_id), aircraft.get(trailing_id)
        if front is None or trailing is None:
            log.debug("MIT sequence entry %s/%s not in snapshot", front_id, trailing_id)
            continue
        dist = nm_distance(front.position, trailing.position)
        results.append(_mit_result(front, trailing, dist))
    return results


def in_trail(front: Aircraft, back: Aircraft,
             magnetic_variation: float = config.MAGNETIC_VARIATION) -> bool:
    """Is `back` plausibly following `front`?"""
    if back.heading is None:
        return False
    dalt = back.altitude_ft - front.altitude_ft
    angle = heading_between(back.position, front.position, magnetic_variation)
    diff = heading_difference(back.heading, angle)
    return diff < config.MIT_MAX_HEADING_DIFF_DEG and dalt < config.MIT_MAX_ALT_DIFF_FT


def distance_sorted_arrivals(aircraft: Iterable[Aircraft], airports: Set[str],
                             airport_locations: Mapping[str, Point2LL]) -> List[Tuple[Aircraft, float]]:
    arrivals = []
    for ac in aircraft:
        if ac.lost_track or ac.on_ground or ac.destination not in airports:
            continue
        location = airport_locations.get(ac.destination)
        if location is None:
            log.warning("no location for MIT airport %s", ac.destination)
            continue
        arrivals.append((ac, nm_distance(location, ac.position)))
    arrivals.sort(key=lambda e: (e[1], e[0].callsign))
    return arrivals


def automatic_mit(aircraft: Iterable[Aircraft], airports: Set[str],
                  airport_locations: Mapping[str, Point2LL],
                  suppressed: Set[AircraftPair]) -> List[MITResult]:
    """Pair each arrival with the closest aircraft it is in trail of."""
    arr = distance_sorted_arrivals(aircraft, airports, airport_locations)
    results: List[MITResult] = []

    for i in range(1, len(arr)):
        ac = arr[i][0]
        closest: Optional[Aircraft] = None
        min_dist = config.MIT_SEARCH_RADIUS_NM

        # O(n^2), fine for the handful of arrivals on a scope
        for j, (ac2, _) in enumerate(arr):
            if i == j or ac2.destination != ac.destination:
                continue
            dist = nm_distance(ac.position, ac2.position)
            if dist < min_dist and in_trail(ac2, ac):
                min_dist = dist
                closest = ac2

        if closest is None:
            continue
        # Having done all this work, ignore the result if there's a range
        # warning for this pair...
        if aircraft_pair(ac.callsign, closest.callsign) in suppressed:
            continue
        results.append(_mit_result(closest, ac, min_dist))
    return results


def compute_mit(aircraft: Mapping[AircraftId, Aircraft],
                sequence: Sequence[AircraftId],
                auto_mit: bool,
                airports: Set[str],
                airport_locations: Mapping[str, Point2LL],
                suppressed: Set[AircraftPair]) -> List[MITResult]:
    # Don't do automatic MIT if a sequence has been manually specified
    if auto_mit and not sequence:
        return automatic_mit(aircraft.values(), airports, airport_locations, suppressed)
    return explicit_mit(sequence, aircraft, suppressed)
