import csv
from typing import Dict, Optional
from .models import Aircraft, FlightRules
from .proximity import parse_flight_rules


def _bool_from_int_str(value: str, default: bool = False) -> bool:
    """Helper to parse '0'/'1' (or missing) into bool."""
    if value is None:
        return default
    value = value.strip()
    if value == "":
        return default
    try:
        return bool(int(value))
    except ValueError:
        # fallback: accept 'true'/'false'
        return value.lower() in ("1", "true", "yes", "y")


def _float_or_none(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


# CSV columns:
# callsign,lat,lon,altitude_ft,heading,gs_east_kt,gs_north_kt,rules,destination,squawk[,lost_track,on_ground]
# Example:
# AAL101,40.64,-73.60,5000,270,-180,0,IFR,KJFK,4521

def load_traffic_csv(path: str) -> Dict[str, Aircraft]:
    """Load a traffic snapshot CSV into Aircraft objects keyed by callsign."""
    aircraft: Dict[str, Aircraft] = {}
    with open(path, newline='') as f:
        r = csv.DictReader(f)
        for row in r:
            callsign = row['callsign'].strip()
            east = _float_or_none(row.get('gs_east_kt'))
            north = _float_or_none(row.get('gs_north_kt'))
            velocity = (east, north) if east is not None and north is not None else None

            rules = row.get('rules') or FlightRules.VFR.name
            aircraft[callsign] = Aircraft(
                callsign=callsign,
                position=(float(row['lat']), float(row['lon'])),
                altitude_ft=float(row['altitude_ft']),
                heading=_float_or_none(row.get('heading')),
                ground_velocity_kt=velocity,
                rules=parse_flight_rules(rules),
                destination=(row.get('destination') or '').strip() or None,
                squawk=(row.get('squawk') or '').strip() or None,
                lost_track=_bool_from_int_str(row.get('lost_track'), default=False),
                on_ground=_bool_from_int_str(row.get('on_ground'), default=False),
            )

    if not aircraft:
        raise RuntimeError(f"No aircraft in traffic file: {path}")

    return aircraft
