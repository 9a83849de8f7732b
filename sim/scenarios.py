import math
from typing import Dict
from scope.models import Aircraft, FlightRules

AIRPORTS = {
    "KJFK": (40.6398, -73.7789),
    "KLGA": (40.7769, -73.8740),
}


def _ac(cs, lat, lon, alt_ft, hdg, gs_kt, rules=FlightRules.IFR, dest=None, squawk=None) -> Aircraft:
    r = math.radians(hdg)
    return Aircraft(cs, position=(lat, lon), altitude_ft=alt_ft, heading=hdg,
                    ground_velocity_kt=(gs_kt * math.sin(r), gs_kt * math.cos(r)),
                    rules=rules, destination=dest, squawk=squawk)


def arrival_stream() -> Dict[str, Aircraft]:
    # Four arrivals on the KJFK 13L-ish final from the northwest, one straggler above
    return {
        "AAL101": _ac("AAL101", 40.700, -73.880, 3000, 135, 180, dest="KJFK", squawk="4521"),
        "DAL202": _ac("DAL202", 40.745, -73.945, 4000, 135, 210, dest="KJFK", squawk="4522"),
        "JBU303": _ac("JBU303", 40.790, -74.010, 5000, 135, 230, dest="KJFK", squawk="4523"),
        "UAL404": _ac("UAL404", 40.800, -74.000, 9000, 135, 250, dest="KJFK", squawk="4524"),
        "SWA505": _ac("SWA505", 40.850, -73.950, 3000, 200, 200, dest="KLGA", squawk="4525"),
    }

def crossing_conflict() -> Dict[str, Aircraft]:
    return {
        "DAL305": _ac("DAL305", 40.60, -73.95, 6000,  90, 250, squawk="3301"),
        "JBU707": _ac("JBU707", 40.65, -73.85, 6300, 180, 240, squawk="3302"),
        "N123AB": _ac("N123AB", 40.62, -73.70, 2500, 300, 110, FlightRules.VFR, squawk="1200"),
        "N456CD": _ac("N456CD", 40.625, -73.705, 2700, 120, 100, FlightRules.VFR, squawk="1200"),
    }

def dense_cluster() -> Dict[str, Aircraft]:
    # Many datablocks competing for the same patch of scope
    out = {}
    for i in range(8):
        cs = f"EJA{i:02d}"
        lat = 40.70 + 0.01 * (i % 3)
        lon = -73.80 + 0.012 * (i // 3)
        out[cs] = _ac(cs, lat, lon, 4000 + 500 * i, (45 * i) % 360, 160, squawk=f"52{i:02d}")
    return out

SCENARIOS = {
    "1": arrival_stream,
    "2": crossing_conflict,
    "3": dense_cluster,
}
