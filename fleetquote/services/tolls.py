"""Toll lookup over a declarative table of known road corridors.

A corridor joins two regions; each region is a set of lowercase place-name
aliases matched as whole words in the place name. Every leg of the trip that runs
between the two regions (in either direction) pays the corridor's fee once.
An exit toll is charged once when the trip departs from its region.
"""
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from fleetquote.schemas.costs import RouteResult, TollCosts, TollCrossing
from fleetquote.utils.rounding import round_money

Leg = Tuple[str, str]


@dataclass(frozen=True)
class Region:
    name: str
    aliases: Tuple[str, ...]

    def contains(self, place: str) -> bool:
        place = place.lower()
        return any(re.search(rf"\b{re.escape(alias)}\b", place) for alias in self.aliases)


@dataclass(frozen=True)
class TollCorridor:
    key: str
    from_region: Region
    to_region: Region
    fee_key: str

    def matches(self, leg: Leg) -> bool:
        a, b = leg
        return (
            (self.from_region.contains(a) and self.to_region.contains(b))
            or (self.to_region.contains(a) and self.from_region.contains(b))
        )


@dataclass(frozen=True)
class ExitToll:
    region: Region
    fee_key: str


SAN_PEDRO_SULA = Region("San Pedro Sula", ("san pedro sula", "sps"))
CENTRAL_SOUTH = Region(
    "Tegucigalpa",
    (
        "tegucigalpa", "tgu", "choluteca", "san lorenzo", "la paz", "marcala",
        "juticalpa", "catacamas", "zambrano", "el paraiso", "danli",
        "valle de angeles", "costa rica", "nicaragua", "panama",
    ),
)
CENTRAL_HIGHLANDS = Region("Comayagua", ("comayagua", "siguatepeque"))
NORTH_COAST = Region(
    "La Ceiba",
    ("tela", "la ceiba", "ceiba", "atlantida", "atlántida", "progreso", "sambo", "trujillo"),
)
PORT_CORTES = Region("Puerto Cortés", ("puerto cortés", "puerto cortes", "potrerillos"))

DEFAULT_CORRIDORS: Tuple[TollCorridor, ...] = (
    TollCorridor("sps-tegucigalpa", SAN_PEDRO_SULA, CENTRAL_SOUTH, "sap_tgu"),
    TollCorridor("sps-comayagua", SAN_PEDRO_SULA, CENTRAL_HIGHLANDS, "sap_tgu"),
    TollCorridor("sps-north-coast", SAN_PEDRO_SULA, NORTH_COAST, "sap_tla"),
    TollCorridor("sps-cortes", SAN_PEDRO_SULA, PORT_CORTES, "ptz_sap"),
)

DEFAULT_EXIT_TOLLS: Tuple[ExitToll, ...] = (
    ExitToll(SAN_PEDRO_SULA, "salida_sps"),
)

DEFAULT_TOLL_FEES: Dict[str, float] = {
    "salida_sps": 50.0,
    "sap_tgu": 150.0,
    "sap_tla": 100.0,
    "ptz_sap": 75.0,
}


def route_legs(route: RouteResult) -> List[Leg]:
    if route.segments:
        return [(s.origin, s.destination) for s in route.segments]

    stops = [p for p in (route.base_location, route.origin, route.destination) if p]
    if route.base_location and len(stops) > 1:
        stops.append(route.base_location)
    return list(zip(stops, stops[1:]))


def calculate_toll_costs(
    legs: Sequence[Leg],
    fees: Optional[Mapping[str, float]] = None,
    corridors: Iterable[TollCorridor] = DEFAULT_CORRIDORS,
    exit_tolls: Iterable[ExitToll] = DEFAULT_EXIT_TOLLS,
) -> TollCosts:
    table = dict(DEFAULT_TOLL_FEES)
    table.update(fees or {})
    corridors = list(corridors)

    crossings = []
    for leg in legs:
        for corridor in corridors:
            if corridor.matches(leg):
                crossings.append(TollCrossing(
                    corridor=corridor.key,
                    origin=leg[0],
                    destination=leg[1],
                    amount=table.get(corridor.fee_key, 0.0),
                ))
                break

    exit_toll = 0.0
    if legs:
        departure = legs[0][0]
        exit_toll = sum(table.get(t.fee_key, 0.0) for t in exit_tolls if t.region.contains(departure))

    total = sum(c.amount for c in crossings) + exit_toll
    return TollCosts(crossings=crossings, exit_toll=round_money(exit_toll), total=round_money(total))
