"""
Static mapping from the routes this proxy exposes to Brawl Stars API paths.

Path parameter values arrive straight from the client and are percent-encoded
before they are substituted, so characters such as ``#``, ``/`` and ``?`` can
never change the shape of the upstream URL.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode


class ParamStyle(str, Enum):
    PLAIN = "plain"
    # Player and club tags need a literal "#" upstream, sent as %23
    TAG = "tag"
    # Country codes are expected upper-case upstream
    UPPER = "upper"


@dataclass(frozen=True)
class PathParam:
    name: str
    style: ParamStyle = ParamStyle.PLAIN

    def normalize(self, raw: str) -> str:
        value = str(raw)
        if self.style is ParamStyle.TAG and not value.startswith("#"):
            value = "#" + value
        elif self.style is ParamStyle.UPPER:
            value = value.upper()
        return quote(value, safe="")


@dataclass(frozen=True)
class QueryParam:
    name: str
    default: Optional[str] = None


@dataclass(frozen=True)
class RouteDescriptor:
    name: str
    path: str
    upstream: str
    params: Tuple[PathParam, ...] = ()
    query: Tuple[QueryParam, ...] = ()

    def resolve(
        self,
        params: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, Optional[str]]] = None,
    ) -> str:
        params = params or {}
        query = query or {}
        values = {p.name: p.normalize(params[p.name]) for p in self.params}
        upstream_path = self.upstream.format(**values)

        pairs = []
        for q in self.query:
            value = query.get(q.name)
            if value is None or value == "":
                value = q.default
            if value is not None:
                pairs.append((q.name, value))
        if pairs:
            upstream_path = f"{upstream_path}?{urlencode(pairs)}"
        return upstream_path


_TAG = ParamStyle.TAG
_LIMIT = QueryParam("limit", "200")

ROUTE_TABLE: Tuple[RouteDescriptor, ...] = (
    RouteDescriptor(
        "player",
        "/api/players/{player_tag}",
        "/players/{player_tag}",
        params=(PathParam("player_tag", _TAG),),
    ),
    RouteDescriptor(
        "club",
        "/api/clubs/{club_tag}",
        "/clubs/{club_tag}",
        params=(PathParam("club_tag", _TAG),),
    ),
    RouteDescriptor(
        "club_members",
        "/api/clubs/{club_tag}/members",
        "/clubs/{club_tag}/members",
        params=(PathParam("club_tag", _TAG),),
    ),
    RouteDescriptor("brawlers", "/api/brawlers", "/brawlers"),
    RouteDescriptor(
        "brawler",
        "/api/brawlers/{brawler_id}",
        "/brawlers/{brawler_id}",
        params=(PathParam("brawler_id"),),
    ),
    RouteDescriptor("events", "/api/events", "/events/rotation"),
    RouteDescriptor(
        "player_rankings",
        "/api/rankings/{country_code}/players",
        "/rankings/{country_code}/players",
        params=(PathParam("country_code", ParamStyle.UPPER),),
        query=(_LIMIT,),
    ),
    RouteDescriptor(
        "club_rankings",
        "/api/rankings/{country_code}/clubs",
        "/rankings/{country_code}/clubs",
        params=(PathParam("country_code", ParamStyle.UPPER),),
        query=(_LIMIT,),
    ),
)

ROUTES_BY_PATH: Dict[str, RouteDescriptor] = {r.path: r for r in ROUTE_TABLE}
ROUTES_BY_NAME: Dict[str, RouteDescriptor] = {r.name: r for r in ROUTE_TABLE}


def resolve(
    pattern: str,
    params: Optional[Mapping[str, str]] = None,
    query: Optional[Mapping[str, Optional[str]]] = None,
) -> str:
    """Resolve an exposed path pattern to its upstream path and query string."""
    return ROUTES_BY_PATH[pattern].resolve(params, query)


def endpoint_listing() -> list:
    return [f"GET {route.path}" for route in ROUTE_TABLE]
