"""
Shipping-lane network for the Persian Gulf, Gulf of Oman and Arabian Sea.

A fixed, hand-curated set of safe offshore waypoints with undirected
adjacency. The network is built once at import time and never mutated:
adjacency is normalised to be symmetric on load, and connections to
unknown node ids are dropped with a warning.

Geography notes:
- Abu Dhabi island is at ~24.45N 54.38E; Musaffah port is on the mainland
  at ~24.335N 54.44E, facing the channel between island and mainland.
- Open Gulf water lies north and west of Abu Dhabi; south is desert.
- Khalifa Port is at ~24.79N 54.68E on the coast north of the island.
"""

import heapq
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from gulfnav.routes.geometry import haversine_distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkNode:
    """A named, safe offshore waypoint of the shipping-lane network."""
    id: str
    lat: float
    lon: float
    name: str
    connections: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class NearestNode:
    """Nearest-node lookup result."""
    node: NetworkNode
    distance_nm: float


@dataclass(frozen=True)
class RegionBounds:
    """Latitude/longitude bounding box."""
    name: str
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.lat_min <= lat <= self.lat_max and self.lon_min <= lon <= self.lon_max


# Region where the network gives reliable coverage
GULF_REGION = RegionBounds("Persian Gulf", 23.0, 28.0, 48.0, 57.0)


# ---------------------------------------------------------------------------
# Network definition: (id, lat, lon, name, connections)
# ---------------------------------------------------------------------------
NETWORK_DEFINITION: List[Tuple[str, float, float, str, Tuple[str, ...]]] = [
    # Musaffah channel: water between Abu Dhabi island and the mainland
    ("MUS_CH1", 24.38, 54.30, "Mussafah Channel W", ("MUS_CH2", "ABU_W1")),
    ("MUS_CH2", 24.40, 54.15, "Channel Exit", ("MUS_CH1", "ABU_W1", "ABU_W2")),

    # Open water west of Abu Dhabi island
    ("ABU_W1", 24.48, 54.05, "Abu Dhabi NW", ("MUS_CH1", "MUS_CH2", "ABU_W2", "ABU_N1")),
    ("ABU_W2", 24.35, 53.90, "Abu Dhabi W", ("MUS_CH2", "ABU_W1", "UAE_03")),

    # North of Abu Dhabi towards Khalifa Port
    ("ABU_N1", 24.60, 54.20, "Abu Dhabi N Offshore", ("ABU_W1", "ABU_N2", "UAE_07")),
    ("ABU_N2", 24.75, 54.45, "W of Khalifa Port", ("ABU_N1", "KHL_01")),
    ("KHL_01", 24.80, 54.62, "Khalifa Port Approach", ("ABU_N2", "UAE_04")),

    # UAE offshore shipping lane
    ("UAE_03", 24.25, 53.40, "Jebel Dhanna Offshore", ("ABU_W2", "UAE_05", "UAE_07")),
    ("UAE_04", 24.90, 54.80, "Jebel Ali Approach", ("ABU_N2", "UAE_06", "UAE_07")),
    ("UAE_05", 24.40, 52.80, "Ruwais Offshore", ("UAE_03", "UAE_08")),
    ("UAE_06", 25.10, 55.10, "Dubai Offshore", ("UAE_04", "DXB_01", "UAE_09")),
    ("DXB_01", 25.25, 55.25, "Dubai Port Approach", ("UAE_06", "UAE_09")),
    ("UAE_07", 24.70, 53.80, "Central Gulf UAE", ("ABU_N1", "UAE_03", "UAE_04", "CENT_01")),
    ("UAE_08", 24.70, 52.50, "Zirku-Das Area", ("UAE_05", "CENT_02", "CENT_01")),
    ("UAE_09", 25.40, 55.30, "Sharjah Offshore", ("UAE_06", "DXB_01", "UAE_10")),
    ("UAE_10", 25.70, 55.70, "N UAE Offshore", ("UAE_09", "HORM_01")),

    # Central Persian Gulf deep-water lanes
    ("CENT_01", 25.00, 53.50, "Central Gulf E", ("UAE_07", "UAE_08", "CENT_02", "CENT_03")),
    ("CENT_02", 24.80, 52.90, "Central Gulf C", ("UAE_08", "CENT_01", "CENT_04")),
    ("CENT_03", 25.50, 53.10, "Central Gulf NE", ("CENT_01", "CENT_05", "IRAN_01")),
    ("CENT_04", 24.60, 52.50, "Das Island Area", ("CENT_02", "CENT_05", "SQAT_01")),
    ("CENT_05", 25.30, 52.50, "Halul Approach", ("CENT_03", "CENT_04", "CENT_06")),
    ("CENT_06", 25.70, 52.00, "Halul Island Area", ("CENT_05", "QNOR_01", "QEAS_01")),

    # South of the Qatar peninsula
    ("SQAT_01", 24.20, 52.20, "South Qatar 1", ("CENT_04", "SQAT_02")),
    ("SQAT_02", 24.10, 51.70, "South Qatar 2", ("SQAT_01", "SQAT_03", "QEAS_01")),
    ("SQAT_03", 24.15, 51.20, "South Qatar 3", ("SQAT_02", "SQAT_04")),
    ("SQAT_04", 24.30, 50.70, "SW Qatar", ("SQAT_03", "QWES_01", "SAUD_01")),

    # East of Qatar, Doha approach
    ("QEAS_01", 24.80, 51.80, "SE Qatar", ("SQAT_02", "CENT_06", "QEAS_02")),
    ("QEAS_02", 25.20, 51.60, "E Doha", ("QEAS_01", "QNOR_01")),

    # North of Qatar
    ("QNOR_01", 25.80, 51.80, "NE Qatar", ("CENT_06", "QEAS_02", "QNOR_02")),
    ("QNOR_02", 26.20, 51.40, "N Qatar", ("QNOR_01", "QWES_02", "BAHR_01")),

    # West of Qatar, Bahrain approach
    ("QWES_01", 25.00, 50.40, "W Qatar S", ("SQAT_04", "QWES_02", "SAUD_02")),
    ("QWES_02", 25.60, 50.30, "W Qatar N", ("QWES_01", "QNOR_02", "BAHR_01")),

    # Bahrain
    ("BAHR_01", 26.30, 50.70, "Bahrain E", ("QNOR_02", "QWES_02", "BAHR_02")),
    ("BAHR_02", 26.50, 50.30, "Bahrain N", ("BAHR_01", "SAUD_03")),

    # Saudi coast
    ("SAUD_01", 24.50, 50.20, "Saudi S", ("SQAT_04", "SAUD_02")),
    ("SAUD_02", 25.50, 49.90, "Saudi Central", ("SAUD_01", "QWES_01", "SAUD_03")),
    ("SAUD_03", 26.60, 49.80, "Dammam Approach", ("SAUD_02", "BAHR_02", "SAUD_04")),
    ("SAUD_04", 27.20, 49.60, "Jubail Approach", ("SAUD_03", "KWAI_01")),

    # Southern Iranian coast
    ("IRAN_01", 26.00, 53.50, "Iran SW", ("CENT_03", "IRAN_02")),
    ("IRAN_02", 26.50, 53.00, "Iran S Central", ("IRAN_01", "IRAN_03")),
    ("IRAN_03", 27.00, 52.20, "Iran SE", ("IRAN_02", "IRAN_04", "KWAI_02")),
    ("IRAN_04", 27.20, 51.40, "Kangan Area", ("IRAN_03", "KWAI_02")),

    # Kuwait / Iraq
    ("KWAI_01", 28.20, 49.20, "Kuwait S", ("SAUD_04", "KWAI_02", "KWAI_03")),
    ("KWAI_02", 28.00, 50.20, "Kuwait E", ("IRAN_03", "IRAN_04", "KWAI_01")),
    ("KWAI_03", 29.00, 48.80, "Kuwait Port", ("KWAI_01", "KWAI_04")),
    ("KWAI_04", 29.80, 48.40, "Basra Approach", ("KWAI_03",)),

    # Strait of Hormuz shipping lane
    ("HORM_01", 25.90, 56.10, "Hormuz Approach", ("UAE_10", "HORM_02")),
    ("HORM_02", 26.10, 56.40, "Hormuz W", ("HORM_01", "HORM_03", "IRAN_05")),
    ("HORM_03", 26.00, 56.80, "Hormuz Center", ("HORM_02", "HORM_04")),
    ("HORM_04", 25.70, 57.10, "Hormuz E", ("HORM_03", "GOOM_01")),
    ("IRAN_05", 26.50, 56.60, "Bandar Abbas S", ("HORM_02", "IRAN_06")),
    ("IRAN_06", 26.80, 57.20, "Bandar Abbas E", ("IRAN_05", "GOOM_02")),

    # Gulf of Oman, well offshore
    ("GOOM_01", 25.20, 57.60, "Gulf of Oman NW", ("HORM_04", "GOOM_02", "GOOM_03")),
    ("GOOM_02", 25.80, 58.20, "Gulf of Oman N", ("GOOM_01", "IRAN_06", "GOOM_04")),
    ("GOOM_03", 24.60, 58.00, "Fujairah Offshore", ("GOOM_01", "GOOM_04", "GOOM_05")),
    ("GOOM_04", 25.00, 58.80, "Gulf of Oman Central N", ("GOOM_02", "GOOM_03", "GOOM_06")),
    ("GOOM_05", 24.00, 58.50, "Gulf of Oman W", ("GOOM_03", "GOOM_06", "GOOM_07")),
    ("GOOM_06", 24.20, 59.30, "Gulf of Oman Central", ("GOOM_04", "GOOM_05", "GOOM_08")),
    ("GOOM_07", 23.40, 59.00, "Muscat Offshore", ("GOOM_05", "GOOM_08", "ARAB_01")),
    ("GOOM_08", 23.60, 59.80, "Gulf of Oman E", ("GOOM_06", "GOOM_07", "ARAB_02")),

    # Arabian Sea
    ("ARAB_01", 22.50, 59.50, "Arabian Sea NW", ("GOOM_07", "ARAB_02", "ARAB_03")),
    ("ARAB_02", 22.80, 60.50, "Arabian Sea N", ("GOOM_08", "ARAB_01", "ARAB_04")),
    ("ARAB_03", 21.50, 59.50, "Sur Offshore", ("ARAB_01", "ARAB_04", "ARAB_05")),
    ("ARAB_04", 22.00, 61.00, "Arabian Sea NE", ("ARAB_02", "ARAB_03", "ARAB_06")),
    ("ARAB_05", 20.00, 59.00, "Arabian Sea Central W", ("ARAB_03", "ARAB_06", "ARAB_07")),
    ("ARAB_06", 20.50, 61.50, "Arabian Sea Central", ("ARAB_04", "ARAB_05", "ARAB_08")),
    ("ARAB_07", 18.00, 57.00, "Duqm Offshore", ("ARAB_05", "ARAB_09")),
    ("ARAB_08", 19.00, 62.50, "Arabian Sea E", ("ARAB_06",)),
    ("ARAB_09", 17.00, 55.50, "Salalah Offshore", ("ARAB_07",)),
]


class MaritimeNetwork:
    """
    Read-only shipping-lane graph with nearest-node lookup and Dijkstra.

    Edge weights are great-circle distances between adjacent nodes, so
    they are always non-negative.
    """

    def __init__(self, definition: Iterable[Tuple[str, float, float, str, Iterable[str]]]):
        definition = list(definition)
        ids = [entry[0] for entry in definition]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate node ids in network definition")
        known = set(ids)

        adjacency: Dict[str, set] = {node_id: set() for node_id in ids}
        for node_id, _, _, _, connections in definition:
            for other in connections:
                if other not in known:
                    logger.warning(f"Network node {node_id} connects to unknown node {other}; dropped")
                    continue
                if other == node_id:
                    continue
                adjacency[node_id].add(other)
                adjacency[other].add(node_id)

        self._nodes: Dict[str, NetworkNode] = {
            node_id: NetworkNode(
                id=node_id, lat=lat, lon=lon, name=name,
                connections=frozenset(adjacency[node_id]),
            )
            for node_id, lat, lon, name, _ in definition
        }
        self._order: Tuple[str, ...] = tuple(ids)

        self._edge_nm: Dict[Tuple[str, str], float] = {}
        for node in self._nodes.values():
            for other_id in node.connections:
                other = self._nodes[other_id]
                self._edge_nm[(node.id, other_id)] = haversine_distance(
                    node.lat, node.lon, other.lat, other.lon
                )

        logger.debug(f"Maritime network loaded: {len(self._nodes)} nodes, "
                     f"{len(self._edge_nm) // 2} edges")

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get(self, node_id: str) -> Optional[NetworkNode]:
        return self._nodes.get(node_id)

    @property
    def nodes(self) -> List[NetworkNode]:
        """Nodes in definition order."""
        return [self._nodes[node_id] for node_id in self._order]

    def edge_distance(self, from_id: str, to_id: str) -> Optional[float]:
        """Edge length in nm, or None if the nodes are not adjacent."""
        return self._edge_nm.get((from_id, to_id))

    def nearest_node(self, lat: float, lon: float) -> NearestNode:
        """Nearest node to (lat, lon) by great-circle distance (linear scan)."""
        best: Optional[NetworkNode] = None
        best_dist = float('inf')
        for node_id in self._order:
            node = self._nodes[node_id]
            dist = haversine_distance(lat, lon, node.lat, node.lon)
            if dist < best_dist:
                best_dist = dist
                best = node

        if best is None:
            # Only reachable with NaN input; fall back to the first node
            best = self._nodes[self._order[0]]
        return NearestNode(node=best, distance_nm=best_dist)

    def shortest_path(self, start_id: str, end_id: str) -> List[NetworkNode]:
        """
        Dijkstra shortest path between two node ids.

        Returns an empty list when either id is unknown or the end is
        unreachable; callers treat empty as "no route". Stops as soon
        as the end node is settled.
        """
        if start_id not in self._nodes or end_id not in self._nodes:
            return []
        if start_id == end_id:
            return [self._nodes[start_id]]

        dist: Dict[str, float] = {start_id: 0.0}
        previous: Dict[str, str] = {}
        settled = set()
        counter = 0
        heap: List[Tuple[float, int, str]] = [(0.0, counter, start_id)]

        while heap:
            d, _, current = heapq.heappop(heap)
            if current in settled:
                continue
            settled.add(current)
            if current == end_id:
                break

            for neighbor_id in sorted(self._nodes[current].connections):
                if neighbor_id in settled:
                    continue
                new_dist = d + self._edge_nm[(current, neighbor_id)]
                if new_dist < dist.get(neighbor_id, float('inf')):
                    dist[neighbor_id] = new_dist
                    previous[neighbor_id] = current
                    counter += 1
                    heapq.heappush(heap, (new_dist, counter, neighbor_id))

        if end_id not in settled:
            return []

        path = [end_id]
        while path[-1] != start_id:
            path.append(previous[path[-1]])
        path.reverse()
        return [self._nodes[node_id] for node_id in path]

    def path_length_nm(self, path: List[NetworkNode]) -> float:
        """Total edge length along a node path."""
        total = 0.0
        for a, b in zip(path, path[1:]):
            total += haversine_distance(a.lat, a.lon, b.lat, b.lon)
        return total

    def is_symmetric(self) -> bool:
        """True if every connection is mirrored (always the case after load)."""
        return all(
            node.id in self._nodes[other].connections
            for node in self._nodes.values()
            for other in node.connections
        )


# Loaded once at import; shared read-only by every engine instance
DEFAULT_NETWORK = MaritimeNetwork(NETWORK_DEFINITION)


def get_default_network() -> MaritimeNetwork:
    return DEFAULT_NETWORK
