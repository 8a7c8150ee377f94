"""Read-only adjacency structure over a game's regions."""

from typing import Iterator, List

from ..models.region import Region
from .errors import UnknownRegion


class RegionGraph:
    """Lookup and adjacency queries over a fixed region list.

    The map generator owns geometry and adjacency; this class only reads
    them. Construction checks that ``connected`` is symmetric.
    """

    def __init__(self, regions: List[Region]):
        self._regions = regions
        for region in regions:
            for other_id in region.connected:
                other = self.get(other_id)
                if region.id not in other.connected:
                    raise ValueError(
                        f"Adjacency is not symmetric: {region.id} -> {other_id}"
                    )

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def get(self, region_id: int) -> Region:
        """Look up a region by id.

        Raises:
            UnknownRegion: If no region has this id
        """
        if not isinstance(region_id, int) or isinstance(region_id, bool):
            raise UnknownRegion(region_id)
        if not (0 <= region_id < len(self._regions)):
            raise UnknownRegion(region_id)
        return self._regions[region_id]

    def neighbors(self, region_id: int) -> frozenset:
        return self.get(region_id).connected

    def is_adjacent_or_self(self, a: int, b: int) -> bool:
        return a == b or b in self.neighbors(a)

    def occupied(self) -> List[Region]:
        """Regions holding units, in id order."""
        return [region for region in self._regions if region.units]
