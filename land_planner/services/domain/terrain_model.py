"""
Domain service: Synthetic terrain and per-tree growth attributes.

Terrain is a pure function of absolute position. The only randomness is
the maturity-age jitter, drawn from an injected random.Random.
"""
from typing import Optional
import math
import random
import logging

from land_planner.config import settings
from land_planner.domain.models import (
    Point,
    SoilType,
    TerrainSample,
    TerrainSummary,
    TreePoint,
)

logger = logging.getLogger(__name__)

SOIL_SEQUENCE = (SoilType.CLAY, SoilType.LOAM, SoilType.SANDY, SoilType.SILT)

SOIL_FACTORS = {
    SoilType.CLAY: 0.7,
    SoilType.LOAM: 1.0,
    SoilType.SANDY: 0.8,
    SoilType.SILT: 0.9,
}

BASE_MATURITY_AGE = 5.0
MATURITY_JITTER = 2.0


def sample_terrain(point: Point) -> TerrainSample:
    """
    Terrain at a position.

    elevation   = sin(x/50)·cos(y/50)·10 + 100
    soil        = [clay, loam, sandy, silt][floor((x + y) mod 4)]
    sun         = clamp(sin(x/100)·0.5 + 0.5, 0, 1)
    """
    x, y = point.x, point.y
    elevation = math.sin(x / 50) * math.cos(y / 50) * 10 + 100
    soil_index = int(math.floor((x + y) % 4)) % 4
    sun_exposure = min(1.0, max(0.0, math.sin(x / 100) * 0.5 + 0.5))
    return TerrainSample(
        elevation=elevation,
        soil_type=SOIL_SEQUENCE[soil_index],
        sun_exposure=sun_exposure,
    )


class TerrainModel:
    """Maps planting positions to trees with growth attributes."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Source for maturity-age jitter; defaults to a generator
                seeded with settings.terrain_seed
        """
        self.rng = rng if rng is not None else random.Random(settings.terrain_seed)

    def tree_at(self, point: Point) -> TreePoint:
        terrain = sample_terrain(point)
        soil_factor = SOIL_FACTORS[terrain.soil_type]
        return TreePoint(
            position=point,
            terrain=terrain,
            growth_rate=0.5 + terrain.sun_exposure * 0.5 * soil_factor,
            maturity_age=BASE_MATURITY_AGE + self.rng.uniform(0, MATURITY_JITTER),
            soil_suitability=soil_factor,
            water_requirement=50 + terrain.elevation / 10,
        )

    def trees_at(self, points: list[Point]) -> list[TreePoint]:
        """Build trees in order, so jitter draws follow the point order."""
        return [self.tree_at(p) for p in points]


def summarize_terrain(trees: list[TreePoint]) -> TerrainSummary:
    """Mean terrain figures and soil distribution across trees."""
    if not trees:
        return TerrainSummary()

    count = len(trees)
    distribution: dict[SoilType, int] = {}
    for tree in trees:
        soil = tree.terrain.soil_type
        distribution[soil] = distribution.get(soil, 0) + 1

    return TerrainSummary(
        mean_growth_rate=sum(t.growth_rate for t in trees) / count,
        mean_sun_exposure=sum(t.terrain.sun_exposure for t in trees) / count,
        mean_elevation=sum(t.terrain.elevation for t in trees) / count,
        daily_water_requirement=sum(t.water_requirement for t in trees),
        soil_distribution=distribution,
    )
