"""
Domain service: Economic and environmental metrics for a tree layout.
"""
from typing import Optional
from dataclasses import dataclass
import logging

from land_planner.config import settings
from land_planner.domain.models import Metrics

logger = logging.getLogger(__name__)


@dataclass
class MetricsConfig:
    """Per-tree coefficients used by the aggregator."""

    yield_per_tree: float = 50.0
    """kg of produce per tree per year"""

    water_per_tree_per_day: float = 50.0
    """Liters per tree per day"""

    carbon_per_tree: float = 21.7
    """kg CO₂ sequestered per tree per year"""

    maintenance_per_tree: float = 25.0
    price_per_kg: float = 2.5

    @classmethod
    def from_settings(cls) -> "MetricsConfig":
        return cls(
            yield_per_tree=settings.metrics_yield_per_tree,
            water_per_tree_per_day=settings.metrics_water_per_tree_per_day,
            carbon_per_tree=settings.metrics_carbon_per_tree,
            maintenance_per_tree=settings.metrics_maintenance_per_tree,
            price_per_kg=settings.metrics_price_per_kg,
        )


class MetricsAggregator:
    """Rolls a tree count up into yield, cost, revenue, ROI, water and carbon."""

    def __init__(self, config: Optional[MetricsConfig] = None):
        self.config = config or MetricsConfig.from_settings()

    def aggregate(
        self,
        tree_count: int,
        total_area: float = 0.0,
        plantable_area: float = 0.0,
    ) -> Metrics:
        """
        Compute metrics for a layout.

        Args:
            tree_count: Exact number of planted trees
            total_area: Boundary area in m², carried through to the record
            plantable_area: Buffered area in m², carried through to the record

        Returns:
            Metrics; roi is 0 when maintenance cost is 0
        """
        if tree_count < 0:
            raise ValueError(f"tree_count must be non-negative, got {tree_count}")

        cfg = self.config
        estimated_yield = tree_count * cfg.yield_per_tree
        maintenance_cost = tree_count * cfg.maintenance_per_tree
        estimated_revenue = estimated_yield * cfg.price_per_kg

        return Metrics(
            total_area=total_area,
            plantable_area=plantable_area,
            tree_count=tree_count,
            estimated_yield=estimated_yield,
            water_requirement=tree_count * cfg.water_per_tree_per_day * 365,
            carbon_sequestration=tree_count * cfg.carbon_per_tree,
            maintenance_cost=maintenance_cost,
            estimated_revenue=estimated_revenue,
            roi=return_on_investment(estimated_revenue, maintenance_cost),
        )


def return_on_investment(revenue: float, cost: float) -> float:
    """(revenue - cost) / cost · 100, or 0 when cost is 0."""
    if cost == 0:
        return 0.0
    return (revenue - cost) / cost * 100
