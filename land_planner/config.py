"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Boundary Capture
    capture_canvas_width: float = Field(
        default=800.0,
        description="Width of the capture canvas in working units"
    )
    capture_canvas_height: float = Field(
        default=600.0,
        description="Height of the capture canvas in working units"
    )
    capture_padding: float = Field(
        default=20.0,
        description="Accepted points are clamped into [padding, dimension - padding]"
    )
    capture_grid_size: float = Field(
        default=20.0,
        description="Grid size used when snapping is enabled"
    )
    capture_snap_to_grid: bool = Field(
        default=True,
        description="Whether captured points snap to the grid"
    )
    capture_select_threshold: float = Field(
        default=10.0,
        description="Pixel radius within which a click selects an existing vertex"
    )
    capture_close_threshold: float = Field(
        default=15.0,
        description="Pixel radius around the first vertex that signals a closable boundary"
    )
    capture_history_limit: int = Field(
        default=50,
        description="Maximum number of snapshots kept in the undo history"
    )

    # Layout Defaults
    layout_buffer_distance: float = Field(
        default=2.0,
        description="Inward buffer from the boundary in meters"
    )
    layout_min_edge_distance: float | None = Field(
        default=None,
        description="Minimum tree-to-edge distance in meters (defaults to the buffer distance)"
    )
    layout_default_spacing: float = Field(
        default=7.0,
        description="Default spacing between trees in meters"
    )
    layout_default_scale: float = Field(
        default=1.0,
        description="Default meters per working unit"
    )
    layout_cache_size: int = Field(
        default=128,
        description="Number of memoized layout analyses"
    )
    layout_max_grid_cells: int = Field(
        default=2_000_000,
        description="Largest candidate grid (columns x rows) a layout may enumerate"
    )

    # Terrain Model
    terrain_seed: int = Field(
        default=42,
        description="Seed for maturity-age jitter"
    )

    # Metrics Coefficients
    metrics_yield_per_tree: float = Field(
        default=50.0,
        description="Yield per tree in kg per year"
    )
    metrics_water_per_tree_per_day: float = Field(
        default=50.0,
        description="Water per tree in liters per day"
    )
    metrics_carbon_per_tree: float = Field(
        default=21.7,
        description="Carbon sequestered per tree in kg CO₂ per year"
    )
    metrics_maintenance_per_tree: float = Field(
        default=25.0,
        description="Maintenance cost per tree per year"
    )
    metrics_price_per_kg: float = Field(
        default=2.5,
        description="Sale price per kg of yield"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Land Planner",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LAND_PLANNER_",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()
