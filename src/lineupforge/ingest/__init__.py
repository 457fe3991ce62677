"""Input adapters that normalize raw player data."""

from .projections import (
    DEFAULT_PROJECTION_MAPPING,
    LoadReport,
    ProjectionRow,
    load_projection_csv,
    load_records_from_bytes,
    load_records_from_csv,
    read_projection_rows,
    rows_to_records,
)
from .sample import sample_players

__all__ = [
    "DEFAULT_PROJECTION_MAPPING",
    "LoadReport",
    "ProjectionRow",
    "load_projection_csv",
    "load_records_from_bytes",
    "load_records_from_csv",
    "read_projection_rows",
    "rows_to_records",
    "sample_players",
]
