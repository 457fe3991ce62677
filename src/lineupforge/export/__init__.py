"""Lineup export utilities."""

from .contest import ContestExportError, export_lineups_to_csv, lineups_to_summary_csv

__all__ = [
    "ContestExportError",
    "export_lineups_to_csv",
    "lineups_to_summary_csv",
]
