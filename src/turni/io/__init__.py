# turni/io - Snapshot loading and result export
from .loader import load_collaboratori_csv, load_snapshot, save_snapshot
from .results_export import coverage_matrix, export_results, result_to_json

__all__ = [
    "load_snapshot",
    "save_snapshot",
    "load_collaboratori_csv",
    "export_results",
    "result_to_json",
    "coverage_matrix",
]
