"""
Results Export
==============
Writes engine results to JSON for analysis by scripts or services.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from turni.models.schedule import RiposiAssignmentResult, WeekGenerationResult
from turni.utils.logging_setup import get_logger

logger = get_logger("turni.io.results_export")

RESULTS_DIR = Path("results")

Result = Union[WeekGenerationResult, RiposiAssignmentResult]


def result_to_json(result: Result) -> str:
    """Stable JSON text of a result (identical input → identical text)."""
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2, sort_keys=True)


def export_results(
    result: Result,
    run_name: Optional[str] = None,
    results_dir: Union[str, Path] = RESULTS_DIR,
) -> Path:
    """
    Export a result to results/<run_name>.json.

    Args:
        result: Week generation or rest-day result
        run_name: File stem (defaults to a timestamp)
        results_dir: Output directory

    Returns:
        Path to the exported JSON file
    """
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_name = run_name or f"run_{timestamp}"
    output_path = results_dir / f"{run_name}.json"

    output_path.write_text(result_to_json(result), encoding="utf-8")
    logger.info(f"Risultati esportati in {output_path}")
    return output_path


def coverage_matrix(result: WeekGenerationResult) -> pd.DataFrame:
    """
    Team × date matrix of coverage ("selected/required"), for display.

    Returns:
        DataFrame indexed by team name with ISO dates as columns
    """
    if not result.turni:
        return pd.DataFrame()
    rows = [
        {
            "nucleo": t.nucleo_nome,
            "data": t.data.isoformat(),
            "copertura": f"{len(t.selezionati)}/{t.num_collaboratori_richiesti}",
        }
        for t in result.turni
    ]
    df = pd.DataFrame(rows)
    return df.pivot_table(index="nucleo", columns="data", values="copertura", aggfunc="first")
