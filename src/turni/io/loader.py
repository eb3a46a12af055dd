"""Snapshot loading from JSON and worker roster import from CSV."""
import json
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from turni.models.collaboratore import Collaboratore
from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.validated import SnapshotModel
from turni.utils.logging_setup import get_logger

logger = get_logger("turni.io.loader")


def _safe_float(value, default: float = 0.0) -> float:
    """Safely convert value to float."""
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def _split_list(value) -> List[str]:
    """Split a '|' or ',' separated cell into trimmed items."""
    text = str(value or "").strip()
    if not text:
        return []
    sep = "|" if "|" in text else ","
    return [item.strip() for item in text.split(sep) if item.strip()]


def load_snapshot(
    source: Union[str, Path, dict],
    config: Optional[EngineConfig] = None,
) -> ContextSnapshot:
    """
    Load and validate a Context Snapshot.

    Args:
        source: Path to a JSON file, or an already-parsed dictionary
        config: Supplies defaults for rule bodies that omit their hours

    Returns:
        ContextSnapshot

    Raises:
        pydantic.ValidationError: If the payload breaks the input contract
        FileNotFoundError: If the path does not exist
    """
    if isinstance(source, dict):
        payload = source
    else:
        path = Path(source)
        with path.open(encoding="utf-8") as f:
            payload = json.load(f)
        logger.debug(f"Letto snapshot da {path}")

    snapshot = SnapshotModel.model_validate(payload).to_snapshot(config)
    logger.info(
        f"Snapshot {snapshot.week_start} - {snapshot.week_end}: "
        f"{len(snapshot.collaboratori)} collaboratori, {len(snapshot.nuclei)} nuclei"
    )
    return snapshot


def save_snapshot(snapshot: ContextSnapshot, path: Union[str, Path]) -> Path:
    """Write a snapshot as JSON (snake_case keys)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2)
    return path


def load_collaboratori_csv(source: Union[str, Path, pd.DataFrame]) -> List[Collaboratore]:
    """
    Load a worker roster from CSV file or DataFrame.

    Columns: id, nome (required); cognome, ore_settimanali,
    ore_gia_assegnate, nuclei_appartenenza ('|' or ',' separated),
    nucleo_primario, tipo_contratto (optional).

    Returns:
        List of Collaboratore objects (rows without id or nome are skipped)
    """
    if isinstance(source, pd.DataFrame):
        df = source.copy()
    else:
        df = pd.read_csv(source, dtype=str)

    df = df.fillna("")

    missing = {"id", "nome"} - set(df.columns)
    if missing:
        raise ValueError(f"CSV must have columns: {', '.join(sorted(missing))}")

    collaboratori = []
    for _, row in df.iterrows():
        coll_id = str(row["id"]).strip()
        nome = str(row["nome"]).strip()
        if not coll_id or not nome:
            continue

        nuclei = _split_list(row.get("nuclei_appartenenza", ""))
        primario = str(row.get("nucleo_primario", "")).strip() or (nuclei[0] if nuclei else None)

        collaboratori.append(Collaboratore(
            id=coll_id,
            nome=nome,
            cognome=str(row.get("cognome", "")).strip(),
            ore_settimanali=_safe_float(row.get("ore_settimanali"), 40.0),
            ore_gia_assegnate=_safe_float(row.get("ore_gia_assegnate"), 0.0),
            nuclei_appartenenza=tuple(nuclei),
            nucleo_primario=primario,
            tipo_contratto=str(row.get("tipo_contratto", "")).strip() or None,
        ))

    logger.info(f"Importati {len(collaboratori)} collaboratori")
    return collaboratori
