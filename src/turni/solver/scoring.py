"""
Priority Scorer / Selector
==========================
Rank availability records for a shift and select the top N.

Sort order (stable, ties keep snapshot order):
    1. Available before unavailable
    2. PREFERRED before others
    3. More residual hours first (spreads load)
    4. Primary team matching the slot's team first

The numeric score (100×available + 50×preferred + min(residual, 40))
is informational only; it never drives the sort.
"""
from typing import Dict, List, Optional

from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.schedule import CollaboratoreSuggerito
from turni.solver.availability import AvailabilityRecord
from turni.utils.logging_setup import get_logger

logger = get_logger("turni.solver.scoring")


def candidate_score(record: AvailabilityRecord, config: Optional[EngineConfig] = None) -> float:
    """Display score for a candidate."""
    config = config or EngineConfig()
    score = 0.0
    if record.disponibile:
        score += config.punteggio_disponibile
    if record.is_preferred:
        score += config.punteggio_preferred
    score += min(record.ore_residue, config.punteggio_max_ore_residue)
    return score


def rank_candidates(records: List[AvailabilityRecord], nucleo_id: str) -> List[AvailabilityRecord]:
    """Sort records by assignment priority (returns a new list)."""
    return sorted(
        records,
        key=lambda r: (
            not r.disponibile,
            not r.is_preferred,
            -r.ore_residue,
            r.nucleo_primario != nucleo_id,
        ),
    )


def relocation_source(record: AvailabilityRecord, nucleo_id: str, snapshot: ContextSnapshot) -> Optional[str]:
    """Name of the primary team a multi-team worker would be moved from, if any."""
    if len(record.nuclei_appartenenza) < 2:
        return None
    if not record.nucleo_primario or record.nucleo_primario == nucleo_id:
        return None
    primario = snapshot.find_nucleo(record.nucleo_primario)
    return primario.nome if primario else None


def select_candidates(
    ranked: List[AvailabilityRecord],
    required: int,
    nucleo_id: str,
    snapshot: ContextSnapshot,
    config: Optional[EngineConfig] = None,
    avvisi: Optional[Dict[str, List[str]]] = None,
) -> List[CollaboratoreSuggerito]:
    """
    Build the full candidate list, flagging the top `required` available workers.

    Args:
        ranked: Records already in priority order
        required: Staff needed
        nucleo_id: Slot's team
        snapshot: Context (for relocation source names)
        config: Score weights
        avvisi: SOFT constraint notes per worker id

    Returns:
        Every candidate (unavailable ones included, annotated)
    """
    avvisi = avvisi or {}
    result: List[CollaboratoreSuggerito] = []
    selezionati = 0

    for record in ranked:
        selezionato = record.disponibile and selezionati < required
        if selezionato:
            selezionati += 1

        result.append(CollaboratoreSuggerito(
            id=record.collaboratore_id,
            nome=record.nome_completo,
            disponibile=record.disponibile,
            ore_residue=record.ore_residue,
            nuclei_appartenenza=list(record.nuclei_appartenenza),
            nucleo_primario=record.nucleo_primario,
            spostabile_da=relocation_source(record, nucleo_id, snapshot) if selezionato else None,
            motivo_non_disponibile=record.motivo,
            preferenza=record.preferenza,
            punteggio=candidate_score(record, config),
            selezionato=selezionato,
            avvisi_vincoli=list(avvisi.get(record.collaboratore_id, [])),
        ))

    logger.debug(
        f"Selezione {nucleo_id}: {selezionati}/{required} "
        f"[{', '.join(c.nome for c in result if c.selezionato)}]"
    )
    return result
