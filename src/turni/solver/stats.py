"""
Generation Statistics
=====================
Coverage counts, workload distribution, equity score and confidence.

Single source of truth for the aggregates attached to a
WeekGenerationResult.
"""
from statistics import pstdev
from typing import List, Optional

from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.schedule import (
    CoperturaStatus,
    CoverageStats,
    GeneratedShift,
    WorkloadDistribution,
    WorkloadEntry,
)
from turni.solver.availability import RuntimeHours
from turni.utils.logging_setup import get_logger

logger = get_logger("turni.solver.stats")


def coverage_status(selezionati: int, richiesti: int) -> CoperturaStatus:
    """ok when required staff is met, parziale when some, scoperta when none."""
    if selezionati >= richiesti:
        return CoperturaStatus.OK
    if selezionati > 0:
        return CoperturaStatus.PARZIALE
    return CoperturaStatus.SCOPERTA


def shift_confidence(
    status: CoperturaStatus,
    any_preferred: bool,
    any_relocation: bool,
    config: Optional[EngineConfig] = None,
) -> float:
    """
    Confidence of a generated shift.

    Base by coverage (0.9/0.6/0.3), +0.05 when a selected worker
    prefers the date, -0.05 when a selected worker is relocated,
    clamped to [0.1, 0.99].
    """
    config = config or EngineConfig()
    base = {
        CoperturaStatus.OK: config.confidence_ok,
        CoperturaStatus.PARZIALE: config.confidence_parziale,
        CoperturaStatus.SCOPERTA: config.confidence_scoperta,
    }[status]
    if any_preferred:
        base += config.confidence_bonus_preferred
    if any_relocation:
        base -= config.confidence_penalita_spostamento
    return round(min(config.confidence_max, max(config.confidence_min, base)), 4)


def calculate_coverage_stats(turni: List[GeneratedShift]) -> CoverageStats:
    """Count shifts by coverage status."""
    stats = CoverageStats(totale=len(turni))
    for t in turni:
        if t.copertura_status == CoperturaStatus.OK:
            stats.coperti += 1
        elif t.copertura_status == CoperturaStatus.PARZIALE:
            stats.parziali += 1
        else:
            stats.scoperti += 1
    stats.percentuale = round(stats.coperti / stats.totale * 100, 2) if stats.totale else 0.0
    return stats


def equity_score(utilizzi: List[float]) -> float:
    """max(0, 1 - pstdev(utilization %) / 100); 1.0 for an empty set."""
    if not utilizzi:
        return 1.0
    return max(0.0, 1.0 - pstdev(utilizzi) / 100)


def calculate_workload(snapshot: ContextSnapshot, ore_runtime: RuntimeHours) -> WorkloadDistribution:
    """
    Workload per worker from the runtime hours map.

    Args:
        snapshot: Context (worker order and contracts)
        ore_runtime: Hours per worker at the end of the pass

    Returns:
        WorkloadDistribution with equity score
    """
    entries: List[WorkloadEntry] = []
    for coll in snapshot.collaboratori:
        assegnate = ore_runtime.get(coll.id, coll.ore_gia_assegnate)
        utilizzo = assegnate / coll.ore_settimanali * 100 if coll.ore_settimanali > 0 else 0.0
        entries.append(WorkloadEntry(
            id=coll.id,
            nome=coll.nome_completo,
            ore_assegnate=assegnate,
            ore_contratto=coll.ore_settimanali,
            percentuale_utilizzo=round(utilizzo, 2),
        ))

    score = equity_score([e.percentuale_utilizzo for e in entries])
    logger.debug(f"Workload: {len(entries)} collaboratori, equità {score:.3f}")
    return WorkloadDistribution(per_collaboratore=entries, equita_score=round(score, 4))


def confidence_average(turni: List[GeneratedShift]) -> float:
    if not turni:
        return 0.0
    return round(sum(t.confidence for t in turni) / len(turni), 4)
