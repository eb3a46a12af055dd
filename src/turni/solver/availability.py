"""
Availability Calculator
=======================
Per-worker availability for a slot (team, date, duration).

Checks, first match wins:
    1. Rest day assigned on the weekday     → "Riposo <tipo>"
    2. Approved leave covering the date     → "<Tipo> approvato"
    3. Residual hours below shift duration  → "Ore insufficienti (X.Xh residue)"
    4. UNAVAILABLE preference for the date  → "Non disponibile (preferenza)"
Otherwise available, carrying any PREFERRED/AVAILABLE preference.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from turni.models.collaboratore import Collaboratore
from turni.models.context import ContextSnapshot
from turni.models.records import TipoPreferenza
from turni.models.slots import giorno_settimana
from turni.utils.logging_setup import get_logger

logger = get_logger("turni.solver.availability")

RuntimeHours = Dict[str, float]


@dataclass
class AvailabilityRecord:
    """Availability of one worker for one slot."""
    collaboratore_id: str
    nome_completo: str
    disponibile: bool
    ore_residue: float
    nuclei_appartenenza: List[str] = field(default_factory=list)
    nucleo_primario: Optional[str] = None
    motivo: Optional[str] = None
    preferenza: Optional[TipoPreferenza] = None

    def mark_unavailable(self, motivo: str) -> "AvailabilityRecord":
        self.disponibile = False
        self.motivo = motivo
        return self

    @property
    def is_preferred(self) -> bool:
        return self.preferenza == TipoPreferenza.PREFERRED


def init_runtime_hours(snapshot: ContextSnapshot) -> RuntimeHours:
    """Fresh per-call hours map seeded with already-assigned hours."""
    return {c.id: c.ore_gia_assegnate for c in snapshot.collaboratori}


def worker_availability(
    coll: Collaboratore,
    data: date,
    durata_ore: float,
    snapshot: ContextSnapshot,
    ore_runtime: Optional[RuntimeHours] = None,
    ignora_ore: bool = False,
) -> AvailabilityRecord:
    """
    Availability of a single worker.

    Args:
        coll: Worker
        data: Slot date
        durata_ore: Slot duration in hours
        snapshot: Context
        ore_runtime: Hours assigned so far (defaults to the snapshot's)
        ignora_ore: Skip the residual-hours check

    Returns:
        AvailabilityRecord
    """
    giorno = giorno_settimana(data)
    assegnate = (ore_runtime or {}).get(coll.id, coll.ore_gia_assegnate)
    record = AvailabilityRecord(
        collaboratore_id=coll.id,
        nome_completo=coll.nome_completo,
        disponibile=True,
        ore_residue=coll.ore_settimanali - assegnate,
        nuclei_appartenenza=list(coll.nuclei_appartenenza),
        nucleo_primario=coll.nucleo_primario,
    )

    riposo = snapshot.riposo_per(coll.id, giorno)
    if riposo is not None:
        return record.mark_unavailable(f"Riposo {riposo.tipo_riposo.value}")

    richiesta = snapshot.richiesta_per(coll.id, data)
    if richiesta is not None:
        return record.mark_unavailable(f"{richiesta.tipo.value.capitalize()} approvato")

    if not ignora_ore and record.ore_residue < durata_ore:
        return record.mark_unavailable(f"Ore insufficienti ({record.ore_residue:.1f}h residue)")

    preferenza = snapshot.preferenza_per(coll.id, data)
    if preferenza is not None:
        record.preferenza = preferenza.tipo
        if preferenza.tipo == TipoPreferenza.UNAVAILABLE:
            return record.mark_unavailable("Non disponibile (preferenza)")

    return record


def calculate_availability(
    nucleo_id: str,
    data: date,
    durata_ore: float,
    snapshot: ContextSnapshot,
    ore_runtime: Optional[RuntimeHours] = None,
    ignora_ore: bool = False,
) -> List[AvailabilityRecord]:
    """
    Availability of every member of a team for a slot, in snapshot order.

    Raises:
        SnapshotLookupError: If the team is not in the snapshot
    """
    records = [
        worker_availability(c, data, durata_ore, snapshot, ore_runtime, ignora_ore)
        for c in snapshot.membri_nucleo(nucleo_id)
    ]
    disponibili = sum(1 for r in records if r.disponibile)
    logger.debug(f"Disponibilità {nucleo_id} {data}: {disponibili}/{len(records)} disponibili")
    return records
