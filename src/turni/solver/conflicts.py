"""
Conflict Detector
=================
Finds commitments of team members that clash with a proposed slot.

Checks (all evaluated, conflicts accumulate):
    - Non-cancelled assignments of other members overlapping the range
    - APPROVED AVAILABLE/PREFERRED preferences of other members overlapping the range
    - Approved leave of other members covering the date (whole day)

Overlap is half-open: not (end1 <= start2 or end2 <= start1).
Missing time bounds default to the whole day (00:00-23:59).
"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from turni.models.context import ContextSnapshot
from turni.models.records import StatoValidazione, TipoPreferenza
from turni.models.slots import DateLike, time_ranges_overlap, to_date
from turni.utils.logging_setup import get_logger, log_function_call

logger = get_logger("turni.solver.conflicts")

ASSEGNAZIONE = "assegnazione"
PREFERENZA = "preferenza"
RICHIESTA = "richiesta"

_PREFERENCE_SCORES = {
    TipoPreferenza.PREFERRED: (90, "Preferisce questo turno"),
    TipoPreferenza.AVAILABLE: (70, "Si è dichiarato disponibile"),
    TipoPreferenza.UNAVAILABLE: (10, "Ha indicato indisponibilità (soft)"),
}
_DEFAULT_SCORE = (50, "Disponibile")


@dataclass
class ConflictInfo:
    """A single clash with an existing commitment."""
    tipo: str  # assegnazione, preferenza, richiesta
    entita_id: str
    collaboratore_id: str
    collaboratore_nome: str
    data: date
    descrizione: str
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "tipo": self.tipo,
            "entita_id": self.entita_id,
            "collaboratore_id": self.collaboratore_id,
            "collaboratore_nome": self.collaboratore_nome,
            "data": self.data.isoformat(),
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
            "descrizione": self.descrizione,
        }


@dataclass
class ConflictDetectionResult:
    conflicts: List[ConflictInfo] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0

    def to_dict(self) -> dict:
        return {
            "hasConflicts": self.has_conflicts,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "suggestions": list(self.suggestions),
        }


@dataclass
class CandidatoDisponibile:
    """A team member free for a slot, scored by stated preference."""
    id: str
    nome: str
    cognome: str
    score: int
    reason: str


class ConflictDetector:
    """Conflict checks over one Context Snapshot."""

    def __init__(self, snapshot: ContextSnapshot):
        self.snapshot = snapshot

    def _nome(self, collaboratore_id: str) -> str:
        coll = self.snapshot.find_collaboratore(collaboratore_id)
        return coll.nome_completo if coll else collaboratore_id

    def _conflicts_of(
        self,
        collaboratore_ids: List[str],
        data: date,
        ora_inizio: str,
        ora_fine: str,
        exclude_assegnazione_id: Optional[str] = None,
        include_preferenze: bool = True,
    ) -> List[ConflictInfo]:
        ids = set(collaboratore_ids)
        conflicts: List[ConflictInfo] = []

        for a in self.snapshot.assegnazioni_attive(d=data):
            if a.collaboratore_id not in ids:
                continue
            if exclude_assegnazione_id and a.id == exclude_assegnazione_id:
                continue
            if time_ranges_overlap(ora_inizio, ora_fine, a.inizio, a.fine):
                nome = self._nome(a.collaboratore_id)
                conflicts.append(ConflictInfo(
                    tipo=ASSEGNAZIONE,
                    entita_id=a.id,
                    collaboratore_id=a.collaboratore_id,
                    collaboratore_nome=nome,
                    data=data,
                    ora_inizio=a.inizio,
                    ora_fine=a.fine,
                    descrizione=f"{nome} già assegnato {a.inizio}-{a.fine}",
                ))

        if include_preferenze:
            for p in self.snapshot.preferenze:
                if p.collaboratore_id not in ids or p.data != data:
                    continue
                if p.stato_validazione != StatoValidazione.APPROVED:
                    continue
                if p.tipo not in (TipoPreferenza.AVAILABLE, TipoPreferenza.PREFERRED):
                    continue
                if time_ranges_overlap(ora_inizio, ora_fine, p.inizio, p.fine):
                    nome = self._nome(p.collaboratore_id)
                    conflicts.append(ConflictInfo(
                        tipo=PREFERENZA,
                        entita_id=p.id,
                        collaboratore_id=p.collaboratore_id,
                        collaboratore_nome=nome,
                        data=data,
                        ora_inizio=p.inizio,
                        ora_fine=p.fine,
                        descrizione=f"{nome} ha preferenza {p.tipo.value} {p.inizio}-{p.fine}",
                    ))

        for r in self.snapshot.richieste_per_data(data):
            if r.collaboratore_id not in ids:
                continue
            nome = self._nome(r.collaboratore_id)
            conflicts.append(ConflictInfo(
                tipo=RICHIESTA,
                entita_id=r.id,
                collaboratore_id=r.collaboratore_id,
                collaboratore_nome=nome,
                data=data,
                descrizione=f"{nome} in {r.tipo.value} ({r.data_inizio.isoformat()} - {r.data_fine.isoformat()})",
            ))

        return conflicts

    @log_function_call
    def detect_conflicts(
        self,
        nucleo_id: str,
        data: DateLike,
        ora_inizio: str,
        ora_fine: str,
        exclude_collaboratore_id: Optional[str] = None,
        exclude_assegnazione_id: Optional[str] = None,
    ) -> ConflictDetectionResult:
        """
        Conflicts between a proposed slot and other team members' commitments.

        Args:
            nucleo_id: Team of the slot
            data: Slot date
            ora_inizio: Slot start (HH:MM)
            ora_fine: Slot end (HH:MM)
            exclude_collaboratore_id: Worker being assigned (not a conflict with themself)
            exclude_assegnazione_id: Assignment being edited

        Returns:
            ConflictDetectionResult with conflicts and suggestions

        Raises:
            SnapshotLookupError: If the team is not in the snapshot
        """
        day = to_date(data)
        membri = self.snapshot.membri_nucleo(nucleo_id)
        if not membri:
            return ConflictDetectionResult()

        altri = [c.id for c in membri if c.id != exclude_collaboratore_id]
        conflicts = self._conflicts_of(altri, day, ora_inizio, ora_fine, exclude_assegnazione_id)

        suggestions: List[str] = []
        if conflicts:
            in_conflitto = {c.collaboratore_id for c in conflicts}
            liberi = [c for c in membri if c.id not in in_conflitto]
            if liberi:
                suggestions.append(
                    f"Collaboratori disponibili: {', '.join(c.nome_completo for c in liberi)}"
                )
            else:
                suggestions.append("Nessun collaboratore disponibile in questo nucleo per questo orario")

        logger.debug(f"Conflitti {nucleo_id} {day} {ora_inizio}-{ora_fine}: {len(conflicts)}")
        return ConflictDetectionResult(conflicts=conflicts, suggestions=suggestions)

    def own_conflicts(
        self,
        collaboratore_id: str,
        data: DateLike,
        ora_inizio: str,
        ora_fine: str,
        exclude_assegnazione_id: Optional[str] = None,
    ) -> List[ConflictInfo]:
        """A worker's own direct conflicts: overlapping assignments and leave."""
        return self._conflicts_of(
            [collaboratore_id],
            to_date(data),
            ora_inizio,
            ora_fine,
            exclude_assegnazione_id,
            include_preferenze=False,
        )

    def find_available_collaborators(
        self,
        nucleo_id: str,
        data: DateLike,
        ora_inizio: str,
        ora_fine: str,
    ) -> List[CandidatoDisponibile]:
        """
        Team members without a direct conflict, scored by preference.

        Scores: PREFERRED 90, AVAILABLE 70, none 50, UNAVAILABLE 10.
        Sorted by descending score (ties keep snapshot order).
        """
        day = to_date(data)
        risultati: List[CandidatoDisponibile] = []

        for coll in self.snapshot.membri_nucleo(nucleo_id):
            if self.own_conflicts(coll.id, day, ora_inizio, ora_fine):
                continue

            score, reason = _DEFAULT_SCORE
            for p in self.snapshot.preferenze:
                if (p.collaboratore_id == coll.id and p.data == day
                        and p.stato_validazione == StatoValidazione.APPROVED):
                    score, reason = _PREFERENCE_SCORES[p.tipo]
                    break

            risultati.append(CandidatoDisponibile(
                id=coll.id,
                nome=coll.nome,
                cognome=coll.cognome,
                score=score,
                reason=reason,
            ))

        return sorted(risultati, key=lambda c: -c.score)
