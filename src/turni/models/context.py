"""
Context Snapshot
================
Immutable bundle of every entity needed for one computation.

Built by the persistence collaborator (see turni.io.loader) and never
mutated by the engine. Derived snapshots (e.g. with extra rest days
folded in) are new values created with dataclasses.replace.
"""
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .collaboratore import Collaboratore
from .config import EngineConfig
from .constraints import TemplateVincolo
from .criticita import CriticitaContinuativa, PeriodoCritico
from .nucleo import Nucleo
from .records import (
    Assegnazione,
    PatternStorico,
    Preferenza,
    RichiestaApprovata,
    RiposoAssegnato,
    TipoPreferenza,
)
from .slots import DateLike, giorno_settimana, nome_festivita, nome_giorno, normalize_day, to_date


class SnapshotLookupError(KeyError):
    """A referenced team or worker id is not present in the snapshot."""


def _pick(d: dict, *keys, default=None):
    """First present key among snake_case / camelCase spellings."""
    for key in keys:
        if key in d and d[key] is not None:
            return d[key]
    return default


@dataclass(frozen=True)
class ContextSnapshot:
    """All entities for one scheduling computation (read-only)."""

    week_start: date
    week_end: date
    collaboratori: Tuple[Collaboratore, ...] = ()
    nuclei: Tuple[Nucleo, ...] = ()
    criticita_continuative: Tuple[CriticitaContinuativa, ...] = ()
    periodi_critici: Tuple[PeriodoCritico, ...] = ()
    riposi: Tuple[RiposoAssegnato, ...] = ()
    preferenze: Tuple[Preferenza, ...] = ()
    richieste_approvate: Tuple[RichiestaApprovata, ...] = ()
    pattern_storici: Tuple[PatternStorico, ...] = ()
    assegnazioni: Tuple[Assegnazione, ...] = ()
    vincoli: Tuple[TemplateVincolo, ...] = ()

    # Closed days
    giorni_chiusura: Tuple[int, ...] = ()
    chiuso_festivi: bool = False

    azienda_id: str = ""

    _collaboratori_by_id: Dict[str, Collaboratore] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )
    _nuclei_by_id: Dict[str, Nucleo] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self):
        if self.week_end < self.week_start:
            raise ValueError(f"week_end {self.week_end} is before week_start {self.week_start}")
        object.__setattr__(self, "_collaboratori_by_id", {c.id: c for c in self.collaboratori})
        object.__setattr__(self, "_nuclei_by_id", {n.id: n for n in self.nuclei})

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_collaboratore(self, collaboratore_id: str) -> Collaboratore:
        """Raises SnapshotLookupError if absent."""
        try:
            return self._collaboratori_by_id[collaboratore_id]
        except KeyError:
            raise SnapshotLookupError(f"Collaboratore non trovato: {collaboratore_id}") from None

    def find_collaboratore(self, collaboratore_id: Optional[str]) -> Optional[Collaboratore]:
        if collaboratore_id is None:
            return None
        return self._collaboratori_by_id.get(collaboratore_id)

    def get_nucleo(self, nucleo_id: str) -> Nucleo:
        """Raises SnapshotLookupError if absent."""
        try:
            return self._nuclei_by_id[nucleo_id]
        except KeyError:
            raise SnapshotLookupError(f"Nucleo non trovato: {nucleo_id}") from None

    def find_nucleo(self, nucleo_id: Optional[str]) -> Optional[Nucleo]:
        if nucleo_id is None:
            return None
        return self._nuclei_by_id.get(nucleo_id)

    def membri_nucleo(self, nucleo_id: str) -> List[Collaboratore]:
        """
        Workers belonging to a team, in snapshot order.

        A worker belongs to a team if the team is in their memberships
        or they are listed among the team's members.
        """
        nucleo = self.get_nucleo(nucleo_id)
        membri = set(nucleo.membri)
        return [
            c for c in self.collaboratori
            if c.appartiene_a(nucleo_id) or c.id in membri
        ]

    def nuclei_di(self, collaboratore_id: str) -> List[Nucleo]:
        """Teams a worker belongs to, in snapshot order."""
        coll = self.find_collaboratore(collaboratore_id)
        return [
            n for n in self.nuclei
            if collaboratore_id in n.membri or (coll is not None and coll.appartiene_a(n.id))
        ]

    # ------------------------------------------------------------------
    # Record queries
    # ------------------------------------------------------------------

    def riposo_per(self, collaboratore_id: str, giorno: int) -> Optional[RiposoAssegnato]:
        for r in self.riposi:
            if r.collaboratore_id == collaboratore_id and r.giorno_settimana == giorno:
                return r
        return None

    def richiesta_per(self, collaboratore_id: str, d: DateLike) -> Optional[RichiestaApprovata]:
        day = to_date(d)
        for r in self.richieste_approvate:
            if r.collaboratore_id == collaboratore_id and r.copre(day):
                return r
        return None

    def richieste_per_data(self, d: DateLike) -> List[RichiestaApprovata]:
        day = to_date(d)
        return [r for r in self.richieste_approvate if r.copre(day)]

    def preferenza_per(
        self,
        collaboratore_id: str,
        d: DateLike,
        tipo: Optional[TipoPreferenza] = None,
    ) -> Optional[Preferenza]:
        """First non-rejected preference of a worker for a date (optionally of a kind)."""
        day = to_date(d)
        for p in self.preferenze:
            if p.collaboratore_id != collaboratore_id or p.data != day or not p.effettiva:
                continue
            if tipo is None or p.tipo == tipo:
                return p
        return None

    def assegnazioni_attive(
        self,
        collaboratore_id: Optional[str] = None,
        d: Optional[DateLike] = None,
    ) -> List[Assegnazione]:
        """Non-cancelled assignments, optionally filtered by worker and date."""
        day = to_date(d) if d is not None else None
        return [
            a for a in self.assegnazioni
            if a.attiva
            and (collaboratore_id is None or a.collaboratore_id == collaboratore_id)
            and (day is None or a.data == day)
        ]

    def criticita_per_giorno(self, giorno: int) -> List[CriticitaContinuativa]:
        return [c for c in self.criticita_continuative if c.giorno_settimana == giorno]

    def periodi_attivi(self, d: DateLike) -> List[PeriodoCritico]:
        day = to_date(d)
        return [p for p in self.periodi_critici if p.attivo and p.copre(day)]

    def pattern_per(self, nucleo_id: str, giorno: int) -> Optional[PatternStorico]:
        for p in self.pattern_storici:
            if p.nucleo_id == nucleo_id and p.giorno_settimana == giorno:
                return p
        return None

    def vincoli_attivi(self) -> List[TemplateVincolo]:
        """Active templates ordered by descending priority (stable)."""
        return sorted((v for v in self.vincoli if v.attivo), key=lambda v: -v.priorita)

    def motivo_chiusura(self, d: DateLike) -> Optional[str]:
        """Why the company is closed on a date, or None if open."""
        day = to_date(d)
        giorno = giorno_settimana(day)
        if giorno in self.giorni_chiusura:
            return f"{nome_giorno(giorno)}: giorno di chiusura"
        if self.chiuso_festivi:
            festa = nome_festivita(day)
            if festa:
                return f"{day.isoformat()}: festività ({festa})"
        return None

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def with_riposi(self, nuovi: Iterable[RiposoAssegnato]) -> "ContextSnapshot":
        """New snapshot with extra rest days appended."""
        return replace(self, riposi=self.riposi + tuple(nuovi))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "azienda_id": self.azienda_id,
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "collaboratori": [c.to_dict() for c in self.collaboratori],
            "nuclei": [n.to_dict() for n in self.nuclei],
            "criticita_continuative": [c.to_dict() for c in self.criticita_continuative],
            "periodi_critici": [p.to_dict() for p in self.periodi_critici],
            "riposi": [r.to_dict() for r in self.riposi],
            "preferenze": [p.to_dict() for p in self.preferenze],
            "richieste_approvate": [r.to_dict() for r in self.richieste_approvate],
            "pattern_storici": [p.to_dict() for p in self.pattern_storici],
            "assegnazioni": [a.to_dict() for a in self.assegnazioni],
            "vincoli": [v.to_dict() for v in self.vincoli],
            "giorni_chiusura": list(self.giorni_chiusura),
            "chiuso_festivi": self.chiuso_festivi,
        }

    @classmethod
    def from_dict(cls, d: dict, config: Optional[EngineConfig] = None) -> "ContextSnapshot":
        """
        Create from a dictionary using snake_case or camelCase keys.

        Args:
            d: Snapshot dictionary
            config: Supplies defaults for rule bodies that omit their hours

        Returns:
            ContextSnapshot
        """
        config = config or EngineConfig()
        week_start = to_date(_pick(d, "week_start", "weekStart"))
        week_end_raw = _pick(d, "week_end", "weekEnd")
        week_end = to_date(week_end_raw) if week_end_raw else week_start + timedelta(days=6)

        giorni_chiusura = []
        for g in _pick(d, "giorni_chiusura", "giorniChiusura", default=[]):
            n = normalize_day(g)
            if n is None:
                raise ValueError(f"Invalid closed day: {g!r}")
            giorni_chiusura.append(n)

        return cls(
            azienda_id=str(_pick(d, "azienda_id", "aziendaId", default="")),
            week_start=week_start,
            week_end=week_end,
            collaboratori=tuple(Collaboratore.from_dict(x) for x in _pick(d, "collaboratori", default=[])),
            nuclei=tuple(Nucleo.from_dict(x) for x in _pick(d, "nuclei", default=[])),
            criticita_continuative=tuple(
                CriticitaContinuativa.from_dict(x)
                for x in _pick(d, "criticita_continuative", "criticitaContinuative", default=[])
            ),
            periodi_critici=tuple(
                PeriodoCritico.from_dict(x) for x in _pick(d, "periodi_critici", "periodiCritici", default=[])
            ),
            riposi=tuple(RiposoAssegnato.from_dict(x) for x in _pick(d, "riposi", default=[])),
            preferenze=tuple(Preferenza.from_dict(x) for x in _pick(d, "preferenze", default=[])),
            richieste_approvate=tuple(
                RichiestaApprovata.from_dict(x)
                for x in _pick(d, "richieste_approvate", "richiesteApprovate", default=[])
            ),
            pattern_storici=tuple(
                PatternStorico.from_dict(x) for x in _pick(d, "pattern_storici", "patternStorici", default=[])
            ),
            assegnazioni=tuple(Assegnazione.from_dict(x) for x in _pick(d, "assegnazioni", default=[])),
            vincoli=tuple(
                TemplateVincolo.from_dict(
                    x, config.default_ore_max_settimanali, config.default_riposo_minimo_ore
                )
                for x in _pick(d, "vincoli", default=[])
            ),
            giorni_chiusura=tuple(giorni_chiusura),
            chiuso_festivi=bool(_pick(d, "chiuso_festivi", "chiusoFestivi", default=False)),
        )
