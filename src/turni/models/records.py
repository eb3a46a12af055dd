"""
Scheduling Records
==================
Preferences, approved leave, rest-day assignments, existing shift
assignments and historical patterns.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from .slots import DateLike, OrarioTurno, durata_ore, normalize_day, to_date


class TipoPreferenza(str, Enum):
    """Worker preference for a date (soft signal)."""
    PREFERRED = "PREFERRED"
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


class StatoValidazione(str, Enum):
    """Validation status of a preference."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED_CONFLICT = "REJECTED_CONFLICT"
    REJECTED_CRITICAL = "REJECTED_CRITICAL"
    REJECTED_CONSTRAINT = "REJECTED_CONSTRAINT"

    @property
    def is_rejected(self) -> bool:
        return self.value.startswith("REJECTED")


class TipoRichiesta(str, Enum):
    """Kind of approved leave."""
    FERIE = "ferie"
    PERMESSO = "permesso"
    RIPOSO = "riposo"


class TipoRiposo(str, Enum):
    """Kind of rest-day assignment."""
    INTERO = "intero"
    MEZZA_MATTINA = "mezza_mattina"
    MEZZA_POMERIGGIO = "mezza_pomeriggio"

    @property
    def is_mezza(self) -> bool:
        return self != TipoRiposo.INTERO


class StatoAssegnazione(str, Enum):
    """Status of an existing shift assignment."""
    CONFERMATO = "confermato"
    PROPOSTO = "proposto"
    ANNULLATO = "annullato"


@dataclass(frozen=True)
class Preferenza:
    """Worker preference for a date and optional time range."""
    collaboratore_id: str
    data: date
    tipo: TipoPreferenza
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None
    stato_validazione: StatoValidazione = StatoValidazione.APPROVED
    id: str = ""

    @property
    def inizio(self) -> str:
        return self.ora_inizio or "00:00"

    @property
    def fine(self) -> str:
        return self.ora_fine or "23:59"

    @property
    def effettiva(self) -> bool:
        """Rejected preferences carry no signal."""
        return not self.stato_validazione.is_rejected

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "collaboratore_id": self.collaboratore_id,
            "data": self.data.isoformat(),
            "tipo": self.tipo.value,
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
            "stato_validazione": self.stato_validazione.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Preferenza":
        return cls(
            id=str(d.get("id") or ""),
            collaboratore_id=str(d["collaboratore_id"]),
            data=to_date(d["data"]),
            tipo=TipoPreferenza(str(d["tipo"]).upper()),
            ora_inizio=d.get("ora_inizio"),
            ora_fine=d.get("ora_fine"),
            stato_validazione=StatoValidazione(str(d.get("stato_validazione") or "APPROVED").upper()),
        )


@dataclass(frozen=True)
class RichiestaApprovata:
    """Approved leave over an inclusive date range. Always wins over preferences."""
    collaboratore_id: str
    tipo: TipoRichiesta
    data_inizio: date
    data_fine: date
    id: str = ""

    def copre(self, d: DateLike) -> bool:
        return self.data_inizio <= to_date(d) <= self.data_fine

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "collaboratore_id": self.collaboratore_id,
            "tipo": self.tipo.value,
            "data_inizio": self.data_inizio.isoformat(),
            "data_fine": self.data_fine.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "RichiestaApprovata":
        return cls(
            id=str(d.get("id") or ""),
            collaboratore_id=str(d["collaboratore_id"]),
            tipo=TipoRichiesta(str(d["tipo"]).lower()),
            data_inizio=to_date(d["data_inizio"]),
            data_fine=to_date(d["data_fine"]),
        )


@dataclass(frozen=True)
class RiposoAssegnato:
    """A rest day (or half day) assigned to a worker on a weekday."""
    collaboratore_id: str
    giorno_settimana: int  # 1-7
    tipo_riposo: TipoRiposo = TipoRiposo.INTERO

    def to_dict(self) -> dict:
        return {
            "collaboratore_id": self.collaboratore_id,
            "giorno_settimana": self.giorno_settimana,
            "tipo_riposo": self.tipo_riposo.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "RiposoAssegnato":
        giorno = normalize_day(d.get("giorno_settimana"))
        if giorno is None:
            raise ValueError(f"Invalid giorno_settimana for riposo: {d.get('giorno_settimana')!r}")
        return cls(
            collaboratore_id=str(d["collaboratore_id"]),
            giorno_settimana=giorno,
            tipo_riposo=TipoRiposo(str(d.get("tipo_riposo") or "intero").lower()),
        )


@dataclass(frozen=True)
class Assegnazione:
    """An existing shift assignment."""
    collaboratore_id: str
    data: date
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None
    stato: StatoAssegnazione = StatoAssegnazione.CONFERMATO
    id: str = ""
    nucleo_id: Optional[str] = None
    generato_da_ai: bool = False
    confidenza_ai: Optional[float] = None

    @property
    def attiva(self) -> bool:
        return self.stato != StatoAssegnazione.ANNULLATO

    @property
    def inizio(self) -> str:
        """Start time, whole day when unknown."""
        return self.ora_inizio or "00:00"

    @property
    def fine(self) -> str:
        """End time, whole day when unknown."""
        return self.ora_fine or "23:59"

    @property
    def durata_ore(self) -> float:
        """Worked hours; 0 when the time range is unknown."""
        if not (self.ora_inizio and self.ora_fine):
            return 0.0
        return durata_ore(self.ora_inizio, self.ora_fine)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "collaboratore_id": self.collaboratore_id,
            "data": self.data.isoformat(),
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
            "stato": self.stato.value,
            "nucleo_id": self.nucleo_id,
            "generato_da_ai": self.generato_da_ai,
            "confidenza_ai": self.confidenza_ai,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Assegnazione":
        confidenza = d.get("confidenza_ai")
        return cls(
            id=str(d.get("id") or ""),
            collaboratore_id=str(d["collaboratore_id"]),
            data=to_date(d["data"]),
            ora_inizio=d.get("ora_inizio") or d.get("ora_inizio_override"),
            ora_fine=d.get("ora_fine") or d.get("ora_fine_override"),
            stato=StatoAssegnazione(str(d.get("stato") or "confermato").lower()),
            nucleo_id=d.get("nucleo_id"),
            generato_da_ai=bool(d.get("generato_da_ai", False)),
            confidenza_ai=float(confidenza) if confidenza is not None else None,
        )


@dataclass(frozen=True)
class PatternStorico:
    """Historical staffing pattern for a team on a weekday."""
    nucleo_id: str
    giorno_settimana: int
    media_collaboratori: float = 0.0
    orario_tipico: Optional[OrarioTurno] = None
    nucleo_nome: str = ""

    def to_dict(self) -> dict:
        return {
            "nucleo_id": self.nucleo_id,
            "nucleo_nome": self.nucleo_nome,
            "giorno_settimana": self.giorno_settimana,
            "media_collaboratori": self.media_collaboratori,
            "orario_tipico": self.orario_tipico.to_dict() if self.orario_tipico else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PatternStorico":
        giorno = normalize_day(d.get("giorno_settimana"))
        if giorno is None:
            raise ValueError(f"Invalid giorno_settimana for pattern: {d.get('giorno_settimana')!r}")
        orario = d.get("orario_tipico")
        return cls(
            nucleo_id=str(d["nucleo_id"]),
            nucleo_nome=str(d.get("nucleo_nome") or ""),
            giorno_settimana=giorno,
            media_collaboratori=float(d.get("media_collaboratori") or 0.0),
            orario_tipico=OrarioTurno.from_dict(orario) if orario else None,
        )
