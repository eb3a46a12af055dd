"""
Pydantic Validated Models
=========================
Strict validation layer for data crossing the engine boundary:
the Context Snapshot input contract, the LLM drafting response
schema and the engine configuration.

Usage:
    from turni.models.validated import SnapshotModel

    snapshot = SnapshotModel.model_validate(payload).to_snapshot()

Note: the engine itself works on the dataclass models; these
classes only validate and convert.
"""
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .config import EngineConfig
from .context import ContextSnapshot
from .slots import parse_time


def _check_time(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    parse_time(v)  # Raises ValueError on malformed input
    return v


class PreferenceTypeEnum(str, Enum):
    PREFERRED = "PREFERRED"
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


class LeaveTypeEnum(str, Enum):
    FERIE = "ferie"
    PERMESSO = "permesso"
    RIPOSO = "riposo"


class RestTypeEnum(str, Enum):
    INTERO = "intero"
    MEZZA_MATTINA = "mezza_mattina"
    MEZZA_POMERIGGIO = "mezza_pomeriggio"


class SeverityEnum(str, Enum):
    HARD = "HARD"
    SOFT = "SOFT"


# ----------------------------------------------------------------------
# Snapshot input contract
# ----------------------------------------------------------------------

class OrarioModel(BaseModel):
    inizio: str
    fine: str
    durata: Optional[float] = Field(default=None, gt=0, le=24)

    @field_validator("inizio", "fine")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        """HH:MM format."""
        return _check_time(v)


class CollaboratoreModel(BaseModel):
    id: str = Field(min_length=1)
    nome: str
    cognome: str = ""
    ore_settimanali: float = Field(default=40.0, ge=0, le=168)
    ore_gia_assegnate: float = Field(default=0.0, ge=0)
    nuclei_appartenenza: List[str] = Field(default_factory=list)
    nucleo_primario: Optional[str] = None
    tipo_contratto: Optional[str] = None


class NucleoModel(BaseModel):
    id: str = Field(min_length=1)
    nome: str
    membri_richiesti_min: int = Field(default=1, ge=0)
    membri_richiesti_max: Optional[int] = Field(default=None, ge=0)
    orario_specifico: Dict[str, OrarioModel] = Field(default_factory=dict)
    membri: List[str] = Field(default_factory=list)
    mansione: str = ""
    colore: Optional[str] = None

    @model_validator(mode="after")
    def validate_staff_bounds(self):
        """Max (when set) cannot be below min."""
        if self.membri_richiesti_max and self.membri_richiesti_max < self.membri_richiesti_min:
            raise ValueError(
                f"nucleo {self.id}: membri_richiesti_max ({self.membri_richiesti_max}) "
                f"< membri_richiesti_min ({self.membri_richiesti_min})"
            )
        return self


class CriticitaContinuativaModel(BaseModel):
    id: str = ""
    nome: str = ""
    tipo: str = ""
    giorno_settimana: int = Field(ge=1, le=7)
    staff_extra: int = Field(default=0, ge=0)
    moltiplicatore_staff: float = Field(default=1.0, gt=0)
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None

    @field_validator("ora_inizio", "ora_fine")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        """HH:MM format."""
        return _check_time(v)


class PeriodoCriticoModel(BaseModel):
    id: str = ""
    nome: str = ""
    descrizione: str = ""
    data_inizio: date
    data_fine: date
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None
    staff_minimo: Optional[int] = Field(default=None, ge=0)
    moltiplicatore_staff: float = Field(default=1.0, gt=0)
    blocca_preferenze: bool = False
    attivo: bool = True

    @field_validator("ora_inizio", "ora_fine")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        """HH:MM format."""
        return _check_time(v)

    @model_validator(mode="after")
    def validate_range(self):
        if self.data_fine < self.data_inizio:
            raise ValueError(f"periodo {self.nome or self.id}: data_fine before data_inizio")
        return self


class RiposoModel(BaseModel):
    collaboratore_id: str
    giorno_settimana: int = Field(ge=1, le=7)
    tipo_riposo: RestTypeEnum = RestTypeEnum.INTERO


class PreferenzaModel(BaseModel):
    id: str = ""
    collaboratore_id: str
    data: date
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None
    tipo: PreferenceTypeEnum
    stato_validazione: str = "APPROVED"

    @field_validator("ora_inizio", "ora_fine")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        """HH:MM format."""
        return _check_time(v)


class RichiestaApprovataModel(BaseModel):
    id: str = ""
    collaboratore_id: str
    tipo: LeaveTypeEnum
    data_inizio: date
    data_fine: date

    @model_validator(mode="after")
    def validate_range(self):
        if self.data_fine < self.data_inizio:
            raise ValueError(f"richiesta {self.id or self.collaboratore_id}: data_fine before data_inizio")
        return self


class AssegnazioneModel(BaseModel):
    id: str = ""
    collaboratore_id: str
    nucleo_id: Optional[str] = None
    data: date
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None
    stato: str = "confermato"
    generato_da_ai: bool = False
    confidenza_ai: Optional[float] = Field(default=None, ge=0, le=1)

    @field_validator("ora_inizio", "ora_fine")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        """HH:MM format."""
        return _check_time(v)


class PatternStoricoModel(BaseModel):
    nucleo_id: str
    nucleo_nome: str = ""
    giorno_settimana: int = Field(ge=1, le=7)
    media_collaboratori: float = Field(default=0.0, ge=0)
    orario_tipico: Optional[OrarioModel] = None


class TemplateVincoloModel(BaseModel):
    id: str = ""
    nome: str = ""
    descrizione: str = ""
    categoria: str = ""
    tipo_vincolo: SeverityEnum
    regola: Dict[str, Any]
    priorita: int = 0
    attivo: bool = True
    predefinito: bool = False
    nucleo_id: Optional[str] = None

    @field_validator("regola")
    @classmethod
    def validate_regola(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Rule bodies must name their kind."""
        if not v.get("tipo"):
            raise ValueError("regola must contain a 'tipo'")
        return v


class SnapshotModel(BaseModel):
    """
    Context Snapshot input contract.

    Accepts snake_case names or the camelCase aliases used by the
    persistence layer (weekStart, criticitaContinuative, ...).
    """
    model_config = ConfigDict(populate_by_name=True)

    azienda_id: str = Field(default="", alias="aziendaId")
    week_start: date = Field(alias="weekStart")
    week_end: date = Field(alias="weekEnd")
    collaboratori: List[CollaboratoreModel] = Field(default_factory=list)
    nuclei: List[NucleoModel] = Field(default_factory=list)
    criticita_continuative: List[CriticitaContinuativaModel] = Field(
        default_factory=list, alias="criticitaContinuative"
    )
    periodi_critici: List[PeriodoCriticoModel] = Field(default_factory=list, alias="periodiCritici")
    riposi: List[RiposoModel] = Field(default_factory=list)
    preferenze: List[PreferenzaModel] = Field(default_factory=list)
    richieste_approvate: List[RichiestaApprovataModel] = Field(
        default_factory=list, alias="richiesteApprovate"
    )
    pattern_storici: List[PatternStoricoModel] = Field(default_factory=list, alias="patternStorici")
    assegnazioni: List[AssegnazioneModel] = Field(default_factory=list)
    vincoli: List[TemplateVincoloModel] = Field(default_factory=list)
    giorni_chiusura: List[int] = Field(default_factory=list, alias="giorniChiusura")
    chiuso_festivi: bool = Field(default=False, alias="chiusoFestivi")

    @field_validator("week_start")
    @classmethod
    def validate_week_start(cls, v: date) -> date:
        """Weeks start on Monday."""
        if v.isoweekday() != 1:
            raise ValueError(f"weekStart must be a Monday, got {v.isoformat()}")
        return v

    @field_validator("giorni_chiusura")
    @classmethod
    def validate_closed_days(cls, v: List[int]) -> List[int]:
        for g in v:
            if not 1 <= g <= 7:
                raise ValueError(f"giorni_chiusura values must be 1-7, got {g}")
        return v

    @model_validator(mode="after")
    def validate_model(self):
        """Cross-field validation."""
        if self.week_end < self.week_start:
            raise ValueError("weekEnd cannot be before weekStart")
        ids = [c.id for c in self.collaboratori]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate collaboratore id in snapshot")
        nucleo_ids = [n.id for n in self.nuclei]
        if len(nucleo_ids) != len(set(nucleo_ids)):
            raise ValueError("duplicate nucleo id in snapshot")
        return self

    def to_snapshot(self, config: Optional[EngineConfig] = None) -> ContextSnapshot:
        """Convert to the engine's immutable ContextSnapshot."""
        return ContextSnapshot.from_dict(self.model_dump(mode="json"), config)


# ----------------------------------------------------------------------
# LLM drafting response schema
# ----------------------------------------------------------------------

class LLMTurno(BaseModel):
    nucleo_id: str
    data: date
    ora_inizio: str
    ora_fine: str
    staff_richiesto: int = Field(ge=0)
    reasoning: Optional[str] = None

    @field_validator("ora_inizio", "ora_fine")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        """HH:MM format."""
        return _check_time(v)


class LLMAssegnazione(BaseModel):
    nucleo_id: str
    collaboratore_id: str
    data: date
    ora_inizio: str
    ora_fine: str
    reasoning: Optional[str] = None

    @field_validator("ora_inizio", "ora_fine")
    @classmethod
    def validate_times(cls, v: Optional[str]) -> Optional[str]:
        """HH:MM format."""
        return _check_time(v)


class LLMGenerationResponse(BaseModel):
    """Untrusted candidate plan returned by an LLM drafting collaborator."""
    turni: List[LLMTurno] = Field(default_factory=list)
    assegnazioni: List[LLMAssegnazione] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    overall_confidence: float = Field(ge=0, le=1)


# ----------------------------------------------------------------------
# Engine configuration
# ----------------------------------------------------------------------

class ValidatedEngineConfig(BaseModel):
    """
    Pydantic-validated engine configuration.

    Use this for strict validation at API boundaries.
    Can be converted to/from the dataclass EngineConfig.
    """
    model_config = ConfigDict(validate_assignment=True)

    default_ora_inizio: str = "09:00"
    default_ora_fine: str = "18:00"
    default_durata_ore: float = Field(default=8.0, gt=0, le=24)

    ore_giorno_riposo: int = Field(default=8, ge=1, le=24)
    ore_mezza_giornata: int = Field(default=4, ge=1, le=12)

    default_ore_max_settimanali: float = Field(default=48.0, gt=0, le=168)
    default_riposo_minimo_ore: float = Field(default=11.0, ge=0, le=24)

    confidence_ok: float = Field(default=0.9, ge=0, le=1)
    confidence_parziale: float = Field(default=0.6, ge=0, le=1)
    confidence_scoperta: float = Field(default=0.3, ge=0, le=1)
    confidence_bonus_preferred: float = Field(default=0.05, ge=0, le=0.5)
    confidence_penalita_spostamento: float = Field(default=0.05, ge=0, le=0.5)
    confidence_min: float = Field(default=0.1, gt=0, le=1)
    confidence_max: float = Field(default=0.99, gt=0, le=1)

    punteggio_disponibile: float = Field(default=100.0, ge=0)
    punteggio_preferred: float = Field(default=50.0, ge=0)
    punteggio_max_ore_residue: float = Field(default=40.0, ge=0)

    riposo_score_base: float = Field(default=100.0, ge=0)
    riposo_peso_staff_extra: float = Field(default=15.0, ge=0)
    riposo_peso_moltiplicatore: float = Field(default=20.0, ge=0)
    riposo_peso_assenze: float = Field(default=10.0, ge=0)
    riposo_penalita_scopertura: float = Field(default=50.0, ge=0)
    riposo_bonus_distribuzione: float = Field(default=10.0, ge=0)
    riposo_bonus_weekend: float = Field(default=5.0, ge=0)

    ore_minime_copertura: float = Field(default=8.0, ge=0, le=24)

    @field_validator("default_ora_inizio", "default_ora_fine")
    @classmethod
    def validate_times(cls, v: str) -> str:
        """HH:MM format."""
        return _check_time(v)

    @model_validator(mode="after")
    def validate_model(self):
        """Cross-field validation."""
        if self.confidence_min > self.confidence_max:
            raise ValueError("confidence_min cannot exceed confidence_max")
        if self.ore_mezza_giornata > self.ore_giorno_riposo:
            raise ValueError("ore_mezza_giornata cannot exceed ore_giorno_riposo")
        if not (self.confidence_scoperta <= self.confidence_parziale <= self.confidence_ok):
            raise ValueError("confidence bases must be ordered scoperta <= parziale <= ok")
        return self

    def to_dataclass(self) -> EngineConfig:
        """Convert to dataclass EngineConfig for engine compatibility."""
        return EngineConfig.from_dict(self.model_dump())

    @classmethod
    def from_dataclass(cls, config: EngineConfig) -> "ValidatedEngineConfig":
        """Create from dataclass EngineConfig."""
        return cls(**config.to_dict())
