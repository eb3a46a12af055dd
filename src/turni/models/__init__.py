# turni/models - Data models for the scheduling engine
from .collaboratore import Collaboratore
from .config import EngineConfig
from .constraints import (
    OreMaxSettimanali,
    Regola,
    RegolaNonSupportata,
    RiposoMinimo,
    TemplateVincolo,
    TipoVincolo,
)
from .context import ContextSnapshot, SnapshotLookupError
from .criticita import CriticitaContinuativa, PeriodoCritico
from .nucleo import Nucleo
from .records import (
    Assegnazione,
    PatternStorico,
    Preferenza,
    RichiestaApprovata,
    RiposoAssegnato,
    StatoAssegnazione,
    StatoValidazione,
    TipoPreferenza,
    TipoRichiesta,
    TipoRiposo,
)
from .schedule import (
    CollaboratoreSuggerito,
    CoperturaStatus,
    CoverageStats,
    GeneratedShift,
    GenerationWarning,
    RiposiAssignmentResult,
    RiposoGenerato,
    Severita,
    WeekGenerationResult,
    WorkloadDistribution,
    WorkloadEntry,
)
from .slots import GIORNI, OrarioTurno

__all__ = [
    "Collaboratore", "Nucleo",
    "CriticitaContinuativa", "PeriodoCritico",
    "TemplateVincolo", "TipoVincolo", "Regola",
    "OreMaxSettimanali", "RiposoMinimo", "RegolaNonSupportata",
    "Preferenza", "TipoPreferenza", "StatoValidazione",
    "RichiestaApprovata", "TipoRichiesta",
    "RiposoAssegnato", "TipoRiposo",
    "Assegnazione", "StatoAssegnazione",
    "PatternStorico",
    "ContextSnapshot", "SnapshotLookupError",
    "EngineConfig",
    "GeneratedShift", "CollaboratoreSuggerito", "CoperturaStatus",
    "CoverageStats", "WorkloadDistribution", "WorkloadEntry",
    "GenerationWarning", "Severita", "WeekGenerationResult",
    "RiposoGenerato", "RiposiAssignmentResult",
    "GIORNI", "OrarioTurno",
]
