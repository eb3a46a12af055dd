"""
Engine Output Models
====================
Generated shifts, rest days, warnings and statistics, with
dictionary and DataFrame conversions matching the output contract.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from .records import TipoPreferenza, TipoRiposo


class CoperturaStatus(str, Enum):
    """Coverage of a generated shift."""
    OK = "ok"
    PARZIALE = "parziale"
    SCOPERTA = "scoperta"


class Severita(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class GenerationWarning:
    """Structured warning produced by the algorithms."""
    tipo: str  # copertura_insufficiente, superamento_ore, spostamento_suggerito, giorno_chiuso, ...
    messaggio: str
    severita: Severita = Severita.WARNING
    data: Optional[date] = None
    nucleo_id: Optional[str] = None
    collaboratore_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "tipo": self.tipo,
            "messaggio": self.messaggio,
            "severita": self.severita.value,
        }
        if self.data is not None:
            d["data"] = self.data.isoformat()
        if self.nucleo_id is not None:
            d["nucleo_id"] = self.nucleo_id
        if self.collaboratore_id is not None:
            d["collaboratore_id"] = self.collaboratore_id
        return d


@dataclass
class CollaboratoreSuggerito:
    """A ranked candidate for a shift."""
    id: str
    nome: str
    disponibile: bool
    ore_residue: float
    nuclei_appartenenza: List[str] = field(default_factory=list)
    nucleo_primario: Optional[str] = None
    spostabile_da: Optional[str] = None  # Primary team name when relocated
    motivo_non_disponibile: Optional[str] = None
    preferenza: Optional[TipoPreferenza] = None
    punteggio: float = 0.0
    selezionato: bool = False
    avvisi_vincoli: List[str] = field(default_factory=list)  # SOFT violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nome": self.nome,
            "disponibile": self.disponibile,
            "ore_residue": self.ore_residue,
            "nuclei_appartenenza": list(self.nuclei_appartenenza),
            "nucleo_primario": self.nucleo_primario,
            "spostabile_da": self.spostabile_da,
            "motivo_non_disponibile": self.motivo_non_disponibile,
            "preferenza": self.preferenza.value if self.preferenza else None,
            "punteggio": self.punteggio,
            "selezionato": self.selezionato,
            "avvisi_vincoli": list(self.avvisi_vincoli),
        }


@dataclass
class GeneratedShift:
    """A proposed shift for one team on one date."""
    nucleo_id: str
    nucleo_nome: str
    data: date
    ora_inizio: str
    ora_fine: str
    durata_ore: float
    num_collaboratori_richiesti: int
    collaboratori_suggeriti: List[CollaboratoreSuggerito]
    copertura_status: CoperturaStatus
    confidence: float
    reasoning: str
    warning: Optional[str] = None
    nucleo_colore: Optional[str] = None

    @property
    def selezionati(self) -> List[CollaboratoreSuggerito]:
        """Selected available workers, in rank order."""
        return [c for c in self.collaboratori_suggeriti if c.selezionato]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nucleo_id": self.nucleo_id,
            "nucleo_nome": self.nucleo_nome,
            "nucleo_colore": self.nucleo_colore,
            "data": self.data.isoformat(),
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
            "durata_ore": self.durata_ore,
            "num_collaboratori_richiesti": self.num_collaboratori_richiesti,
            "collaboratori_suggeriti": [c.to_dict() for c in self.collaboratori_suggeriti],
            "copertura_status": self.copertura_status.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "warning": self.warning,
        }


@dataclass
class CoverageStats:
    totale: int = 0
    coperti: int = 0
    parziali: int = 0
    scoperti: int = 0
    percentuale: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totale": self.totale,
            "coperti": self.coperti,
            "parziali": self.parziali,
            "scoperti": self.scoperti,
            "percentuale": self.percentuale,
        }


@dataclass
class WorkloadEntry:
    id: str
    nome: str
    ore_assegnate: float
    ore_contratto: float
    percentuale_utilizzo: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nome": self.nome,
            "ore_assegnate": self.ore_assegnate,
            "ore_contratto": self.ore_contratto,
            "percentuale_utilizzo": self.percentuale_utilizzo,
        }


@dataclass
class WorkloadDistribution:
    per_collaboratore: List[WorkloadEntry] = field(default_factory=list)
    equita_score: float = 1.0  # 1 = perfectly even utilization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "per_collaboratore": [e.to_dict() for e in self.per_collaboratore],
            "equita_score": self.equita_score,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per worker."""
        columns = ["id", "nome", "ore_assegnate", "ore_contratto", "percentuale_utilizzo"]
        if not self.per_collaboratore:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([e.to_dict() for e in self.per_collaboratore], columns=columns)


@dataclass
class WeekGenerationResult:
    """Complete result of a week generation pass."""
    turni: List[GeneratedShift] = field(default_factory=list)
    coverage_stats: CoverageStats = field(default_factory=CoverageStats)
    workload_distribution: WorkloadDistribution = field(default_factory=WorkloadDistribution)
    warnings: List[GenerationWarning] = field(default_factory=list)
    confidence_average: float = 0.0
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "turni": [t.to_dict() for t in self.turni],
            "coverage_stats": self.coverage_stats.to_dict(),
            "workload_distribution": self.workload_distribution.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
            "confidence_average": self.confidence_average,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per (shift, selected worker)."""
        columns = [
            "data", "nucleo_id", "nucleo_nome", "ora_inizio", "ora_fine",
            "collaboratore_id", "collaboratore", "spostabile_da", "copertura_status", "confidence",
        ]
        rows = [
            {
                "data": t.data,
                "nucleo_id": t.nucleo_id,
                "nucleo_nome": t.nucleo_nome,
                "ora_inizio": t.ora_inizio,
                "ora_fine": t.ora_fine,
                "collaboratore_id": c.id,
                "collaboratore": c.nome,
                "spostabile_da": c.spostabile_da,
                "copertura_status": t.copertura_status.value,
                "confidence": t.confidence,
            }
            for t in self.turni
            for c in t.selezionati
        ]
        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame(rows, columns=columns)

    def summary(self) -> Dict[str, Any]:
        """Summary dictionary for display."""
        return {
            "turni": len(self.turni),
            "copertura": f"{self.coverage_stats.percentuale:.1f}%",
            "scoperti": self.coverage_stats.scoperti,
            "parziali": self.coverage_stats.parziali,
            "equita": round(self.workload_distribution.equita_score, 3),
            "confidence": round(self.confidence_average, 3),
            "warnings": len(self.warnings),
        }


@dataclass
class RiposoGenerato:
    """A generated rest day."""
    collaboratore_id: str
    nome_completo: str
    giorno_settimana: int
    giorno_nome: str
    tipo_riposo: TipoRiposo
    data: date
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collaboratore_id": self.collaboratore_id,
            "nome_completo": self.nome_completo,
            "giorno_settimana": self.giorno_settimana,
            "giorno_nome": self.giorno_nome,
            "tipo_riposo": self.tipo_riposo.value,
            "data": self.data.isoformat(),
            "confidence": self.confidence,
        }


@dataclass
class RiposiAssignmentResult:
    """Result of a rest-day assignment for one worker."""
    riposi: List[RiposoGenerato] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    success: bool = False
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riposi": [r.to_dict() for r in self.riposi],
            "warnings": list(self.warnings),
            "success": self.success,
            "reasoning": self.reasoning,
        }

    def to_dataframe(self) -> pd.DataFrame:
        columns = ["collaboratore_id", "nome_completo", "giorno_settimana", "giorno_nome",
                   "tipo_riposo", "data", "confidence"]
        if not self.riposi:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([r.to_dict() for r in self.riposi], columns=columns)
