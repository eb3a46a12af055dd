"""
Constraint Templates
====================
HARD/SOFT labor rule templates. The JSON rule body is decoded once,
at load time, into one of the typed rules below.

Rule body examples:
    {"tipo": "ore_max_settimanali", "ore": 48}
    {"tipo": "riposo_minimo", "ore": 11}
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class TipoVincolo(str, Enum):
    """Constraint severity."""
    HARD = "HARD"  # Candidate excluded
    SOFT = "SOFT"  # Candidate kept, annotated


@dataclass(frozen=True)
class OreMaxSettimanali:
    """Weekly hour cap."""
    ore: float = 48.0
    tipo: str = "ore_max_settimanali"


@dataclass(frozen=True)
class RiposoMinimo:
    """Minimum rest between the end of yesterday's shift and today's start."""
    ore: float = 11.0
    tipo: str = "riposo_minimo"


@dataclass(frozen=True)
class RegolaNonSupportata:
    """A rule body the engine does not evaluate (kept for round-tripping)."""
    tipo: str
    parametri: Dict[str, Any] = field(default_factory=dict)


Regola = Union[OreMaxSettimanali, RiposoMinimo, RegolaNonSupportata]


def decode_regola(
    body: Optional[Dict[str, Any]],
    default_ore_max: float = 48.0,
    default_riposo: float = 11.0,
) -> Regola:
    """
    Decode a JSON rule body into a typed rule.

    Args:
        body: Rule body with a "tipo" key
        default_ore_max: Cap used when an ore_max_settimanali body omits "ore"
        default_riposo: Hours used when a riposo_minimo body omits "ore"

    Returns:
        Typed rule
    """
    body = dict(body or {})
    tipo = str(body.get("tipo", "")).strip().lower()
    ore = body.get("ore")

    if tipo == "ore_max_settimanali":
        return OreMaxSettimanali(ore=float(ore) if ore is not None else default_ore_max)
    if tipo == "riposo_minimo":
        return RiposoMinimo(ore=float(ore) if ore is not None else default_riposo)

    body.pop("tipo", None)
    return RegolaNonSupportata(tipo=tipo, parametri=body)


def encode_regola(regola: Regola) -> Dict[str, Any]:
    """Inverse of decode_regola."""
    if isinstance(regola, RegolaNonSupportata):
        return {"tipo": regola.tipo, **regola.parametri}
    return {"tipo": regola.tipo, "ore": regola.ore}


@dataclass(frozen=True)
class TemplateVincolo:
    """A labor constraint template, global (nucleo_id None) or team-scoped."""
    id: str
    nome: str
    tipo_vincolo: TipoVincolo
    regola: Regola
    priorita: int = 0
    attivo: bool = True
    predefinito: bool = False
    nucleo_id: Optional[str] = None
    categoria: str = ""
    descrizione: str = ""

    @property
    def is_hard(self) -> bool:
        return self.tipo_vincolo == TipoVincolo.HARD

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "tipo_vincolo": self.tipo_vincolo.value,
            "regola": encode_regola(self.regola),
            "priorita": self.priorita,
            "attivo": self.attivo,
            "predefinito": self.predefinito,
            "nucleo_id": self.nucleo_id,
            "categoria": self.categoria,
            "descrizione": self.descrizione,
        }

    @classmethod
    def from_dict(
        cls,
        d: dict,
        default_ore_max: float = 48.0,
        default_riposo: float = 11.0,
    ) -> "TemplateVincolo":
        return cls(
            id=str(d.get("id", "")),
            nome=str(d.get("nome", "")),
            tipo_vincolo=TipoVincolo(str(d.get("tipo_vincolo", "SOFT")).upper()),
            regola=decode_regola(d.get("regola"), default_ore_max, default_riposo),
            priorita=int(d.get("priorita") or 0),
            attivo=bool(d.get("attivo", True)),
            predefinito=bool(d.get("predefinito", False)),
            nucleo_id=d.get("nucleo_id"),
            categoria=str(d.get("categoria") or ""),
            descrizione=str(d.get("descrizione") or ""),
        )
