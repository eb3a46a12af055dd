"""Team (nucleo) model."""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .slots import OrarioTurno, nome_giorno, normalize_day


@dataclass(frozen=True)
class Nucleo:
    """A staffing unit with its own concurrent-worker requirement."""

    id: str
    nome: str

    # Staffing
    membri_richiesti_min: int = 1
    membri_richiesti_max: Optional[int] = None  # None or 0 = no cap

    # Day-specific schedule override, keyed by weekday 1-7
    orario_specifico: Dict[int, OrarioTurno] = field(default_factory=dict)

    membri: Tuple[str, ...] = field(default_factory=tuple)

    mansione: str = ""
    colore: Optional[str] = None

    def orario_per_giorno(self, giorno: int) -> Optional[OrarioTurno]:
        """Schedule override for a weekday, if any."""
        return self.orario_specifico.get(giorno)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "nome": self.nome,
            "membri_richiesti_min": self.membri_richiesti_min,
            "membri_richiesti_max": self.membri_richiesti_max,
            "orario_specifico": {
                nome_giorno(g).lower(): o.to_dict() for g, o in sorted(self.orario_specifico.items())
            },
            "membri": list(self.membri),
            "mansione": self.mansione,
            "colore": self.colore,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Nucleo":
        """
        Create from dictionary.

        orario_specifico keys may be day names in any supported form
        ("lunedì", "lun", "monday", 1...). Unknown keys raise ValueError.
        """
        orari: Dict[int, OrarioTurno] = {}
        for key, value in (d.get("orario_specifico") or {}).items():
            giorno = normalize_day(key)
            if giorno is None:
                raise ValueError(f"Unknown day in orario_specifico of nucleo {d.get('id')}: {key!r}")
            orari[giorno] = OrarioTurno.from_dict(value)

        massimo = d.get("membri_richiesti_max")
        return cls(
            id=str(d["id"]),
            nome=str(d.get("nome", d["id"])).strip(),
            membri_richiesti_min=int(d.get("membri_richiesti_min", 1)),
            membri_richiesti_max=int(massimo) if massimo else None,
            orario_specifico=orari,
            membri=tuple(str(m) for m in d.get("membri") or ()),
            mansione=str(d.get("mansione") or ""),
            colore=d.get("colore"),
        )
