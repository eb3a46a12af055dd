"""Worker (collaboratore) model."""
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Collaboratore:
    """A worker with contracted hours and team memberships."""

    id: str
    nome: str
    cognome: str = ""

    # Hours
    ore_settimanali: float = 40.0      # Weekly contracted hours
    ore_gia_assegnate: float = 0.0     # Already assigned this week

    # Teams
    nuclei_appartenenza: Tuple[str, ...] = field(default_factory=tuple)
    nucleo_primario: Optional[str] = None  # Team where the worker mostly works

    tipo_contratto: Optional[str] = None  # full_time, part_time, altro

    @property
    def nome_completo(self) -> str:
        return f"{self.nome} {self.cognome}".strip()

    @property
    def ore_residue(self) -> float:
        """Contracted minus already-assigned hours (may be negative)."""
        return self.ore_settimanali - self.ore_gia_assegnate

    @property
    def multi_nucleo(self) -> bool:
        """True if the worker belongs to two or more teams."""
        return len(self.nuclei_appartenenza) >= 2

    def appartiene_a(self, nucleo_id: str) -> bool:
        return nucleo_id in self.nuclei_appartenenza

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "nome": self.nome,
            "cognome": self.cognome,
            "ore_settimanali": self.ore_settimanali,
            "ore_gia_assegnate": self.ore_gia_assegnate,
            "nuclei_appartenenza": list(self.nuclei_appartenenza),
            "nucleo_primario": self.nucleo_primario,
            "tipo_contratto": self.tipo_contratto,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Collaboratore":
        """Create from dictionary."""
        return cls(
            id=str(d["id"]),
            nome=str(d.get("nome", "")).strip(),
            cognome=str(d.get("cognome") or "").strip(),
            ore_settimanali=float(d.get("ore_settimanali", 40.0)),
            ore_gia_assegnate=float(d.get("ore_gia_assegnate", 0.0)),
            nuclei_appartenenza=tuple(str(n) for n in d.get("nuclei_appartenenza") or ()),
            nucleo_primario=d.get("nucleo_primario"),
            tipo_contratto=d.get("tipo_contratto"),
        )
