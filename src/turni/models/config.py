"""Engine configuration."""
from dataclasses import asdict, dataclass, fields


@dataclass
class EngineConfig:
    """Tunable constants for the scheduling engine. Passed explicitly to every entry point."""

    # Default shift when neither a team override nor a historical pattern exists
    default_ora_inizio: str = "09:00"
    default_ora_fine: str = "18:00"
    default_durata_ore: float = 8.0  # 09-18 with a one-hour break

    # Rest quota conversion
    ore_giorno_riposo: int = 8
    ore_mezza_giornata: int = 4

    # Defaults for rule bodies that omit "ore"
    default_ore_max_settimanali: float = 48.0
    default_riposo_minimo_ore: float = 11.0

    # Shift confidence
    confidence_ok: float = 0.9
    confidence_parziale: float = 0.6
    confidence_scoperta: float = 0.3
    confidence_bonus_preferred: float = 0.05
    confidence_penalita_spostamento: float = 0.05
    confidence_min: float = 0.1
    confidence_max: float = 0.99

    # Candidate display score
    punteggio_disponibile: float = 100.0
    punteggio_preferred: float = 50.0
    punteggio_max_ore_residue: float = 40.0

    # Rest-day scoring weights
    riposo_score_base: float = 100.0
    riposo_peso_staff_extra: float = 15.0
    riposo_peso_moltiplicatore: float = 20.0
    riposo_peso_assenze: float = 10.0
    riposo_penalita_scopertura: float = 50.0
    riposo_bonus_distribuzione: float = 10.0
    riposo_bonus_weekend: float = 5.0

    # Minimum residual hours for a worker to be suggested as cover
    ore_minime_copertura: float = 8.0

    def __post_init__(self):
        """Validate ranges."""
        if self.default_durata_ore <= 0:
            raise ValueError("default_durata_ore must be positive")
        if self.ore_mezza_giornata <= 0 or self.ore_giorno_riposo < self.ore_mezza_giornata:
            raise ValueError("ore_giorno_riposo must be >= ore_mezza_giornata > 0")
        if not (0 < self.confidence_min <= self.confidence_max <= 1):
            raise ValueError("confidence bounds must satisfy 0 < min <= max <= 1")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "EngineConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})
