"""Recurring criticalities and one-off critical periods."""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .slots import DateLike, normalize_day, to_date


@dataclass(frozen=True)
class CriticitaContinuativa:
    """A weekday that always needs extra staff (company-wide)."""
    id: str
    nome: str
    giorno_settimana: int  # 1-7
    staff_extra: int = 0
    moltiplicatore_staff: float = 1.0
    tipo: str = ""
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "giorno_settimana": self.giorno_settimana,
            "staff_extra": self.staff_extra,
            "moltiplicatore_staff": self.moltiplicatore_staff,
            "tipo": self.tipo,
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CriticitaContinuativa":
        giorno = normalize_day(d.get("giorno_settimana"))
        if giorno is None:
            raise ValueError(f"Invalid giorno_settimana for criticità {d.get('id')}: {d.get('giorno_settimana')!r}")
        return cls(
            id=str(d.get("id", "")),
            nome=str(d.get("nome", "")),
            giorno_settimana=giorno,
            staff_extra=int(d.get("staff_extra") or 0),
            moltiplicatore_staff=float(d.get("moltiplicatore_staff") or 1.0),
            tipo=str(d.get("tipo") or ""),
            ora_inizio=d.get("ora_inizio"),
            ora_fine=d.get("ora_fine"),
        )


@dataclass(frozen=True)
class PeriodoCritico:
    """A one-off inclusive date range with its own staffing floor and multiplier."""
    id: str
    nome: str
    data_inizio: date
    data_fine: date
    staff_minimo: Optional[int] = None
    moltiplicatore_staff: float = 1.0
    ora_inizio: Optional[str] = None
    ora_fine: Optional[str] = None
    blocca_preferenze: bool = False
    attivo: bool = True
    descrizione: str = ""

    def copre(self, d: DateLike) -> bool:
        """True if the (inclusive) period covers the date."""
        return self.data_inizio <= to_date(d) <= self.data_fine

    @property
    def ha_orario(self) -> bool:
        return bool(self.ora_inizio and self.ora_fine)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "data_inizio": self.data_inizio.isoformat(),
            "data_fine": self.data_fine.isoformat(),
            "staff_minimo": self.staff_minimo,
            "moltiplicatore_staff": self.moltiplicatore_staff,
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
            "blocca_preferenze": self.blocca_preferenze,
            "attivo": self.attivo,
            "descrizione": self.descrizione,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PeriodoCritico":
        minimo = d.get("staff_minimo")
        return cls(
            id=str(d.get("id", "")),
            nome=str(d.get("nome", "")),
            data_inizio=to_date(d["data_inizio"]),
            data_fine=to_date(d["data_fine"]),
            staff_minimo=int(minimo) if minimo else None,
            moltiplicatore_staff=float(d.get("moltiplicatore_staff") or 1.0),
            ora_inizio=d.get("ora_inizio"),
            ora_fine=d.get("ora_fine"),
            blocca_preferenze=bool(d.get("blocca_preferenze", False)),
            attivo=bool(d.get("attivo", True)),
            descrizione=str(d.get("descrizione") or ""),
        )
