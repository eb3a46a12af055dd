"""
Diagnostics Collector
=====================
Accumulates structured warnings (understaffing, hour overruns,
relocations, closed days) produced during one engine call.

A collector is created per call and discarded with the result.
"""
import logging
from collections import Counter
from datetime import date
from typing import Dict, List, Optional

from turni.models.schedule import GenerationWarning, Severita
from turni.utils.logging_setup import get_logger

logger = get_logger("turni.solver.diagnostics")

_LOG_LEVELS = {
    Severita.INFO: logging.INFO,
    Severita.WARNING: logging.WARNING,
    Severita.ERROR: logging.ERROR,
}

# Warning kinds
COPERTURA_INSUFFICIENTE = "copertura_insufficiente"
SUPERAMENTO_ORE = "superamento_ore"
SPOSTAMENTO_SUGGERITO = "spostamento_suggerito"
NESSUN_DISPONIBILE = "nessun_disponibile"
GIORNO_CHIUSO = "giorno_chiuso"
VINCOLO_SOFT = "vincolo_soft"
ERRORE_UPSTREAM = "errore_upstream"
PROPOSTA_SCARTATA = "proposta_scartata"
NOTA_PROPOSTA = "nota_proposta"


class Diagnostics:
    """Per-call warning accumulator."""

    def __init__(self, logger_name: str = "turni.solver.diagnostics"):
        self._warnings: List[GenerationWarning] = []
        self._logger = logging.getLogger(logger_name)

    def add(
        self,
        tipo: str,
        messaggio: str,
        severita: Severita = Severita.WARNING,
        data: Optional[date] = None,
        nucleo_id: Optional[str] = None,
        collaboratore_id: Optional[str] = None,
    ) -> GenerationWarning:
        """Record a warning and log it at the matching level."""
        warning = GenerationWarning(
            tipo=tipo,
            messaggio=messaggio,
            severita=severita,
            data=data,
            nucleo_id=nucleo_id,
            collaboratore_id=collaboratore_id,
        )
        self._warnings.append(warning)
        self._logger.log(_LOG_LEVELS[severita], f"[{tipo}] {messaggio}")
        return warning

    def info(self, tipo: str, messaggio: str, **kwargs) -> GenerationWarning:
        return self.add(tipo, messaggio, Severita.INFO, **kwargs)

    def warning(self, tipo: str, messaggio: str, **kwargs) -> GenerationWarning:
        return self.add(tipo, messaggio, Severita.WARNING, **kwargs)

    def error(self, tipo: str, messaggio: str, **kwargs) -> GenerationWarning:
        return self.add(tipo, messaggio, Severita.ERROR, **kwargs)

    @property
    def warnings(self) -> List[GenerationWarning]:
        """Collected warnings, in insertion order (copy)."""
        return list(self._warnings)

    def counts(self) -> Dict[str, int]:
        """Number of warnings per kind."""
        return dict(Counter(w.tipo for w in self._warnings))

    def __len__(self) -> int:
        return len(self._warnings)
