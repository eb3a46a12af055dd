"""
Staffing Requirements
=====================
Required staff per team per date, and shift schedule resolution.

Required staff:
    1. Start from the team minimum
    2. Each recurring criticality on the weekday: + staff_extra, then × multiplier (ceiling)
    3. Each one-off period covering the date: raise to its floor, then × multiplier (ceiling)
    4. Clamp to the team maximum when set; never below 1

Shift schedule:
    team day override → historical pattern for team+weekday → default (09:00-18:00, 8h)
"""
import math
from datetime import date
from typing import Optional

from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.nucleo import Nucleo
from turni.models.slots import OrarioTurno, giorno_settimana
from turni.utils.logging_setup import get_logger

logger = get_logger("turni.solver.staffing")


def _ceil(value: float) -> int:
    """Ceiling that ignores float noise (10 × 1.1 = 11.000000000000002 → 11)."""
    return math.ceil(round(value, 6))


def calculate_required_staff(nucleo: Nucleo, data: date, snapshot: ContextSnapshot) -> int:
    """
    Required concurrent staff for a team on a date.

    Args:
        nucleo: Team
        data: Date of the shift
        snapshot: Context with criticalities and critical periods

    Returns:
        Required staff (>= 1)
    """
    giorno = giorno_settimana(data)
    staff = nucleo.membri_richiesti_min

    for crit in snapshot.criticita_per_giorno(giorno):
        staff += crit.staff_extra
        staff = _ceil(staff * crit.moltiplicatore_staff)

    for periodo in snapshot.periodi_attivi(data):
        if periodo.staff_minimo and periodo.staff_minimo > staff:
            staff = periodo.staff_minimo
        staff = _ceil(staff * periodo.moltiplicatore_staff)

    if nucleo.membri_richiesti_max and staff > nucleo.membri_richiesti_max:
        staff = nucleo.membri_richiesti_max

    staff = max(1, staff)
    logger.debug(f"{nucleo.nome} {data}: staff richiesto {staff} (min {nucleo.membri_richiesti_min})")
    return staff


def resolve_shift_schedule(
    nucleo: Nucleo,
    giorno: int,
    snapshot: ContextSnapshot,
    config: Optional[EngineConfig] = None,
) -> OrarioTurno:
    """
    Shift window for a team on a weekday.

    Args:
        nucleo: Team
        giorno: Weekday 1-7
        snapshot: Context with historical patterns
        config: Supplies the default shift

    Returns:
        OrarioTurno (use .ore for the duration)
    """
    override = nucleo.orario_per_giorno(giorno)
    if override is not None:
        return override

    pattern = snapshot.pattern_per(nucleo.id, giorno)
    if pattern is not None and pattern.orario_tipico is not None:
        return pattern.orario_tipico

    config = config or EngineConfig()
    return OrarioTurno(
        inizio=config.default_ora_inizio,
        fine=config.default_ora_fine,
        durata=config.default_durata_ore,
    )
