"""
Constraint Validation
=====================
Evaluate a proposed assignment against HARD/SOFT rule templates.

Rules:
    - ore_max_settimanali: hours in the Monday-start week containing the
      date (non-cancelled assignments + proposed) must not exceed the cap
    - riposo_minimo: rest between the latest shift ending yesterday and the
      proposed start must reach the minimum; no shift yesterday = satisfied

An assignment is rejected only when a HARD violation is present.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, NamedTuple, Optional, Sequence

from turni.models.constraints import (
    OreMaxSettimanali,
    RiposoMinimo,
    TemplateVincolo,
    TipoVincolo,
)
from turni.models.context import ContextSnapshot
from turni.models.slots import (
    MINUTES_PER_DAY,
    DateLike,
    durata_ore,
    parse_time,
    range_minutes,
    to_date,
    week_bounds,
)
from turni.utils.logging_setup import get_logger, log_constraint

logger = get_logger("turni.solver.validation")


class TurnoProposto(NamedTuple):
    """A shift proposed in the current pass but not yet in the snapshot."""
    data: date
    inizio: str
    fine: str
    durata: Optional[float] = None

    @property
    def ore(self) -> float:
        if self.durata is not None:
            return float(self.durata)
        return durata_ore(self.inizio, self.fine)


def _as_turni(turni: Sequence) -> List[TurnoProposto]:
    return [TurnoProposto(*t) for t in turni]


@dataclass
class ConstraintViolation:
    """Single violation of a rule template."""
    vincolo: TemplateVincolo
    message: str
    severity: TipoVincolo

    def to_dict(self) -> dict:
        return {
            "vincolo_id": self.vincolo.id,
            "vincolo_nome": self.vincolo.nome,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass
class ConstraintCheckResult:
    """Violations found for one proposed assignment."""
    violations: List[ConstraintViolation] = field(default_factory=list)

    def add_violation(self, v: ConstraintViolation):
        """Add a violation to the list."""
        self.violations.append(v)

    @property
    def has_hard_violation(self) -> bool:
        return any(v.severity == TipoVincolo.HARD for v in self.violations)

    @property
    def hard_violations(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == TipoVincolo.HARD]

    @property
    def soft_violations(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == TipoVincolo.SOFT]

    def to_dict(self) -> dict:
        return {
            "violations": [v.to_dict() for v in self.violations],
            "hasHardViolation": self.has_hard_violation,
        }


def _fmt_ore(ore: float) -> str:
    return f"{round(ore, 2):g}"


class ConstraintValidator:
    """Rule-template checks over one Context Snapshot."""

    def __init__(self, snapshot: ContextSnapshot):
        self.snapshot = snapshot

    def applicable_rules(
        self,
        collaboratore_id: str,
        nucleo_id: Optional[str] = None,
    ) -> List[TemplateVincolo]:
        """
        Active templates that apply to a worker.

        Global templates always apply. Team-scoped ones apply to the given
        team, or to any of the worker's teams when no team is given.
        """
        if nucleo_id is not None:
            scopes = {nucleo_id}
        else:
            scopes = {n.id for n in self.snapshot.nuclei_di(collaboratore_id)}
        return [
            v for v in self.snapshot.vincoli_attivi()
            if v.nucleo_id is None or v.nucleo_id in scopes
        ]

    def ore_settimana(
        self,
        collaboratore_id: str,
        data: DateLike,
        turni_extra: Sequence[TurnoProposto] = (),
    ) -> float:
        """Hours already worked in the Monday-start week containing data."""
        lunedi, domenica = week_bounds(data)
        totale = sum(
            a.durata_ore
            for a in self.snapshot.assegnazioni_attive(collaboratore_id)
            if lunedi <= a.data <= domenica
        )
        totale += sum(
            t.ore for t in _as_turni(turni_extra)
            if lunedi <= t.data <= domenica
        )
        return totale

    def ore_riposo(
        self,
        collaboratore_id: str,
        data: DateLike,
        ora_inizio: str,
        turni_extra: Sequence[TurnoProposto] = (),
    ) -> Optional[float]:
        """
        Rest hours between yesterday's latest shift end and ora_inizio.

        Returns:
            Hours of rest, or None if the worker has no shift yesterday
        """
        ieri = to_date(data) - timedelta(days=1)
        fini: List[int] = []
        for a in self.snapshot.assegnazioni_attive(collaboratore_id, ieri):
            fini.append(range_minutes(a.inizio, a.fine)[1])
        for t in _as_turni(turni_extra):
            if t.data == ieri:
                fini.append(range_minutes(t.inizio, t.fine)[1])
        if not fini:
            return None

        fine_ieri = max(fini)  # May exceed 24:00 for overnight shifts
        minuti = (MINUTES_PER_DAY - fine_ieri) + parse_time(ora_inizio)
        return max(0, minuti) / 60

    def validate(
        self,
        collaboratore_id: str,
        data: DateLike,
        ora_inizio: str,
        ora_fine: str,
        nucleo_id: Optional[str] = None,
        durata: Optional[float] = None,
        turni_extra: Sequence[TurnoProposto] = (),
    ) -> ConstraintCheckResult:
        """
        Check a proposed assignment against every applicable rule.

        Args:
            collaboratore_id: Worker
            data: Date of the proposed shift
            ora_inizio: Proposed start (HH:MM)
            ora_fine: Proposed end (HH:MM)
            nucleo_id: Team of the shift (selects team-scoped rules)
            durata: Paid hours of the shift (defaults to the clock span)
            turni_extra: Shifts proposed earlier in the same pass

        Returns:
            ConstraintCheckResult
        """
        day = to_date(data)
        ore_richieste = durata if durata is not None else durata_ore(ora_inizio, ora_fine)
        result = ConstraintCheckResult()

        for vincolo in self.applicable_rules(collaboratore_id, nucleo_id):
            regola = vincolo.regola

            if isinstance(regola, OreMaxSettimanali):
                totale = self.ore_settimana(collaboratore_id, day, turni_extra) + ore_richieste
                ok = totale <= regola.ore
                log_constraint(logger, vincolo.nome or regola.tipo, ok,
                               f"{collaboratore_id} {day}: {_fmt_ore(totale)}h/{_fmt_ore(regola.ore)}h")
                if not ok:
                    result.add_violation(ConstraintViolation(
                        vincolo=vincolo,
                        message=f"Superato limite ore settimanali ({_fmt_ore(totale)}h > {_fmt_ore(regola.ore)}h)",
                        severity=vincolo.tipo_vincolo,
                    ))

            elif isinstance(regola, RiposoMinimo):
                riposo = self.ore_riposo(collaboratore_id, day, ora_inizio, turni_extra)
                ok = riposo is None or riposo >= regola.ore
                log_constraint(logger, vincolo.nome or regola.tipo, ok,
                               f"{collaboratore_id} {day}: riposo "
                               f"{'n/a' if riposo is None else _fmt_ore(riposo) + 'h'}")
                if not ok:
                    result.add_violation(ConstraintViolation(
                        vincolo=vincolo,
                        message=(
                            f"Non rispettato riposo minimo di {_fmt_ore(regola.ore)} ore "
                            f"({_fmt_ore(riposo)}h dal turno precedente)"
                        ),
                        severity=vincolo.tipo_vincolo,
                    ))

            else:
                logger.debug(f"Regola non supportata ignorata: {regola.tipo} ({vincolo.nome})")

        return result
