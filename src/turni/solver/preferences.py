"""
Preference Validation
=====================
Decides the validation status of a worker's shift preference.

Workflow (first failing step wins):
    1. Critical period with blocked preferences → REJECTED_CRITICAL
    2. Team conflict (non-UNAVAILABLE only)     → REJECTED_CONFLICT
    3. HARD constraint violation                → REJECTED_CONSTRAINT
    4. Otherwise                                → APPROVED (SOFT violations as warnings)
"""
from dataclasses import dataclass, field
from typing import List, Optional

from turni.models.context import ContextSnapshot
from turni.models.criticita import PeriodoCritico
from turni.models.records import Preferenza, StatoValidazione, TipoPreferenza
from turni.models.slots import time_ranges_overlap
from turni.solver.conflicts import ASSEGNAZIONE, PREFERENZA, ConflictDetector, ConflictInfo
from turni.solver.validation import ConstraintValidator
from turni.utils.logging_setup import get_logger, log_function_call

logger = get_logger("turni.solver.preferences")


@dataclass
class ValidationDetail:
    type: str  # critical_period, conflict, constraint
    message: str
    severity: str  # error, warning
    related_entity_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "severity": self.severity,
            "related_entity_id": self.related_entity_id,
        }


@dataclass
class PreferenceValidationResult:
    is_valid: bool
    status: StatoValidazione
    reason: Optional[str] = None
    details: List[ValidationDetail] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "status": self.status.value,
            "reason": self.reason,
            "details": [d.to_dict() for d in self.details],
        }


class PreferenceValidator:
    """Validation workflow for worker preferences over one snapshot."""

    def __init__(self, snapshot: ContextSnapshot):
        self.snapshot = snapshot
        self.conflicts = ConflictDetector(snapshot)
        self.constraints = ConstraintValidator(snapshot)

    def blocking_period(self, preferenza: Preferenza) -> Optional[PeriodoCritico]:
        """
        First active critical period that blocks the preference.

        Time bounds are compared only when both the period and the
        preference carry them; otherwise the whole date is blocked.
        """
        for periodo in self.snapshot.periodi_attivi(preferenza.data):
            if not periodo.blocca_preferenze:
                continue
            if periodo.ha_orario and preferenza.ora_inizio and preferenza.ora_fine:
                if not time_ranges_overlap(
                    preferenza.ora_inizio, preferenza.ora_fine, periodo.ora_inizio, periodo.ora_fine
                ):
                    continue
            return periodo
        return None

    def team_conflicts(self, preferenza: Preferenza) -> List[ConflictInfo]:
        """Other team members' assignments and approved preferences overlapping the preference."""
        found: List[ConflictInfo] = []
        seen = set()
        for nucleo in self.snapshot.nuclei_di(preferenza.collaboratore_id):
            result = self.conflicts.detect_conflicts(
                nucleo.id,
                preferenza.data,
                preferenza.inizio,
                preferenza.fine,
                exclude_collaboratore_id=preferenza.collaboratore_id,
            )
            for c in result.conflicts:
                key = (c.tipo, c.entita_id, c.collaboratore_id)
                if c.tipo in (ASSEGNAZIONE, PREFERENZA) and key not in seen:
                    seen.add(key)
                    found.append(c)
        return found

    @log_function_call
    def validate(self, preferenza: Preferenza) -> PreferenceValidationResult:
        """
        Validate a preference.

        Args:
            preferenza: Preference to validate (its own status is ignored)

        Returns:
            PreferenceValidationResult
        """
        coll = self.snapshot.find_collaboratore(preferenza.collaboratore_id)
        if coll is None:
            return PreferenceValidationResult(
                is_valid=False,
                status=StatoValidazione.REJECTED_CONSTRAINT,
                reason="Collaboratore non trovato",
            )

        periodo = self.blocking_period(preferenza)
        if periodo is not None:
            logger.info(f"Preferenza {coll.nome_completo} {preferenza.data}: bloccata da {periodo.nome}")
            return PreferenceValidationResult(
                is_valid=False,
                status=StatoValidazione.REJECTED_CRITICAL,
                reason=f"Periodo critico: {periodo.nome}. Le preferenze sono bloccate.",
                details=[ValidationDetail(
                    type="critical_period",
                    message=f"Dal {periodo.data_inizio.isoformat()} al {periodo.data_fine.isoformat()}",
                    severity="error",
                    related_entity_id=periodo.id,
                )],
            )

        if preferenza.tipo != TipoPreferenza.UNAVAILABLE:
            conflitti = self.team_conflicts(preferenza)
            if conflitti:
                logger.info(f"Preferenza {coll.nome_completo} {preferenza.data}: {len(conflitti)} conflitti")
                return PreferenceValidationResult(
                    is_valid=False,
                    status=StatoValidazione.REJECTED_CONFLICT,
                    reason="Slot già occupato da altro collaboratore dello stesso nucleo",
                    details=[
                        ValidationDetail(
                            type="conflict",
                            message=c.descrizione,
                            severity="error",
                            related_entity_id=c.entita_id or None,
                        )
                        for c in conflitti
                    ],
                )

        # Rules need a time range; UNAVAILABLE preferences add no working hours
        violazioni = []
        if (preferenza.tipo != TipoPreferenza.UNAVAILABLE
                and preferenza.ora_inizio and preferenza.ora_fine):
            check = self.constraints.validate(
                preferenza.collaboratore_id,
                preferenza.data,
                preferenza.ora_inizio,
                preferenza.ora_fine,
            )
            if check.has_hard_violation:
                hard = check.hard_violations
                logger.info(f"Preferenza {coll.nome_completo} {preferenza.data}: vincolo violato")
                return PreferenceValidationResult(
                    is_valid=False,
                    status=StatoValidazione.REJECTED_CONSTRAINT,
                    reason=hard[0].message,
                    details=[
                        ValidationDetail("constraint", v.message, "error", v.vincolo.id)
                        for v in hard
                    ],
                )
            violazioni = check.soft_violations

        return PreferenceValidationResult(
            is_valid=True,
            status=StatoValidazione.APPROVED,
            details=[ValidationDetail("constraint", v.message, "warning", v.vincolo.id) for v in violazioni],
        )
