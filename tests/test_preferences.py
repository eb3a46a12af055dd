"""Tests for the preference validation workflow."""
from dataclasses import replace
from datetime import date

import pytest

from turni.models.constraints import OreMaxSettimanali, RiposoMinimo, TemplateVincolo, TipoVincolo
from turni.models.criticita import PeriodoCritico
from turni.models.records import (
    Assegnazione,
    Preferenza,
    RichiestaApprovata,
    StatoValidazione,
    TipoPreferenza,
    TipoRichiesta,
)
from turni.solver.preferences import PreferenceValidator

VENERDI = date(2025, 3, 7)


def _pref(coll_id="anna", tipo=TipoPreferenza.PREFERRED, inizio="09:00", fine="13:00", data=VENERDI):
    return Preferenza(coll_id, data, tipo, inizio, fine, stato_validazione=StatoValidazione.PENDING)


@pytest.fixture
def fiera():
    return PeriodoCritico(
        id="p1", nome="Fiera", data_inizio=date(2025, 3, 6), data_fine=date(2025, 3, 8),
        blocca_preferenze=True,
    )


class TestCriticalPeriods:
    """Tests for blocked critical periods."""

    def test_blocked(self, bar_snapshot, fiera):
        snap = replace(bar_snapshot, periodi_critici=(fiera,))
        result = PreferenceValidator(snap).validate(_pref())
        assert not result.is_valid
        assert result.status == StatoValidazione.REJECTED_CRITICAL
        assert result.reason == "Periodo critico: Fiera. Le preferenze sono bloccate."
        assert result.details[0].message == "Dal 2025-03-06 al 2025-03-08"
        assert result.details[0].related_entity_id == "p1"

    def test_unavailable_also_blocked(self, bar_snapshot, fiera):
        snap = replace(bar_snapshot, periodi_critici=(fiera,))
        result = PreferenceValidator(snap).validate(_pref(tipo=TipoPreferenza.UNAVAILABLE))
        assert result.status == StatoValidazione.REJECTED_CRITICAL

    def test_non_blocking_period(self, bar_snapshot, fiera):
        snap = replace(bar_snapshot, periodi_critici=(replace(fiera, blocca_preferenze=False),))
        assert PreferenceValidator(snap).validate(_pref()).is_valid

    def test_inactive_period(self, bar_snapshot, fiera):
        snap = replace(bar_snapshot, periodi_critici=(replace(fiera, attivo=False),))
        assert PreferenceValidator(snap).validate(_pref()).is_valid

    def test_time_bounded_period(self, bar_snapshot, fiera):
        """Test a period with hours blocks only overlapping preferences."""
        snap = replace(bar_snapshot, periodi_critici=(replace(fiera, ora_inizio="18:00", ora_fine="23:00"),))
        validator = PreferenceValidator(snap)
        assert validator.validate(_pref(inizio="09:00", fine="13:00")).is_valid
        assert not validator.validate(_pref(inizio="17:00", fine="20:00")).is_valid
        assert not validator.validate(_pref(inizio=None, fine=None)).is_valid


class TestTeamConflicts:
    """Tests for conflicts with other team members."""

    @pytest.fixture
    def busy(self, bar_snapshot):
        return replace(bar_snapshot, assegnazioni=(
            Assegnazione("bruno", VENERDI, "08:00", "12:00", id="a1"),
        ))

    def test_conflict_rejected(self, busy):
        result = PreferenceValidator(busy).validate(_pref())
        assert result.status == StatoValidazione.REJECTED_CONFLICT
        assert result.reason == "Slot già occupato da altro collaboratore dello stesso nucleo"
        assert result.details[0].related_entity_id == "a1"

    def test_unavailable_skips_conflicts(self, busy):
        result = PreferenceValidator(busy).validate(_pref(tipo=TipoPreferenza.UNAVAILABLE))
        assert result.is_valid
        assert result.status == StatoValidazione.APPROVED

    def test_no_overlap(self, busy):
        assert PreferenceValidator(busy).validate(_pref(inizio="12:00", fine="18:00")).is_valid

    def test_other_members_leave_is_not_a_conflict(self, bar_snapshot):
        snap = replace(bar_snapshot, richieste_approvate=(
            RichiestaApprovata("bruno", TipoRichiesta.FERIE, VENERDI, VENERDI),
        ))
        assert PreferenceValidator(snap).validate(_pref()).is_valid


class TestConstraints:
    """Tests for rule template checks on preferences."""

    def test_hard_violation(self, bar_snapshot):
        snap = replace(
            bar_snapshot,
            vincoli=(TemplateVincolo("v1", "Riposo 11h", TipoVincolo.HARD, RiposoMinimo(11)),),
            assegnazioni=(Assegnazione("anna", date(2025, 3, 6), "14:00", "23:00"),),
        )
        result = PreferenceValidator(snap).validate(_pref(inizio="07:00", fine="13:00"))
        assert result.status == StatoValidazione.REJECTED_CONSTRAINT
        assert result.reason.startswith("Non rispettato riposo minimo di 11 ore")

    def test_soft_violation_approved_with_warning(self, bar_snapshot):
        snap = replace(bar_snapshot, vincoli=(
            TemplateVincolo("v1", "Max 2h", TipoVincolo.SOFT, OreMaxSettimanali(2)),
        ))
        result = PreferenceValidator(snap).validate(_pref())
        assert result.is_valid
        assert result.status == StatoValidazione.APPROVED
        assert [d.severity for d in result.details] == ["warning"]

    def test_untimed_preference_skips_rules(self, bar_snapshot):
        snap = replace(bar_snapshot, vincoli=(
            TemplateVincolo("v1", "Max 2h", TipoVincolo.HARD, OreMaxSettimanali(2)),
        ))
        assert PreferenceValidator(snap).validate(_pref(inizio=None, fine=None)).is_valid


class TestUnknownWorker:
    def test_rejected(self, bar_snapshot):
        result = PreferenceValidator(bar_snapshot).validate(_pref(coll_id="nessuno"))
        assert result.status == StatoValidazione.REJECTED_CONSTRAINT
        assert result.reason == "Collaboratore non trovato"
        assert result.to_dict()["is_valid"] is False
