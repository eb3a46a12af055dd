"""Tests for required staff and shift schedule resolution."""
from datetime import date

import pytest

from turni.models.criticita import CriticitaContinuativa, PeriodoCritico
from turni.models.nucleo import Nucleo
from turni.models.records import PatternStorico
from turni.models.slots import OrarioTurno
from turni.solver.staffing import calculate_required_staff, resolve_shift_schedule

SABATO = date(2025, 3, 8)
LUNEDI = date(2025, 3, 3)


class TestRequiredStaff:
    """Tests for calculate_required_staff."""

    def test_team_minimum(self, make_snapshot):
        nucleo = Nucleo(id="bar", nome="Bar", membri_richiesti_min=3)
        assert calculate_required_staff(nucleo, LUNEDI, make_snapshot(nuclei=[nucleo])) == 3

    def test_criticality_extra_then_multiplier(self, make_snapshot):
        """Test ceil((4 + 2) * 1.5) = 9 on the critical weekday."""
        nucleo = Nucleo(id="sala", nome="Sala", membri_richiesti_min=4)
        snap = make_snapshot(
            nuclei=[nucleo],
            criticita_continuative=[CriticitaContinuativa(
                id="c1", nome="Sabato sera", giorno_settimana=6, staff_extra=2, moltiplicatore_staff=1.5,
            )],
        )
        assert calculate_required_staff(nucleo, SABATO, snap) == 9
        assert calculate_required_staff(nucleo, LUNEDI, snap) == 4

    def test_multiplier_rounds_up(self, make_snapshot):
        nucleo = Nucleo(id="bar", nome="Bar", membri_richiesti_min=3)
        snap = make_snapshot(
            nuclei=[nucleo],
            criticita_continuative=[CriticitaContinuativa(
                id="c1", nome="Mercato", giorno_settimana=1, moltiplicatore_staff=1.2,
            )],
        )
        assert calculate_required_staff(nucleo, LUNEDI, snap) == 4

    def test_float_noise_does_not_round_up(self, make_snapshot):
        """Test 10 × 1.1 stays 11."""
        nucleo = Nucleo(id="bar", nome="Bar", membri_richiesti_min=10)
        snap = make_snapshot(
            nuclei=[nucleo],
            criticita_continuative=[CriticitaContinuativa(
                id="c1", nome="Mercato", giorno_settimana=1, moltiplicatore_staff=1.1,
            )],
        )
        assert calculate_required_staff(nucleo, LUNEDI, snap) == 11

    def test_period_floor_then_multiplier(self, make_snapshot):
        nucleo = Nucleo(id="bar", nome="Bar", membri_richiesti_min=2)
        snap = make_snapshot(
            nuclei=[nucleo],
            periodi_critici=[PeriodoCritico(
                id="p1", nome="Fiera", data_inizio=LUNEDI, data_fine=LUNEDI,
                staff_minimo=4, moltiplicatore_staff=1.5,
            )],
        )
        assert calculate_required_staff(nucleo, LUNEDI, snap) == 6
        assert calculate_required_staff(nucleo, date(2025, 3, 4), snap) == 2

    def test_inactive_period_ignored(self, make_snapshot):
        nucleo = Nucleo(id="bar", nome="Bar", membri_richiesti_min=2)
        snap = make_snapshot(
            nuclei=[nucleo],
            periodi_critici=[PeriodoCritico(
                id="p1", nome="Fiera", data_inizio=LUNEDI, data_fine=LUNEDI, staff_minimo=5, attivo=False,
            )],
        )
        assert calculate_required_staff(nucleo, LUNEDI, snap) == 2

    def test_clamped_to_team_max(self, make_snapshot):
        nucleo = Nucleo(id="bar", nome="Bar", membri_richiesti_min=4, membri_richiesti_max=5)
        snap = make_snapshot(
            nuclei=[nucleo],
            criticita_continuative=[CriticitaContinuativa(
                id="c1", nome="Sabato", giorno_settimana=6, staff_extra=2, moltiplicatore_staff=1.5,
            )],
        )
        assert calculate_required_staff(nucleo, SABATO, snap) == 5

    def test_never_below_one(self, make_snapshot):
        nucleo = Nucleo(id="bar", nome="Bar", membri_richiesti_min=0)
        assert calculate_required_staff(nucleo, LUNEDI, make_snapshot(nuclei=[nucleo])) == 1


class TestShiftSchedule:
    """Tests for resolve_shift_schedule precedence."""

    @pytest.fixture
    def pattern(self):
        return PatternStorico(
            nucleo_id="bar", giorno_settimana=1, media_collaboratori=2,
            orario_tipico=OrarioTurno("07:00", "13:00"),
        )

    def test_default(self, make_snapshot, config):
        nucleo = Nucleo(id="bar", nome="Bar")
        orario = resolve_shift_schedule(nucleo, 1, make_snapshot(nuclei=[nucleo]), config)
        assert (orario.inizio, orario.fine, orario.ore) == ("09:00", "18:00", 8.0)

    def test_historical_pattern(self, make_snapshot, pattern):
        nucleo = Nucleo(id="bar", nome="Bar")
        snap = make_snapshot(nuclei=[nucleo], pattern_storici=[pattern])
        orario = resolve_shift_schedule(nucleo, 1, snap)
        assert (orario.inizio, orario.fine, orario.ore) == ("07:00", "13:00", 6.0)
        assert resolve_shift_schedule(nucleo, 2, snap).inizio == "09:00"

    def test_team_override_wins(self, make_snapshot, pattern):
        nucleo = Nucleo(id="bar", nome="Bar", orario_specifico={1: OrarioTurno("12:00", "20:00", durata=7.5)})
        snap = make_snapshot(nuclei=[nucleo], pattern_storici=[pattern])
        orario = resolve_shift_schedule(nucleo, 1, snap)
        assert orario.inizio == "12:00"
        assert orario.ore == 7.5

    def test_custom_default(self, make_snapshot, config):
        nucleo = Nucleo(id="bar", nome="Bar")
        config.default_ora_inizio = "08:00"
        config.default_ora_fine = "14:00"
        config.default_durata_ore = 6.0
        orario = resolve_shift_schedule(nucleo, 3, make_snapshot(nuclei=[nucleo]), config)
        assert (orario.inizio, orario.ore) == ("08:00", 6.0)
