"""Tests for per-worker availability."""
from datetime import date

from turni.models.records import (
    Preferenza,
    RichiestaApprovata,
    RiposoAssegnato,
    StatoValidazione,
    TipoPreferenza,
    TipoRichiesta,
    TipoRiposo,
)
from turni.solver.availability import calculate_availability, init_runtime_hours, worker_availability

MERCOLEDI = date(2025, 3, 5)


def _records_by_id(records):
    return {r.collaboratore_id: r for r in records}


class TestWorkerAvailability:
    """Tests for the availability checks and their precedence."""

    def test_available_by_default(self, bar_snapshot):
        coll = bar_snapshot.get_collaboratore("anna")
        record = worker_availability(coll, MERCOLEDI, 8, bar_snapshot)
        assert record.disponibile
        assert record.motivo is None
        assert record.ore_residue == 40

    def test_rest_day(self, bar_snapshot):
        snap = bar_snapshot.with_riposi([RiposoAssegnato("anna", 3, TipoRiposo.MEZZA_MATTINA)])
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap)
        assert not record.disponibile
        assert record.motivo == "Riposo mezza_mattina"

    def test_approved_leave(self, make_snapshot, make_worker):
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar")],
            richieste_approvate=[RichiestaApprovata("anna", TipoRichiesta.FERIE, date(2025, 3, 4), date(2025, 3, 6))],
        )
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap)
        assert record.motivo == "Ferie approvato"

    def test_insufficient_hours(self, make_snapshot, make_worker):
        snap = make_snapshot(collaboratori=[make_worker("anna", "bar", ore=20, gia=15)])
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap)
        assert not record.disponibile
        assert record.motivo == "Ore insufficienti (5.0h residue)"

    def test_runtime_hours_override_snapshot(self, bar_snapshot):
        coll = bar_snapshot.get_collaboratore("anna")
        record = worker_availability(coll, MERCOLEDI, 8, bar_snapshot, {"anna": 36.0})
        assert record.ore_residue == 4
        assert not record.disponibile

    def test_ignora_ore(self, make_snapshot, make_worker):
        snap = make_snapshot(collaboratori=[make_worker("anna", "bar", ore=10, gia=10)])
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap, ignora_ore=True)
        assert record.disponibile

    def test_unavailable_preference(self, make_snapshot, make_worker):
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar")],
            preferenze=[Preferenza("anna", MERCOLEDI, TipoPreferenza.UNAVAILABLE)],
        )
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap)
        assert not record.disponibile
        assert record.motivo == "Non disponibile (preferenza)"
        assert record.preferenza == TipoPreferenza.UNAVAILABLE

    def test_preferred_carried(self, make_snapshot, make_worker):
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar")],
            preferenze=[Preferenza("anna", MERCOLEDI, TipoPreferenza.PREFERRED)],
        )
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap)
        assert record.disponibile
        assert record.is_preferred

    def test_rejected_preference_ignored(self, make_snapshot, make_worker):
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar")],
            preferenze=[Preferenza(
                "anna", MERCOLEDI, TipoPreferenza.UNAVAILABLE,
                stato_validazione=StatoValidazione.REJECTED_CRITICAL,
            )],
        )
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap)
        assert record.disponibile
        assert record.preferenza is None

    def test_rest_day_wins_over_leave(self, make_snapshot, make_worker):
        """Test first matching check decides the reason."""
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar")],
            riposi=[RiposoAssegnato("anna", 3)],
            richieste_approvate=[RichiestaApprovata("anna", TipoRichiesta.PERMESSO, MERCOLEDI, MERCOLEDI)],
        )
        record = worker_availability(snap.get_collaboratore("anna"), MERCOLEDI, 8, snap)
        assert record.motivo == "Riposo intero"


class TestCalculateAvailability:
    """Tests for team-wide availability."""

    def test_every_member_in_order(self, two_team_snapshot):
        records = calculate_availability("bar", MERCOLEDI, 8, two_team_snapshot)
        assert [r.collaboratore_id for r in records] == ["anna", "bruno", "dario"]
        assert all(r.disponibile for r in records)

    def test_mixed(self, bar_snapshot):
        snap = bar_snapshot.with_riposi([RiposoAssegnato("bruno", 3)])
        records = _records_by_id(calculate_availability("bar", MERCOLEDI, 8, snap))
        assert records["anna"].disponibile
        assert not records["bruno"].disponibile

    def test_init_runtime_hours(self, make_snapshot, make_worker):
        snap = make_snapshot(collaboratori=[make_worker("anna", gia=6), make_worker("bruno")])
        assert init_runtime_hours(snap) == {"anna": 6, "bruno": 0}
