"""Tests for the slot gatekeeper (last person standing rule)."""
from dataclasses import replace
from datetime import date

import pytest

from turni.models.context import SnapshotLookupError
from turni.models.nucleo import Nucleo
from turni.models.records import (
    Preferenza,
    RichiestaApprovata,
    RiposoAssegnato,
    TipoPreferenza,
    TipoRichiesta,
)
from turni.solver.gatekeeper import (
    TipoRichiestaSlot,
    check_multi_slot_availability,
    check_slot_availability,
    suggest_coverage_options,
)

MERCOLEDI = date(2025, 3, 5)
GIOVEDI = date(2025, 3, 6)


@pytest.fixture
def leave_snapshot(bar_snapshot):
    """Bar (min 2) with Anna on leave on Wednesday: exactly at minimum."""
    return replace(bar_snapshot, richieste_approvate=(
        RichiestaApprovata("anna", TipoRichiesta.FERIE, MERCOLEDI, MERCOLEDI),
    ))


class TestCheckSlotAvailability:
    """Tests for single-date gatekeeper decisions."""

    def test_approved_when_coverage_holds(self, bar_snapshot):
        result = check_slot_availability("bar", MERCOLEDI, "bruno", TipoRichiestaSlot.RIPOSO, bar_snapshot)
        assert result.disponibile
        assert result.motivo is None
        assert result.dettagli.copertura_attuale == 3
        assert result.dettagli.copertura_se_approvato == 2

    def test_blocked_at_minimum(self, leave_snapshot):
        """Test a rest request is blocked when the team is exactly at its minimum."""
        result = check_slot_availability("bar", MERCOLEDI, "bruno", TipoRichiestaSlot.RIPOSO, leave_snapshot)
        assert not result.disponibile
        assert result.dettagli.copertura_minima == 2
        assert result.dettagli.copertura_attuale == 2
        assert result.dettagli.copertura_se_approvato == 1
        assert result.dettagli.altri_disponibili == []
        assert result.motivo == (
            "Non puoi richiedere il riposo per questo giorno: Bar richiede almeno 2 collaboratori, "
            "ma approvando resterebbe solo 1. Servono ancora 1 persona/e di copertura."
        )

    def test_other_dates_unaffected(self, leave_snapshot):
        result = check_slot_availability("bar", GIOVEDI, "bruno", TipoRichiestaSlot.RIPOSO, leave_snapshot)
        assert result.disponibile

    def test_last_person_message(self, make_snapshot, make_worker):
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar")],
            nuclei=[Nucleo(id="bar", nome="Bar", membri_richiesti_min=1)],
        )
        result = check_slot_availability("bar", MERCOLEDI, "anna", TipoRichiestaSlot.FERIE, snap)
        assert not result.disponibile
        assert result.motivo == (
            "Non puoi richiedere le ferie per questo giorno: sei l'unico collaboratore disponibile "
            "per Bar e serve copertura minima di 1 persona/e."
        )

    def test_requester_already_unavailable(self, leave_snapshot):
        """Test no coverage impact when the requester is already off."""
        result = check_slot_availability("bar", MERCOLEDI, "anna", TipoRichiestaSlot.PERMESSO, leave_snapshot)
        assert result.disponibile
        assert result.dettagli.copertura_se_approvato == result.dettagli.copertura_attuale == 2

    def test_requester_not_in_team(self, bar_snapshot):
        result = check_slot_availability("bar", MERCOLEDI, "sconosciuto", TipoRichiestaSlot.RIPOSO, bar_snapshot)
        assert result.disponibile

    def test_hours_are_ignored(self, make_snapshot, make_worker):
        """Test workers with no residual hours still count as coverage."""
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar", ore=20, gia=20), make_worker("bruno", "bar")],
            nuclei=[Nucleo(id="bar", nome="Bar", membri_richiesti_min=1)],
        )
        result = check_slot_availability("bar", MERCOLEDI, "bruno", TipoRichiestaSlot.RIPOSO, snap)
        assert result.disponibile
        assert result.dettagli.copertura_attuale == 2

    def test_unavailable_preference_and_rest_reduce_coverage(self, bar_snapshot):
        snap = replace(
            bar_snapshot,
            riposi=(RiposoAssegnato("anna", 3),),
            preferenze=(Preferenza("bruno", MERCOLEDI, TipoPreferenza.UNAVAILABLE),),
        )
        result = check_slot_availability(
            "bar", MERCOLEDI, "carla", TipoRichiestaSlot.PREFERENZA_UNAVAILABLE, snap,
        )
        assert not result.disponibile
        assert result.motivo.startswith("Non puoi richiedere la non disponibilità per questo giorno: sei l'unico")

    def test_names_multi_team_workers(self, two_team_snapshot):
        snap = replace(two_team_snapshot, richieste_approvate=(
            RichiestaApprovata("anna", TipoRichiesta.FERIE, MERCOLEDI, MERCOLEDI),
        ))
        result = check_slot_availability("bar", MERCOLEDI, "bruno", TipoRichiestaSlot.RIPOSO, snap)
        assert not result.disponibile
        assert result.dettagli.altri_disponibili == ["Dario"]
        assert result.motivo.endswith(" Potrebbero coprire (previa conferma): Dario.")

    def test_accepts_string_kind_and_date(self, leave_snapshot):
        result = check_slot_availability("bar", "2025-03-05", "bruno", "ferie", leave_snapshot)
        assert not result.disponibile
        assert "le ferie" in result.motivo

    def test_unknown_team(self, bar_snapshot):
        with pytest.raises(SnapshotLookupError):
            check_slot_availability("sala", MERCOLEDI, "anna", TipoRichiestaSlot.RIPOSO, bar_snapshot)

    def test_advisory_only(self, leave_snapshot):
        """Test the snapshot is left untouched."""
        before = leave_snapshot.to_dict()
        check_slot_availability("bar", MERCOLEDI, "bruno", TipoRichiestaSlot.RIPOSO, leave_snapshot)
        assert leave_snapshot.to_dict() == before

    def test_to_dict(self, leave_snapshot):
        d = check_slot_availability("bar", MERCOLEDI, "bruno", TipoRichiestaSlot.RIPOSO, leave_snapshot).to_dict()
        assert d["disponibile"] is False
        assert d["dettagli"]["copertura_se_approvato"] == 1


class TestMultiSlot:
    """Tests for multi-day requests."""

    def test_any_block_rejects_all(self, leave_snapshot):
        result = check_multi_slot_availability(
            "bruno", "bar", [date(2025, 3, 4), MERCOLEDI, GIOVEDI], TipoRichiestaSlot.FERIE, leave_snapshot,
        )
        assert not result.tutti_disponibili
        assert result.giorni_bloccati == [MERCOLEDI]
        assert len(result.risultati) == 3

    def test_all_free(self, bar_snapshot):
        result = check_multi_slot_availability(
            "bruno", "bar", ["2025-03-04", "2025-03-05"], TipoRichiestaSlot.FERIE, bar_snapshot,
        )
        assert result.tutti_disponibili
        assert list(result.to_dict()["risultati"]) == ["2025-03-04", "2025-03-05"]


class TestCoverageOptions:
    """Tests for suggest_coverage_options."""

    def test_candidates_exclude_requester(self, two_team_snapshot):
        result = suggest_coverage_options("bar", MERCOLEDI, "anna", two_team_snapshot)
        assert result.possibile_coprire
        assert [c.id for c in result.collaboratori_che_potrebbero_coprire] == ["bruno", "dario"]

    def test_provenance_of_relocated_worker(self, two_team_snapshot):
        result = suggest_coverage_options("bar", MERCOLEDI, "anna", two_team_snapshot)
        opzioni = {c.id: c for c in result.collaboratori_che_potrebbero_coprire}
        assert opzioni["dario"].provenienza == "Cucina"
        assert opzioni["bruno"].provenienza is None

    def test_low_hours_excluded(self, make_snapshot, make_worker):
        snap = make_snapshot(
            collaboratori=[make_worker("anna", "bar"), make_worker("bruno", "bar", ore=20, gia=16)],
            nuclei=[Nucleo(id="bar", nome="Bar")],
        )
        result = suggest_coverage_options("bar", MERCOLEDI, "anna", snap)
        assert not result.possibile_coprire
        assert result.to_dict() == {"possibile_coprire": False, "collaboratori_che_potrebbero_coprire": []}

    def test_unavailable_excluded(self, leave_snapshot):
        result = suggest_coverage_options("bar", MERCOLEDI, "bruno", leave_snapshot)
        assert [c.id for c in result.collaboratori_che_potrebbero_coprire] == ["carla"]
