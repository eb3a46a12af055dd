"""Tests for candidate ranking, selection and generation statistics."""
from datetime import date

import pytest

from turni.models.records import TipoPreferenza
from turni.models.schedule import CoperturaStatus, GeneratedShift
from turni.solver.availability import AvailabilityRecord
from turni.solver.scoring import candidate_score, rank_candidates, relocation_source, select_candidates
from turni.solver.stats import (
    calculate_coverage_stats,
    calculate_workload,
    confidence_average,
    coverage_status,
    equity_score,
    shift_confidence,
)


def _record(coll_id, ore=40.0, disponibile=True, preferenza=None, nuclei=("bar",), primario="bar"):
    return AvailabilityRecord(
        collaboratore_id=coll_id,
        nome_completo=coll_id.capitalize(),
        disponibile=disponibile,
        ore_residue=ore,
        nuclei_appartenenza=list(nuclei),
        nucleo_primario=primario,
        preferenza=preferenza,
    )


def _shift(status, confidence=0.9):
    return GeneratedShift(
        nucleo_id="bar", nucleo_nome="Bar", data=date(2025, 3, 3), ora_inizio="09:00", ora_fine="18:00",
        durata_ore=8, num_collaboratori_richiesti=2, collaboratori_suggeriti=[],
        copertura_status=status, confidence=confidence, reasoning="",
    )


class TestRanking:
    """Tests for rank_candidates sort order."""

    def test_available_first(self):
        ranked = rank_candidates([_record("a", disponibile=False, ore=40), _record("b", ore=8)], "bar")
        assert [r.collaboratore_id for r in ranked] == ["b", "a"]

    def test_preferred_before_hours(self):
        ranked = rank_candidates([_record("a", ore=40), _record("b", ore=8, preferenza=TipoPreferenza.PREFERRED)], "bar")
        assert [r.collaboratore_id for r in ranked] == ["b", "a"]

    def test_more_residual_hours_first(self):
        ranked = rank_candidates([_record("a", ore=16), _record("b", ore=32), _record("c", ore=24)], "bar")
        assert [r.collaboratore_id for r in ranked] == ["b", "c", "a"]

    def test_primary_team_breaks_ties(self):
        ranked = rank_candidates([
            _record("a", nuclei=("cucina", "bar"), primario="cucina"),
            _record("b"),
        ], "bar")
        assert [r.collaboratore_id for r in ranked] == ["b", "a"]

    def test_stable_for_full_ties(self):
        ranked = rank_candidates([_record("c"), _record("a"), _record("b")], "bar")
        assert [r.collaboratore_id for r in ranked] == ["c", "a", "b"]

    def test_available_preference_not_boosted(self):
        ranked = rank_candidates([_record("a", ore=40), _record("b", ore=8, preferenza=TipoPreferenza.AVAILABLE)], "bar")
        assert [r.collaboratore_id for r in ranked] == ["a", "b"]


class TestScore:
    """Tests for the informational score."""

    def test_components(self, config):
        assert candidate_score(_record("a", ore=12), config) == 112
        assert candidate_score(_record("a", ore=60, preferenza=TipoPreferenza.PREFERRED), config) == 190
        assert candidate_score(_record("a", ore=10, disponibile=False), config) == 10


class TestSelection:
    """Tests for select_candidates."""

    def test_selects_top_available(self, two_team_snapshot):
        ranked = [_record("a"), _record("b"), _record("c", disponibile=False)]
        result = select_candidates(ranked, 1, "bar", two_team_snapshot)
        assert [c.selezionato for c in result] == [True, False, False]
        assert len(result) == 3

    def test_never_selects_unavailable(self, two_team_snapshot):
        ranked = [_record("a"), _record("c", disponibile=False)]
        result = select_candidates(ranked, 2, "bar", two_team_snapshot)
        assert [c.id for c in result if c.selezionato] == ["a"]

    def test_relocation_annotated_when_selected(self, two_team_snapshot):
        dario = _record("dario", nuclei=("cucina", "bar"), primario="cucina")
        result = select_candidates([dario], 1, "bar", two_team_snapshot)
        assert result[0].spostabile_da == "Cucina"

    def test_soft_notes_attached(self, two_team_snapshot):
        result = select_candidates([_record("a")], 1, "bar", two_team_snapshot, avvisi={"a": ["nota"]})
        assert result[0].avvisi_vincoli == ["nota"]

    @pytest.mark.parametrize("nuclei,primario,expected", [
        (("bar",), "bar", None),
        (("cucina", "bar"), "bar", None),
        (("cucina", "bar"), "cucina", "Cucina"),
        (("cucina", "bar"), "sala", None),
    ])
    def test_relocation_source(self, two_team_snapshot, nuclei, primario, expected):
        record = _record("x", nuclei=nuclei, primario=primario)
        assert relocation_source(record, "bar", two_team_snapshot) == expected


class TestStats:
    """Tests for coverage, confidence and workload aggregates."""

    @pytest.mark.parametrize("sel,req,expected", [
        (2, 2, CoperturaStatus.OK),
        (3, 2, CoperturaStatus.OK),
        (1, 2, CoperturaStatus.PARZIALE),
        (0, 2, CoperturaStatus.SCOPERTA),
    ])
    def test_coverage_status(self, sel, req, expected):
        assert coverage_status(sel, req) == expected

    def test_confidence(self, config):
        assert shift_confidence(CoperturaStatus.OK, False, False, config) == 0.9
        assert shift_confidence(CoperturaStatus.OK, True, False, config) == 0.95
        assert shift_confidence(CoperturaStatus.PARZIALE, False, True, config) == 0.55
        assert shift_confidence(CoperturaStatus.SCOPERTA, False, False, config) == 0.3

    def test_confidence_clamped(self, config):
        config.confidence_ok = 0.98
        assert shift_confidence(CoperturaStatus.OK, True, False, config) == 0.99
        config.confidence_scoperta = 0.1
        assert shift_confidence(CoperturaStatus.SCOPERTA, False, True, config) == 0.1

    def test_coverage_stats(self):
        stats = calculate_coverage_stats([
            _shift(CoperturaStatus.OK), _shift(CoperturaStatus.OK),
            _shift(CoperturaStatus.PARZIALE), _shift(CoperturaStatus.SCOPERTA),
        ])
        assert (stats.totale, stats.coperti, stats.parziali, stats.scoperti) == (4, 2, 1, 1)
        assert stats.percentuale == 50.0

    def test_coverage_stats_empty(self):
        assert calculate_coverage_stats([]).percentuale == 0.0

    def test_equity(self):
        assert equity_score([]) == 1.0
        assert equity_score([50, 50, 50]) == 1.0
        assert equity_score([0, 100]) == pytest.approx(0.5)
        assert equity_score([0, 300]) == 0.0

    def test_workload(self, make_snapshot, make_worker):
        snap = make_snapshot(collaboratori=[make_worker("anna"), make_worker("bruno", ore=20), make_worker("zero", ore=0)])
        workload = calculate_workload(snap, {"anna": 20.0, "bruno": 20.0})
        entries = {e.id: e for e in workload.per_collaboratore}
        assert entries["anna"].percentuale_utilizzo == 50.0
        assert entries["bruno"].percentuale_utilizzo == 100.0
        assert entries["zero"].percentuale_utilizzo == 0.0
        assert 0.0 <= workload.equita_score <= 1.0

    def test_confidence_average(self):
        assert confidence_average([]) == 0.0
        assert confidence_average([_shift(CoperturaStatus.OK, 0.9), _shift(CoperturaStatus.SCOPERTA, 0.3)]) == 0.6
