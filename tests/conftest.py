"""Pytest configuration and fixtures."""
import sys
from datetime import date, timedelta
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from turni.models.collaboratore import Collaboratore
from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.nucleo import Nucleo

# Monday, no Italian holidays in the week
WEEK_START = date(2025, 3, 3)


def build_snapshot(collaboratori=(), nuclei=(), week_start=WEEK_START, **kwargs) -> ContextSnapshot:
    """Snapshot for one Monday-start week with the given entities."""
    week_end = kwargs.pop("week_end", week_start + timedelta(days=6))
    extra = {k: tuple(v) if isinstance(v, list) else v for k, v in kwargs.items()}
    return ContextSnapshot(
        week_start=week_start,
        week_end=week_end,
        collaboratori=tuple(collaboratori),
        nuclei=tuple(nuclei),
        **extra,
    )


def worker(coll_id: str, *nuclei: str, ore: float = 40.0, gia: float = 0.0, primario=None) -> Collaboratore:
    """Worker belonging to the given teams (first one primary by default)."""
    return Collaboratore(
        id=coll_id,
        nome=coll_id.capitalize(),
        ore_settimanali=ore,
        ore_gia_assegnate=gia,
        nuclei_appartenenza=tuple(nuclei),
        nucleo_primario=primario or (nuclei[0] if nuclei else None),
    )


@pytest.fixture
def week_start():
    """Monday of the test week."""
    return WEEK_START


@pytest.fixture
def config():
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture
def make_snapshot():
    """Factory for snapshots of the test week."""
    return build_snapshot


@pytest.fixture
def make_worker():
    """Factory for workers."""
    return worker


@pytest.fixture
def bar_snapshot():
    """Team "Bar" (min 2) with three 40h workers and nothing else."""
    return build_snapshot(
        collaboratori=[worker("anna", "bar"), worker("bruno", "bar"), worker("carla", "bar")],
        nuclei=[Nucleo(id="bar", nome="Bar", membri_richiesti_min=2)],
    )


@pytest.fixture
def two_team_snapshot():
    """Bar and Cucina, with one worker belonging to both (primary Cucina)."""
    return build_snapshot(
        collaboratori=[
            worker("anna", "bar"),
            worker("bruno", "bar"),
            worker("dario", "cucina", "bar"),
            worker("elena", "cucina"),
        ],
        nuclei=[
            Nucleo(id="bar", nome="Bar", membri_richiesti_min=2),
            Nucleo(id="cucina", nome="Cucina", membri_richiesti_min=1),
        ],
    )


@pytest.fixture
def snapshot_payload():
    """Raw camelCase snapshot, as sent by the persistence layer."""
    return {
        "aziendaId": "az-1",
        "weekStart": "2025-03-03",
        "weekEnd": "2025-03-09",
        "collaboratori": [
            {"id": "anna", "nome": "Anna", "cognome": "Rossi", "ore_settimanali": 40,
             "nuclei_appartenenza": ["bar"], "nucleo_primario": "bar"},
            {"id": "bruno", "nome": "Bruno", "cognome": "Bianchi", "ore_settimanali": 40,
             "nuclei_appartenenza": ["bar"], "nucleo_primario": "bar"},
            {"id": "carla", "nome": "Carla", "cognome": "Verdi", "ore_settimanali": 24,
             "nuclei_appartenenza": ["bar"], "nucleo_primario": "bar"},
        ],
        "nuclei": [
            {"id": "bar", "nome": "Bar", "membri_richiesti_min": 2,
             "orario_specifico": {"sabato": {"inizio": "10:00", "fine": "14:00"}}},
        ],
        "criticitaContinuative": [
            {"id": "c1", "nome": "Mercato", "giorno_settimana": 6, "staff_extra": 1},
        ],
        "richiesteApprovate": [
            {"id": "r1", "collaboratore_id": "carla", "tipo": "ferie",
             "data_inizio": "2025-03-05", "data_fine": "2025-03-05"},
        ],
        "vincoli": [
            {"id": "v1", "nome": "Max 48h", "tipo_vincolo": "HARD",
             "regola": {"tipo": "ore_max_settimanali", "ore": 48}},
        ],
    }
