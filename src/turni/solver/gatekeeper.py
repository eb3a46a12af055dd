"""
Slot Gatekeeper
===============
"Last person standing" rule: a rest/leave/unavailability request is
blocked when approving it would drop the team below its minimum.

Algorithm:
    1. Current availability of every team member (rest, leave and
       UNAVAILABLE preferences; hours are ignored)
    2. Requester already unavailable → approve (no coverage impact)
    3. coverage_if_approved = available - 1
    4. coverage_if_approved >= team minimum → approve
    5. Otherwise block, naming the shortfall and any available
       multi-team workers who could in principle cover

The gatekeeper is advisory: it never reassigns anyone.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional

from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.slots import DateLike, to_date
from turni.solver.availability import calculate_availability, worker_availability
from turni.utils.logging_setup import get_logger, log_function_call

logger = get_logger("turni.solver.gatekeeper")


class TipoRichiestaSlot(str, Enum):
    """Kind of request being checked."""
    RIPOSO = "riposo"
    FERIE = "ferie"
    PERMESSO = "permesso"
    PREFERENZA_UNAVAILABLE = "preferenza_unavailable"

    @property
    def label(self) -> str:
        return {
            TipoRichiestaSlot.RIPOSO: "il riposo",
            TipoRichiestaSlot.FERIE: "le ferie",
            TipoRichiestaSlot.PERMESSO: "il permesso",
            TipoRichiestaSlot.PREFERENZA_UNAVAILABLE: "la non disponibilità",
        }[self]


@dataclass
class SlotAvailabilityDetails:
    copertura_minima: int
    copertura_attuale: int
    copertura_se_approvato: int
    altri_disponibili: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "copertura_minima": self.copertura_minima,
            "copertura_attuale": self.copertura_attuale,
            "copertura_se_approvato": self.copertura_se_approvato,
            "altri_disponibili": list(self.altri_disponibili),
        }


@dataclass
class SlotAvailabilityResult:
    """Gatekeeper decision for one date."""
    disponibile: bool
    motivo: Optional[str] = None
    dettagli: Optional[SlotAvailabilityDetails] = None

    def to_dict(self) -> dict:
        d = {"disponibile": self.disponibile}
        if self.motivo is not None:
            d["motivo"] = self.motivo
        if self.dettagli is not None:
            d["dettagli"] = self.dettagli.to_dict()
        return d


@dataclass
class MultiSlotResult:
    """Gatekeeper decisions for a multi-day request."""
    tutti_disponibili: bool
    risultati: Dict[date, SlotAvailabilityResult] = field(default_factory=dict)

    @property
    def giorni_bloccati(self) -> List[date]:
        return [d for d, r in self.risultati.items() if not r.disponibile]

    def to_dict(self) -> dict:
        return {
            "tutti_disponibili": self.tutti_disponibili,
            "risultati": {d.isoformat(): r.to_dict() for d, r in self.risultati.items()},
        }


@dataclass
class CoverageOption:
    id: str
    nome: str
    ore_residue: float
    provenienza: Optional[str] = None  # Primary team name when coming from another team

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.nome,
            "provenienza": self.provenienza,
            "ore_residue": self.ore_residue,
        }


@dataclass
class CoverageSuggestion:
    possibile_coprire: bool
    collaboratori_che_potrebbero_coprire: List[CoverageOption] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "possibile_coprire": self.possibile_coprire,
            "collaboratori_che_potrebbero_coprire": [
                c.to_dict() for c in self.collaboratori_che_potrebbero_coprire
            ],
        }


def _block_message(
    tipo: TipoRichiestaSlot,
    nucleo_nome: str,
    copertura_minima: int,
    copertura_se: int,
    altri_disponibili: List[str],
) -> str:
    if copertura_se <= 0:
        msg = (
            f"Non puoi richiedere {tipo.label} per questo giorno: sei l'unico collaboratore "
            f"disponibile per {nucleo_nome} e serve copertura minima di {copertura_minima} persona/e."
        )
    else:
        mancanti = copertura_minima - copertura_se
        msg = (
            f"Non puoi richiedere {tipo.label} per questo giorno: {nucleo_nome} richiede almeno "
            f"{copertura_minima} collaboratori, ma approvando resterebbe solo {copertura_se}. "
            f"Servono ancora {mancanti} persona/e di copertura."
        )
    if altri_disponibili:
        msg += f" Potrebbero coprire (previa conferma): {', '.join(altri_disponibili)}."
    return msg


@log_function_call
def check_slot_availability(
    nucleo_id: str,
    data: DateLike,
    collaboratore_id: str,
    tipo_richiesta: TipoRichiestaSlot,
    snapshot: ContextSnapshot,
) -> SlotAvailabilityResult:
    """
    Decide whether a request can be granted without breaching team coverage.

    Args:
        nucleo_id: Team to protect
        data: Requested date
        collaboratore_id: Requesting worker
        tipo_richiesta: Kind of request
        snapshot: Context

    Returns:
        SlotAvailabilityResult (disponibile=False means blocked)

    Raises:
        SnapshotLookupError: If the team is not in the snapshot
    """
    tipo = TipoRichiestaSlot(tipo_richiesta)
    day = to_date(data)
    nucleo = snapshot.get_nucleo(nucleo_id)
    minimo = nucleo.membri_richiesti_min

    records = calculate_availability(nucleo_id, day, 0.0, snapshot, ignora_ore=True)
    disponibili = [r for r in records if r.disponibile]
    attuale = len(disponibili)

    altri_multi = [
        r.nome_completo for r in disponibili
        if r.collaboratore_id != collaboratore_id and len(r.nuclei_appartenenza) >= 2
    ]

    richiedente = next((r for r in records if r.collaboratore_id == collaboratore_id), None)
    if richiedente is None or not richiedente.disponibile:
        logger.info(f"Richiesta {tipo.value} di {collaboratore_id} il {day}: nessun impatto sulla copertura")
        return SlotAvailabilityResult(
            disponibile=True,
            dettagli=SlotAvailabilityDetails(minimo, attuale, attuale, altri_multi),
        )

    copertura_se = attuale - 1
    dettagli = SlotAvailabilityDetails(minimo, attuale, copertura_se, altri_multi)

    if copertura_se >= minimo:
        logger.info(f"Richiesta {tipo.value} di {collaboratore_id} il {day}: approvabile ({copertura_se}/{minimo})")
        return SlotAvailabilityResult(disponibile=True, dettagli=dettagli)

    motivo = _block_message(tipo, nucleo.nome, minimo, copertura_se, altri_multi)
    logger.warning(f"Richiesta {tipo.value} di {collaboratore_id} il {day} bloccata: {copertura_se}/{minimo}")
    return SlotAvailabilityResult(disponibile=False, motivo=motivo, dettagli=dettagli)


def check_multi_slot_availability(
    collaboratore_id: str,
    nucleo_id: str,
    date_richieste: Iterable[DateLike],
    tipo_richiesta: TipoRichiestaSlot,
    snapshot: ContextSnapshot,
) -> MultiSlotResult:
    """Run the gatekeeper for every date of a multi-day request; any block rejects the whole request."""
    risultati: Dict[date, SlotAvailabilityResult] = {}
    for d in date_richieste:
        day = to_date(d)
        risultati[day] = check_slot_availability(nucleo_id, day, collaboratore_id, tipo_richiesta, snapshot)
    tutti = all(r.disponibile for r in risultati.values())
    return MultiSlotResult(tutti_disponibili=tutti, risultati=risultati)


def suggest_coverage_options(
    nucleo_id: str,
    data: DateLike,
    collaboratore_id: str,
    snapshot: ContextSnapshot,
    config: Optional[EngineConfig] = None,
) -> CoverageSuggestion:
    """
    Team members who could cover a slot the requester wants to free.

    A candidate has no rest day, no leave, no UNAVAILABLE preference and
    at least one default shift of residual hours.
    """
    config = config or EngineConfig()
    day = to_date(data)
    opzioni: List[CoverageOption] = []

    for coll in snapshot.membri_nucleo(nucleo_id):
        if coll.id == collaboratore_id:
            continue
        record = worker_availability(coll, day, 0.0, snapshot, ignora_ore=True)
        if not record.disponibile:
            continue
        if coll.ore_residue < config.ore_minime_copertura:
            continue

        provenienza = None
        if coll.multi_nucleo and coll.nucleo_primario and coll.nucleo_primario != nucleo_id:
            primario = snapshot.find_nucleo(coll.nucleo_primario)
            if primario is not None:
                provenienza = primario.nome

        opzioni.append(CoverageOption(
            id=coll.id,
            nome=coll.nome_completo,
            ore_residue=coll.ore_residue,
            provenienza=provenienza,
        ))

    return CoverageSuggestion(possibile_coprire=bool(opzioni), collaboratori_che_potrebbero_coprire=opzioni)
