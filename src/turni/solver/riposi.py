"""
Rest-Day Assignment
===================
Automatic weekly rest days for a worker, placed on the days that hurt
coverage the least.

Day score (weekday 1-7, starting at 100):
    - 15 × staff_extra + 20 × (multiplier - 1) per recurring criticality
    - 10 per other worker on approved leave that date
    - 50 per team of the worker that would drop below its minimum
      (the day is flagged and skipped)
    + 10 if the day has fewer rest days than the weekly average
    + 5 on Saturday and Sunday

Quota kinds:
    giorni_interi   N whole days (max 7)
    mezze_giornate  N half days (max 14, two walks over the week)
    ore             N hours → whole 8h days, then 4h half days
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set

from turni.models.collaboratore import Collaboratore
from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.records import RiposoAssegnato, TipoRiposo
from turni.models.schedule import RiposiAssignmentResult, RiposoGenerato
from turni.models.slots import WEEKEND, DateLike, nome_giorno, to_date
from turni.utils.logging_setup import get_logger, log_function_call

logger = get_logger("turni.solver.riposi")


class TipoQuota(str, Enum):
    """How a rest quota is expressed."""
    GIORNI_INTERI = "giorni_interi"
    MEZZE_GIORNATE = "mezze_giornate"
    ORE = "ore"


_DESCRIZIONI = {
    TipoQuota.GIORNI_INTERI: "giorni di riposo",
    TipoQuota.MEZZE_GIORNATE: "mezze giornate di riposo",
    TipoQuota.ORE: "ore di riposo",
}

_SUFFISSI = {
    TipoRiposo.INTERO: "",
    TipoRiposo.MEZZA_MATTINA: " (mattina)",
    TipoRiposo.MEZZA_POMERIGGIO: " (pomeriggio)",
}


@dataclass
class DayScore:
    giorno: int
    data: date
    score: float
    would_uncover: bool = False


@dataclass
class RichiestaRiposi:
    """Rest quota of one worker, for batch assignment."""
    collaboratore_id: str
    tipo_riposo: TipoQuota
    quantita: int


@dataclass
class _Walk:
    """Placement state for one assignment call."""
    coll: Collaboratore
    settimana_inizio: date
    occupati: Dict[int, Set[TipoRiposo]]
    riposi: List[RiposoGenerato] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def note(self, messaggio: str):
        if messaggio not in self.warnings:
            self.warnings.append(messaggio)

    def place(self, day: DayScore, tipo: TipoRiposo):
        self.occupati.setdefault(day.giorno, set()).add(tipo)
        self.riposi.append(RiposoGenerato(
            collaboratore_id=self.coll.id,
            nome_completo=self.coll.nome_completo,
            giorno_settimana=day.giorno,
            giorno_nome=nome_giorno(day.giorno),
            tipo_riposo=tipo,
            data=day.data,
            confidence=round(min(1.0, day.score / 100), 2),
        ))


def calculate_day_scores(
    coll: Collaboratore,
    settimana_inizio: date,
    snapshot: ContextSnapshot,
    config: Optional[EngineConfig] = None,
) -> List[DayScore]:
    """
    Score every weekday of the week for a rest day of `coll`.

    Returns:
        DayScore for weekdays 1-7, in weekday order
    """
    config = config or EngineConfig()
    nuclei = snapshot.nuclei_di(coll.id)
    media_riposi = len(snapshot.riposi) / 7
    scores: List[DayScore] = []

    for giorno in range(1, 8):
        data = settimana_inizio + timedelta(days=giorno - 1)
        score = float(config.riposo_score_base)
        would_uncover = False

        for crit in snapshot.criticita_per_giorno(giorno):
            score -= crit.staff_extra * config.riposo_peso_staff_extra
            score -= (crit.moltiplicatore_staff - 1) * config.riposo_peso_moltiplicatore

        assenti = [r for r in snapshot.richieste_per_data(data) if r.collaboratore_id != coll.id]
        score -= len(assenti) * config.riposo_peso_assenze

        for nucleo in nuclei:
            membri = snapshot.membri_nucleo(nucleo.id)
            non_disponibili = {
                m.id for m in membri
                if snapshot.riposo_per(m.id, giorno) is not None
                or snapshot.richiesta_per(m.id, data) is not None
            }
            if coll.id in non_disponibili:
                # already off that day, a rest changes nothing
                continue
            if len(membri) - len(non_disponibili) - 1 < nucleo.membri_richiesti_min:
                would_uncover = True
                score -= config.riposo_penalita_scopertura

        riposi_giorno = sum(1 for r in snapshot.riposi if r.giorno_settimana == giorno)
        if riposi_giorno < media_riposi:
            score += config.riposo_bonus_distribuzione

        if giorno in WEEKEND:
            score += config.riposo_bonus_weekend

        scores.append(DayScore(giorno=giorno, data=data, score=max(0.0, score), would_uncover=would_uncover))

    return scores


def _place_whole_days(walk: _Walk, ordinati: List[DayScore], quanti: int) -> List[int]:
    """Walk days best-first placing whole rest days; returns days avoided for coverage."""
    evitati: List[int] = []
    assegnati = 0
    for day in ordinati:
        if assegnati >= quanti:
            break
        if walk.occupati.get(day.giorno):
            walk.note(f"{nome_giorno(day.giorno)}: già assegnato un riposo")
            continue
        if day.would_uncover:
            walk.note(f"{nome_giorno(day.giorno)}: evitato per copertura minima")
            evitati.append(day.giorno)
            continue
        walk.place(day, TipoRiposo.INTERO)
        assegnati += 1
    return evitati


def _place_half_days(walk: _Walk, ordinati: List[DayScore], quante: int) -> List[int]:
    """Place half days, morning first; a second walk may fill the other half."""
    evitati: List[int] = []
    assegnate = 0
    for passata in range(2):
        for day in ordinati:
            if assegnate >= quante:
                return evitati
            presi = walk.occupati.get(day.giorno, set())
            if TipoRiposo.INTERO in presi:
                continue
            if day.would_uncover:
                if passata == 0:
                    walk.note(f"{nome_giorno(day.giorno)}: evitato per copertura minima")
                    evitati.append(day.giorno)
                continue
            if TipoRiposo.MEZZA_MATTINA not in presi:
                tipo = TipoRiposo.MEZZA_MATTINA
            elif TipoRiposo.MEZZA_POMERIGGIO not in presi:
                tipo = TipoRiposo.MEZZA_POMERIGGIO
            else:
                continue
            walk.place(day, tipo)
            assegnate += 1
    return evitati


def _reasoning(walk: _Walk, tipo: TipoQuota, ore_assegnate: float, evitati: Sequence[int]) -> str:
    nome = walk.coll.nome_completo
    if not walk.riposi:
        return f"Non è stato possibile assegnare riposi a {nome}. {'. '.join(walk.warnings)}".strip()

    quanti = ore_assegnate if tipo == TipoQuota.ORE else len(walk.riposi)
    giorni = ", ".join(f"{r.giorno_nome}{_SUFFISSI[r.tipo_riposo]}" for r in walk.riposi)
    text = f"Ho assegnato {quanti:g} {_DESCRIZIONI[tipo]} a {nome}: {giorni}"
    if walk.warnings:
        text += f". Note: {'. '.join(walk.warnings)}"
    if 0 < len(evitati) < 5:
        text += f". Ho evitato {', '.join(nome_giorno(g) for g in evitati)} per garantire copertura adeguata"
    return text


@log_function_call
def assign_riposi_automatici(
    collaboratore_id: str,
    tipo_riposo: TipoQuota,
    quantita: int,
    settimana_inizio: DateLike,
    snapshot: ContextSnapshot,
    config: Optional[EngineConfig] = None,
) -> RiposiAssignmentResult:
    """
    Assign a worker's weekly rest quota.

    Args:
        collaboratore_id: Worker receiving the rest days
        tipo_riposo: Quota kind (giorni_interi, mezze_giornate, ore)
        quantita: Days, half days or hours
        settimana_inizio: Monday of the target week
        snapshot: Context (rest days and leave already assigned included)
        config: Scoring weights and hour conversions

    Returns:
        RiposiAssignmentResult (success when at least one rest was placed)

    Raises:
        ValueError: Unknown quota kind, negative quantity, or a week start that is not a Monday
        SnapshotLookupError: If the worker is not in the snapshot
    """
    config = config or EngineConfig()
    try:
        tipo = TipoQuota(tipo_riposo)
    except ValueError:
        raise ValueError(f"Tipo riposo non valido: {tipo_riposo!r}") from None
    if quantita < 0:
        raise ValueError(f"Quantità non valida: {quantita}")
    lunedi = to_date(settimana_inizio)
    if lunedi.isoweekday() != 1:
        raise ValueError(f"settimana_inizio deve essere un lunedì: {lunedi.isoformat()} è {nome_giorno(lunedi.isoweekday())}")

    coll = snapshot.get_collaboratore(collaboratore_id)
    occupati: Dict[int, Set[TipoRiposo]] = {}
    for r in snapshot.riposi:
        if r.collaboratore_id == coll.id:
            occupati.setdefault(r.giorno_settimana, set()).add(r.tipo_riposo)

    walk = _Walk(coll=coll, settimana_inizio=lunedi, occupati=occupati)
    scores = calculate_day_scores(coll, lunedi, snapshot, config)
    ordinati = sorted(scores, key=lambda d: -d.score)
    logger.debug(
        f"Score giorni {coll.nome_completo}: "
        + ", ".join(f"{nome_giorno(d.giorno)}={d.score:g}{'!' if d.would_uncover else ''}" for d in scores)
    )

    evitati: List[int] = []
    ore_assegnate = 0.0

    if tipo == TipoQuota.GIORNI_INTERI:
        quanti = min(quantita, 7)
        evitati = _place_whole_days(walk, ordinati, quanti)
        if len(walk.riposi) < quanti:
            walk.warnings.append(f"Assegnati solo {len(walk.riposi)}/{quanti} giorni di riposo")

    elif tipo == TipoQuota.MEZZE_GIORNATE:
        quante = min(quantita, 14)
        evitati = _place_half_days(walk, ordinati, quante)
        if len(walk.riposi) < quante:
            walk.warnings.append(f"Assegnate solo {len(walk.riposi)}/{quante} mezze giornate di riposo")

    else:
        giorni = quantita // config.ore_giorno_riposo
        mezze = (quantita % config.ore_giorno_riposo) // config.ore_mezza_giornata
        resto = quantita - giorni * config.ore_giorno_riposo - mezze * config.ore_mezza_giornata
        if resto:
            walk.warnings.append(f"{resto} ore non assegnabili (multipli di {config.ore_mezza_giornata} ore)")

        evitati = _place_whole_days(walk, ordinati, giorni)
        interi = len(walk.riposi)
        evitati_mezze = _place_half_days(walk, ordinati, mezze)
        evitati += [g for g in evitati_mezze if g not in evitati]

        ore_assegnate = (
            interi * config.ore_giorno_riposo
            + (len(walk.riposi) - interi) * config.ore_mezza_giornata
        )
        richieste = giorni * config.ore_giorno_riposo + mezze * config.ore_mezza_giornata
        if ore_assegnate < richieste:
            walk.warnings.append(f"Assegnate solo {ore_assegnate:g}/{richieste} ore di riposo")

    result = RiposiAssignmentResult(
        riposi=walk.riposi,
        warnings=walk.warnings,
        success=bool(walk.riposi),
        reasoning=_reasoning(walk, tipo, ore_assegnate, evitati),
    )
    logger.info(
        f"Riposi {coll.nome_completo}: {len(result.riposi)} assegnati "
        f"({tipo.value} × {quantita}), {len(result.warnings)} note"
    )
    return result


def assign_riposi_multipli(
    richieste: Sequence[RichiestaRiposi],
    settimana_inizio: DateLike,
    snapshot: ContextSnapshot,
    config: Optional[EngineConfig] = None,
) -> List[RiposiAssignmentResult]:
    """
    Assign rest quotas for several workers in order.

    Each worker's new rest days are folded into the context handed to the
    next worker, so later workers see earlier grants. The input snapshot
    is left untouched. A worker may appear more than once.

    Returns:
        One result per request, in request order
    """
    risultati: List[RiposiAssignmentResult] = []
    contesto = snapshot
    for richiesta in richieste:
        result = assign_riposi_automatici(
            richiesta.collaboratore_id,
            richiesta.tipo_riposo,
            richiesta.quantita,
            settimana_inizio,
            contesto,
            config,
        )
        risultati.append(result)
        contesto = contesto.with_riposi(
            RiposoAssegnato(r.collaboratore_id, r.giorno_settimana, r.tipo_riposo)
            for r in result.riposi
        )
    return risultati
