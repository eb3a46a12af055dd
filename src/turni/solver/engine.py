"""
Shift Generation Engine
=======================
Single deterministic pass over (date × team) producing proposed shifts.

Per slot:
    1. Required staff (criticalities, critical periods, team bounds)
    2. Shift schedule (day override → historical pattern → default)
    3. Availability of every team member against the running hours map
    4. Double booking and constraint templates (HARD excludes, SOFT annotates)
    5. Rank and select the top N available candidates
    6. Coverage status, warnings, confidence
    7. Selected workers' hours added to the running map

The running hours map is owned by one call and discarded on return.
"""
import time
from datetime import date
from typing import Callable, Dict, List, Optional

from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.nucleo import Nucleo
from turni.models.records import TipoPreferenza
from turni.models.schedule import (
    CoperturaStatus,
    GeneratedShift,
    GenerationWarning,
    Severita,
    WeekGenerationResult,
)
from turni.models.slots import date_range, giorno_settimana, nome_giorno, time_ranges_overlap
from turni.solver.availability import (
    AvailabilityRecord,
    RuntimeHours,
    calculate_availability,
    init_runtime_hours,
)
from turni.solver.diagnostics import (
    COPERTURA_INSUFFICIENTE,
    ERRORE_UPSTREAM,
    GIORNO_CHIUSO,
    NESSUN_DISPONIBILE,
    SPOSTAMENTO_SUGGERITO,
    SUPERAMENTO_ORE,
    VINCOLO_SOFT,
    Diagnostics,
)
from turni.solver.scoring import rank_candidates, select_candidates
from turni.solver.staffing import calculate_required_staff, resolve_shift_schedule
from turni.solver.stats import (
    calculate_coverage_stats,
    calculate_workload,
    confidence_average,
    coverage_status,
    shift_confidence,
)
from turni.solver.validation import ConstraintValidator, TurnoProposto
from turni.utils.logging_setup import SolverLogger, get_logger, log_function_call
from turni.utils.structured_logging import get_structured_logger, run_logger

logger = get_logger("turni.solver.engine")
slog = SolverLogger("turni.solver.engine")

# Shifts proposed so far in the pass, per worker
PassShifts = Dict[str, List[TurnoProposto]]


def _exclude_busy_and_invalid(
    records: List[AvailabilityRecord],
    nucleo: Nucleo,
    data: date,
    ora_inizio: str,
    ora_fine: str,
    durata: float,
    snapshot: ContextSnapshot,
    validator: ConstraintValidator,
    turni_pass: PassShifts,
    diag: Diagnostics,
) -> Dict[str, List[str]]:
    """
    Mark available records that are double-booked or break a HARD rule.

    Returns:
        SOFT violation messages per worker id
    """
    avvisi: Dict[str, List[str]] = {}

    for record in records:
        if not record.disponibile:
            continue
        propri = turni_pass.get(record.collaboratore_id, [])

        if any(t.data == data and time_ranges_overlap(ora_inizio, ora_fine, t.inizio, t.fine)
               for t in propri):
            record.mark_unavailable("Già assegnato a un turno sovrapposto")
            continue

        esistente = next(
            (a for a in snapshot.assegnazioni_attive(record.collaboratore_id, data)
             if time_ranges_overlap(ora_inizio, ora_fine, a.inizio, a.fine)),
            None,
        )
        if esistente is not None:
            record.mark_unavailable(f"Già assegnato {esistente.inizio}-{esistente.fine}")
            continue

        check = validator.validate(
            record.collaboratore_id, data, ora_inizio, ora_fine,
            nucleo_id=nucleo.id, durata=durata, turni_extra=propri,
        )
        if check.has_hard_violation:
            record.mark_unavailable(check.hard_violations[0].message)
            continue
        if check.soft_violations:
            messaggi = [v.message for v in check.soft_violations]
            avvisi[record.collaboratore_id] = messaggi
            for m in messaggi:
                diag.info(
                    VINCOLO_SOFT, f"{record.nome_completo}: {m}",
                    data=data, nucleo_id=nucleo.id, collaboratore_id=record.collaboratore_id,
                )

    return avvisi


def generate_shift(
    nucleo: Nucleo,
    data: date,
    snapshot: ContextSnapshot,
    config: EngineConfig,
    ore_runtime: RuntimeHours,
    turni_pass: PassShifts,
    validator: ConstraintValidator,
    diag: Diagnostics,
) -> GeneratedShift:
    """
    Generate the shift of one team on one date.

    Updates ore_runtime and turni_pass with the selected workers.
    """
    giorno = giorno_settimana(data)
    richiesti = calculate_required_staff(nucleo, data, snapshot)
    orario = resolve_shift_schedule(nucleo, giorno, snapshot, config)
    durata = orario.ore

    slog.enter(f"{nucleo.nome} {nome_giorno(giorno)} {data}")
    slog.detail("orario", f"{orario.inizio}-{orario.fine} ({durata:g}h)")
    slog.detail("richiesti", richiesti)

    records = calculate_availability(nucleo.id, data, durata, snapshot, ore_runtime)
    avvisi = _exclude_busy_and_invalid(
        records, nucleo, data, orario.inizio, orario.fine, durata,
        snapshot, validator, turni_pass, diag,
    )

    ranked = rank_candidates(records, nucleo.id)
    suggeriti = select_candidates(ranked, richiesti, nucleo.id, snapshot, config, avvisi)
    selezionati = [c for c in suggeriti if c.selezionato]

    for c in selezionati:
        ore_runtime[c.id] = ore_runtime.get(c.id, 0.0) + durata
        turni_pass.setdefault(c.id, []).append(TurnoProposto(data, orario.inizio, orario.fine, durata))

    status = coverage_status(len(selezionati), richiesti)
    spostati = [c for c in selezionati if c.spostabile_da]
    confidence = shift_confidence(
        status,
        any_preferred=any(c.preferenza == TipoPreferenza.PREFERRED for c in selezionati),
        any_relocation=bool(spostati),
        config=config,
    )

    criticita = [c.nome for c in snapshot.criticita_per_giorno(giorno)]
    criticita += [p.nome for p in snapshot.periodi_attivi(data)]
    reasoning = f"{nucleo.nome} {nome_giorno(giorno)}: {richiesti} collaboratori richiesti"
    if criticita:
        reasoning += f". Criticità: {', '.join(criticita)}"

    note: List[str] = []
    if status != CoperturaStatus.OK:
        msg = (
            f"{nucleo.nome} {nome_giorno(giorno)} {data.isoformat()}: "
            f"{len(selezionati)}/{richiesti} collaboratori disponibili"
        )
        severita = Severita.ERROR if status == CoperturaStatus.SCOPERTA else Severita.WARNING
        diag.add(COPERTURA_INSUFFICIENTE, msg, severita, data=data, nucleo_id=nucleo.id)
        note.append(msg)

    if spostati:
        note.append("Spostamenti suggeriti: " + ", ".join(f"{c.nome} da {c.spostabile_da}" for c in spostati))
        for c in spostati:
            diag.info(
                SPOSTAMENTO_SUGGERITO,
                f"{c.nome} da {c.spostabile_da} a {nucleo.nome} ({data.isoformat()})",
                data=data, nucleo_id=nucleo.id, collaboratore_id=c.id,
            )

    slog.exit(f"{status.value}: {len(selezionati)}/{richiesti}, confidence {confidence:.2f}")

    return GeneratedShift(
        nucleo_id=nucleo.id,
        nucleo_nome=nucleo.nome,
        nucleo_colore=nucleo.colore,
        data=data,
        ora_inizio=orario.inizio,
        ora_fine=orario.fine,
        durata_ore=durata,
        num_collaboratori_richiesti=richiesti,
        collaboratori_suggeriti=suggeriti,
        copertura_status=status,
        confidence=confidence,
        reasoning=reasoning,
        warning=". ".join(note) if note else None,
    )


@log_function_call
def generate_week_shifts(
    snapshot: ContextSnapshot,
    config: Optional[EngineConfig] = None,
) -> WeekGenerationResult:
    """
    Generate proposed shifts for every team on every date of the snapshot week.

    Args:
        snapshot: Context Snapshot (never mutated)
        config: Engine configuration (uses defaults if None)

    Returns:
        WeekGenerationResult with shifts, statistics and warnings

    Raises:
        SnapshotLookupError: If a referenced team id is missing
    """
    config = config or EngineConfig()
    start_time = time.time()
    events = run_logger("turni.solver.engine", snapshot)

    slog.phase("Generazione turni")
    logger.info(
        f"Settimana {snapshot.week_start} - {snapshot.week_end}: "
        f"{len(snapshot.nuclei)} nuclei, {len(snapshot.collaboratori)} collaboratori"
    )
    events.info(
        "generation_started",
        nuclei=len(snapshot.nuclei),
        collaboratori=len(snapshot.collaboratori),
    )

    diag = Diagnostics("turni.solver.engine")
    ore_runtime = init_runtime_hours(snapshot)
    turni_pass: PassShifts = {}
    validator = ConstraintValidator(snapshot)
    turni: List[GeneratedShift] = []

    for nucleo in snapshot.nuclei:
        if not snapshot.membri_nucleo(nucleo.id):
            diag.warning(NESSUN_DISPONIBILE, f"{nucleo.nome}: nessun collaboratore nel nucleo", nucleo_id=nucleo.id)

    for data in date_range(snapshot.week_start, snapshot.week_end):
        chiusura = snapshot.motivo_chiusura(data)
        if chiusura:
            diag.info(GIORNO_CHIUSO, chiusura, data=data)
            continue

        slog.step(f"{nome_giorno(giorno_settimana(data))} {data.isoformat()}")
        for nucleo in snapshot.nuclei:
            turni.append(generate_shift(
                nucleo, data, snapshot, config, ore_runtime, turni_pass, validator, diag,
            ))

    slog.phase("Statistiche")
    coverage = calculate_coverage_stats(turni)
    workload = calculate_workload(snapshot, ore_runtime)

    for entry in workload.per_collaboratore:
        if entry.ore_assegnate > entry.ore_contratto:
            diag.warning(
                SUPERAMENTO_ORE,
                f"{entry.nome}: {entry.ore_assegnate:.1f}h assegnate su {entry.ore_contratto:g}h contratto",
                collaboratore_id=entry.id,
            )

    result = WeekGenerationResult(
        turni=turni,
        coverage_stats=coverage,
        workload_distribution=workload,
        warnings=diag.warnings,
        confidence_average=confidence_average(turni),
        success=True,
    )

    elapsed = time.time() - start_time
    logger.info(
        f"Generazione completata: {coverage.totale} turni, copertura {coverage.percentuale:.1f}%, "
        f"{len(diag)} avvisi, {elapsed:.2f}s"
    )
    events.info(
        "generation_completed",
        turni=coverage.totale,
        coperti=coverage.coperti,
        parziali=coverage.parziali,
        scoperti=coverage.scoperti,
        equita=workload.equita_score,
        warnings=diag.counts(),
        elapsed_ms=round(elapsed * 1000),
    )
    return result


def generate_week_safely(
    loader: Callable[[], ContextSnapshot],
    config: Optional[EngineConfig] = None,
) -> WeekGenerationResult:
    """
    Assemble the snapshot with an upstream loader, then generate.

    A loader failure becomes a failed result with zero shifts and a single
    explanatory warning. No retry is attempted.

    Args:
        loader: Callable building the Context Snapshot (database, API, file)
        config: Engine configuration

    Returns:
        WeekGenerationResult (success=False on upstream failure)
    """
    try:
        snapshot = loader()
    except Exception as exc:
        logger.error(f"Caricamento contesto fallito: {exc}")
        get_structured_logger("turni.solver.engine").error("snapshot_load_failed", error=str(exc))
        return WeekGenerationResult(
            success=False,
            warnings=[GenerationWarning(
                tipo=ERRORE_UPSTREAM,
                messaggio=f"Impossibile caricare il contesto: {exc}",
                severita=Severita.ERROR,
            )],
        )
    return generate_week_shifts(snapshot, config)
