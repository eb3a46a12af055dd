"""
Drafted Proposal Validation
===========================
Asks an injected drafting client (typically an LLM) for a candidate
plan, then runs every proposed assignment back through the Conflict
Detector and the Constraint Validator before surfacing it.

The drafter's output is untrusted:
    - schema-validated with LLMGenerationResponse
    - assignments with team conflicts, own conflicts or HARD violations are dropped
    - any drafter or schema failure yields a failed result (no retry)
"""
import json
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from turni.models.config import EngineConfig
from turni.models.context import ContextSnapshot
from turni.models.schedule import GenerationWarning, Severita
from turni.models.slots import time_ranges_overlap
from turni.models.validated import LLMAssegnazione, LLMGenerationResponse
from turni.solver.base import GenerationStatus, ProposalDrafter
from turni.solver.conflicts import ConflictDetector
from turni.solver.diagnostics import ERRORE_UPSTREAM, NOTA_PROPOSTA, PROPOSTA_SCARTATA, Diagnostics
from turni.solver.validation import ConstraintValidator, TurnoProposto
from turni.utils.logging_setup import get_logger, log_function_call

logger = get_logger("turni.solver.proposals")


@dataclass
class ProposedShift:
    nucleo_id: str
    data: date
    ora_inizio: str
    ora_fine: str
    staff_richiesto: int
    confidenza: float
    reasoning: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "nucleo_id": self.nucleo_id,
            "data": self.data.isoformat(),
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
            "staff_richiesto": self.staff_richiesto,
            "confidenza": self.confidenza,
            "reasoning": self.reasoning,
        }


@dataclass
class ProposedAssignment:
    collaboratore_id: str
    nucleo_id: str
    data: date
    ora_inizio: str
    ora_fine: str
    confidenza: float
    reasoning: Optional[str] = None
    avvisi_vincoli: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "collaboratore_id": self.collaboratore_id,
            "nucleo_id": self.nucleo_id,
            "data": self.data.isoformat(),
            "ora_inizio": self.ora_inizio,
            "ora_fine": self.ora_fine,
            "confidenza": self.confidenza,
            "reasoning": self.reasoning,
            "avvisi_vincoli": list(self.avvisi_vincoli),
        }


@dataclass
class GenerationMetrics:
    tempo_esecuzione_ms: int = 0
    confidenza_media: float = 0.0
    vincoli_hard_rispettati: int = 0
    vincoli_soft_rispettati: int = 0

    def to_dict(self) -> dict:
        return {
            "tempo_esecuzione_ms": self.tempo_esecuzione_ms,
            "confidenza_media": self.confidenza_media,
            "vincoli_hard_rispettati": self.vincoli_hard_rispettati,
            "vincoli_soft_rispettati": self.vincoli_soft_rispettati,
        }


@dataclass
class ProposalResult:
    """Validated outcome of a drafted plan."""
    success: bool
    status: GenerationStatus
    turni: List[ProposedShift] = field(default_factory=list)
    assegnazioni: List[ProposedAssignment] = field(default_factory=list)
    warnings: List[GenerationWarning] = field(default_factory=list)
    metriche: GenerationMetrics = field(default_factory=GenerationMetrics)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "status": self.status.value,
            "turni": [t.to_dict() for t in self.turni],
            "assegnazioni": [a.to_dict() for a in self.assegnazioni],
            "warnings": [w.to_dict() for w in self.warnings],
            "metriche": self.metriche.to_dict(),
        }


def build_prompt(snapshot: ContextSnapshot, istruzioni: str = "", config: Optional[EngineConfig] = None) -> str:
    """Natural-language drafting instructions for the snapshot week."""
    config = config or EngineConfig()
    vincoli = snapshot.vincoli_attivi()
    hard = [v for v in vincoli if v.is_hard]
    soft = [v for v in vincoli if not v.is_hard]

    righe = [
        "Sei un esperto di gestione turni. Genera un piano di turni ottimale.",
        "",
        "## PERIODO",
        f"- Da: {snapshot.week_start.isoformat()}",
        f"- A: {snapshot.week_end.isoformat()}",
        "",
        "## VINCOLI OBBLIGATORI (HARD)",
    ]
    righe += [f"- {v.nome}: {v.descrizione}" for v in hard] or ["- Nessuno"]
    righe += ["", "## VINCOLI PREFERENZIALI (SOFT)"]
    righe += [f"- {v.nome}: {v.descrizione}" for v in soft] or ["- Nessuno"]
    righe += [
        "",
        "## CONFIGURAZIONE",
        f"- Max ore settimanali: {config.default_ore_max_settimanali}h",
        f"- Min ore riposo: {config.default_riposo_minimo_ore}h",
        "",
        "## ISTRUZIONI",
        "1. Genera turni per ogni giorno del periodo per ogni nucleo",
        "2. Durante periodi critici, aumenta lo staff secondo il moltiplicatore",
        "3. Rispetta SEMPRE i vincoli HARD e le assenze approvate",
        "4. Distribuisci equamente le ore tra i collaboratori",
        "5. Non assegnare lo stesso collaboratore a turni sovrapposti",
    ]
    if istruzioni:
        righe += ["", "## RICHIESTE AGGIUNTIVE", istruzioni.strip()]
    righe += [
        "",
        "Rispondi con un JSON contenente turni, assegnazioni, warnings e overall_confidence (0-1).",
    ]
    return "\n".join(righe)


def build_context_excerpt(snapshot: ContextSnapshot) -> str:
    """Serialized subset of the snapshot handed to the drafter."""
    completo = snapshot.to_dict()
    estratto = {
        k: completo[k]
        for k in (
            "week_start", "week_end", "collaboratori", "nuclei", "criticita_continuative",
            "periodi_critici", "riposi", "preferenze", "richieste_approvate", "giorni_chiusura",
        )
    }
    return json.dumps(estratto, ensure_ascii=False, sort_keys=True)


def _failed(messaggio: str, started: float) -> ProposalResult:
    return ProposalResult(
        success=False,
        status=GenerationStatus.FAILED,
        warnings=[GenerationWarning(tipo=ERRORE_UPSTREAM, messaggio=messaggio, severita=Severita.ERROR)],
        metriche=GenerationMetrics(tempo_esecuzione_ms=round((time.perf_counter() - started) * 1000)),
    )


def _rejection(
    ass: LLMAssegnazione,
    snapshot: ContextSnapshot,
    detector: ConflictDetector,
    accettati: Dict[str, List[TurnoProposto]],
) -> Optional[str]:
    """Why a proposed assignment cannot be accepted, or None."""
    if snapshot.find_nucleo(ass.nucleo_id) is None:
        return f"Nucleo sconosciuto: {ass.nucleo_id}"
    coll = snapshot.find_collaboratore(ass.collaboratore_id)
    if coll is None:
        return f"Collaboratore sconosciuto: {ass.collaboratore_id}"
    if all(m.id != coll.id for m in snapshot.membri_nucleo(ass.nucleo_id)):
        return f"{coll.nome_completo} non appartiene al nucleo {ass.nucleo_id}"

    team = detector.detect_conflicts(
        ass.nucleo_id, ass.data, ass.ora_inizio, ass.ora_fine,
        exclude_collaboratore_id=ass.collaboratore_id,
    )
    if team.has_conflicts:
        return f"Conflitto rilevato per assegnazione {ass.data.isoformat()}: {team.conflicts[0].descrizione}"

    propri = detector.own_conflicts(ass.collaboratore_id, ass.data, ass.ora_inizio, ass.ora_fine)
    if propri:
        return f"Conflitto rilevato per assegnazione {ass.data.isoformat()}: {propri[0].descrizione}"

    for t in accettati.get(ass.collaboratore_id, []):
        if t.data == ass.data and time_ranges_overlap(ass.ora_inizio, ass.ora_fine, t.inizio, t.fine):
            return (
                f"Conflitto rilevato per assegnazione {ass.data.isoformat()}: "
                f"{coll.nome_completo} già proposto {t.inizio}-{t.fine}"
            )
    return None


@log_function_call
def draft_schedule_with_llm(
    snapshot: ContextSnapshot,
    drafter: ProposalDrafter,
    istruzioni: str = "",
    config: Optional[EngineConfig] = None,
) -> ProposalResult:
    """
    Draft a plan with an injected client and keep only what validates.

    Args:
        snapshot: Context Snapshot
        drafter: Drafting client (never a global)
        istruzioni: Extra natural-language constraints
        config: Engine configuration

    Returns:
        ProposalResult (success=False with one warning on drafter or schema failure)
    """
    config = config or EngineConfig()
    started = time.perf_counter()
    prompt = build_prompt(snapshot, istruzioni, config)
    contesto = build_context_excerpt(snapshot)

    try:
        raw = drafter.draft(prompt, contesto)
        risposta = LLMGenerationResponse.model_validate_json(raw)
    except Exception as exc:
        logger.error(f"Bozza non disponibile: {exc}")
        return _failed(f"Errore generazione AI: {exc}", started)

    diag = Diagnostics("turni.solver.proposals")
    detector = ConflictDetector(snapshot)
    validator = ConstraintValidator(snapshot)
    confidenza = risposta.overall_confidence

    turni = [
        ProposedShift(
            nucleo_id=t.nucleo_id,
            data=t.data,
            ora_inizio=t.ora_inizio,
            ora_fine=t.ora_fine,
            staff_richiesto=t.staff_richiesto,
            confidenza=confidenza,
            reasoning=t.reasoning,
        )
        for t in risposta.turni
    ]

    accettati: Dict[str, List[TurnoProposto]] = {}
    assegnazioni: List[ProposedAssignment] = []
    hard_ok = soft_ok = 0

    for ass in risposta.assegnazioni:
        motivo = _rejection(ass, snapshot, detector, accettati)
        if motivo is None:
            check = validator.validate(
                ass.collaboratore_id, ass.data, ass.ora_inizio, ass.ora_fine,
                nucleo_id=ass.nucleo_id, turni_extra=accettati.get(ass.collaboratore_id, []),
            )
            if check.has_hard_violation:
                motivo = check.hard_violations[0].message
        if motivo is not None:
            diag.warning(
                PROPOSTA_SCARTATA, motivo,
                data=ass.data, nucleo_id=ass.nucleo_id, collaboratore_id=ass.collaboratore_id,
            )
            continue

        hard_ok += 1
        if not check.soft_violations:
            soft_ok += 1
        accettati.setdefault(ass.collaboratore_id, []).append(TurnoProposto(ass.data, ass.ora_inizio, ass.ora_fine))
        assegnazioni.append(ProposedAssignment(
            collaboratore_id=ass.collaboratore_id,
            nucleo_id=ass.nucleo_id,
            data=ass.data,
            ora_inizio=ass.ora_inizio,
            ora_fine=ass.ora_fine,
            confidenza=confidenza,
            reasoning=ass.reasoning,
            avvisi_vincoli=[v.message for v in check.soft_violations],
        ))

    for nota in risposta.warnings:
        diag.info(NOTA_PROPOSTA, nota)

    scartate = len(risposta.assegnazioni) - len(assegnazioni)
    elapsed_ms = round((time.perf_counter() - started) * 1000)
    logger.info(
        f"Bozza validata: {len(assegnazioni)}/{len(risposta.assegnazioni)} assegnazioni accettate, "
        f"{len(turni)} turni, {elapsed_ms}ms"
    )
    return ProposalResult(
        success=True,
        status=GenerationStatus.PARTIAL if scartate else GenerationStatus.SUCCESS,
        turni=turni,
        assegnazioni=assegnazioni,
        warnings=diag.warnings,
        metriche=GenerationMetrics(
            tempo_esecuzione_ms=elapsed_ms,
            confidenza_media=confidenza,
            vincoli_hard_rispettati=hard_ok,
            vincoli_soft_rispettati=soft_ok,
        ),
    )
