# turni/solver - Deterministic shift generation, rest days and validation
from .availability import AvailabilityRecord, calculate_availability, worker_availability
from .base import GenerationStatus, ProposalDrafter
from .conflicts import ConflictDetectionResult, ConflictDetector, ConflictInfo
from .engine import generate_week_safely, generate_week_shifts
from .gatekeeper import (
    SlotAvailabilityResult,
    TipoRichiestaSlot,
    check_multi_slot_availability,
    check_slot_availability,
    suggest_coverage_options,
)
from .preferences import PreferenceValidationResult, PreferenceValidator
from .proposals import ProposalResult, draft_schedule_with_llm
from .riposi import (
    RichiestaRiposi,
    TipoQuota,
    assign_riposi_automatici,
    assign_riposi_multipli,
)
from .staffing import calculate_required_staff, resolve_shift_schedule
from .validation import ConstraintCheckResult, ConstraintValidator

__all__ = [
    "generate_week_shifts",
    "generate_week_safely",
    "assign_riposi_automatici",
    "assign_riposi_multipli",
    "RichiestaRiposi",
    "TipoQuota",
    "check_slot_availability",
    "check_multi_slot_availability",
    "suggest_coverage_options",
    "SlotAvailabilityResult",
    "TipoRichiestaSlot",
    "calculate_availability",
    "worker_availability",
    "AvailabilityRecord",
    "calculate_required_staff",
    "resolve_shift_schedule",
    "ConflictDetector",
    "ConflictDetectionResult",
    "ConflictInfo",
    "ConstraintValidator",
    "ConstraintCheckResult",
    "PreferenceValidator",
    "PreferenceValidationResult",
    "draft_schedule_with_llm",
    "ProposalResult",
    "ProposalDrafter",
    "GenerationStatus",
]
