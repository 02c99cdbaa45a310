from scheduling.availability import (
    ConflictKind,
    SlotAvailabilityRequest,
    SlotAvailabilityResult,
    SlotConflict,
    check_availability,
)
from scheduling.clock import compute_period_interval
from scheduling.conflict_index import ConflictIndex
from scheduling.entry import TimePeriod, TimetableEntry, normalize_room_number
from scheduling.generator import GenerationResult, SkippedSlot, generate_timetable
from scheduling.orchestrator import SlotAvailabilityOrchestrator, SlotLookup
from scheduling.types import (
    DayOfWeek,
    DistributionPolicy,
    GenerationOptions,
    SectionInfo,
    SectionSubjectAssignment,
)

__all__ = [
	"ConflictIndex",
	"ConflictKind",
	"DayOfWeek",
	"DistributionPolicy",
	"GenerationOptions",
	"GenerationResult",
	"SectionInfo",
	"SectionSubjectAssignment",
	"SkippedSlot",
	"SlotAvailabilityOrchestrator",
	"SlotAvailabilityRequest",
	"SlotAvailabilityResult",
	"SlotConflict",
	"SlotLookup",
	"TimePeriod",
	"TimetableEntry",
	"check_availability",
	"compute_period_interval",
	"generate_timetable",
	"normalize_room_number",
]
