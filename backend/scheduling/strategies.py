from __future__ import annotations

from collections import Counter
from typing import Iterable, Protocol, Sequence

from scheduling.types import DistributionPolicy, SectionSubjectAssignment


class SubjectRotation(Protocol):
    """Chooses which subject fills the next free slot of a sweep."""

    def next_subject(self) -> SectionSubjectAssignment: ...

    def advance(self, subject: SectionSubjectAssignment) -> None: ...


class RoundRobinRotation:
    """Cycle through subjects by list position, ignoring weekly quotas."""

    def __init__(self, subjects: Sequence[SectionSubjectAssignment]):
        self._subjects = list(subjects)
        self._index = 0

    def next_subject(self) -> SectionSubjectAssignment:
        return self._subjects[self._index % len(self._subjects)]

    def advance(self, subject: SectionSubjectAssignment) -> None:
        self._index += 1


class QuotaWeightedRotation:
    """Give the next slot to the subject furthest below its weekly quota.

    Periods a subject already holds in the existing timetable count toward its
    quota. Ties go to the subject listed first.
    """

    def __init__(
        self,
        subjects: Sequence[SectionSubjectAssignment],
        already_scheduled: Iterable = (),
    ):
        self._subjects = list(subjects)
        self._held: Counter = Counter(already_scheduled)

    def _remaining(self, subject: SectionSubjectAssignment) -> int:
        return int(subject.weekly_periods or 0) - self._held[subject.subject_id]

    def next_subject(self) -> SectionSubjectAssignment:
        best = self._subjects[0]
        best_remaining = self._remaining(best)
        for subject in self._subjects[1:]:
            remaining = self._remaining(subject)
            if remaining > best_remaining:
                best, best_remaining = subject, remaining
        return best

    def advance(self, subject: SectionSubjectAssignment) -> None:
        self._held[subject.subject_id] += 1


def make_rotation(
    policy: DistributionPolicy,
    subjects: Sequence[SectionSubjectAssignment],
    *,
    already_scheduled: Iterable = (),
) -> SubjectRotation:
    if policy == DistributionPolicy.QUOTA_WEIGHTED:
        return QuotaWeightedRotation(subjects, already_scheduled)
    if policy == DistributionPolicy.ROUND_ROBIN:
        return RoundRobinRotation(subjects)
    raise ValueError(f"Unknown distribution policy: {policy!r}")
