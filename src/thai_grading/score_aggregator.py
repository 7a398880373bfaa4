"""
Score aggregation - component scores → total, percentage, grade point, grade label

The aggregator never invents weights: it sums the components that have been
entered and divides by the sum of their configured maximums. A grade with no
counted component stays ungraded (every derived field None).
"""

import logging
from datetime import datetime
from typing import NamedTuple, Optional

from .data_models import Grade, GradeUpdate, ScoreComponents, SubjectInstanceRef
from .exceptions import InvalidScoreError
from .grade_scale import GradingScale

logger = logging.getLogger(__name__)


class ScoreSummary(NamedTuple):
    total_score: Optional[float]
    percentage: Optional[float]
    grade_point: Optional[float]
    grade_label: Optional[str]

    @property
    def is_graded(self) -> bool:
        return self.grade_point is not None


UNGRADED = ScoreSummary(None, None, None, None)


class ScoreAggregator:
    """Derive grade fields from component scores under one grading scale"""

    def __init__(self, grading_scale: Optional[GradingScale] = None):
        self.grading_scale = grading_scale or GradingScale()

    def aggregate(self, components: ScoreComponents) -> ScoreSummary:
        maximums = self.grading_scale.component_maximums
        obtained = 0.0
        possible = 0.0
        counted = 0

        for name, score in components.present().items():
            maximum = getattr(maximums, name)
            if maximum is None:
                # Not part of the academic total under this configuration
                continue
            if score > maximum and self.grading_scale.strict:
                raise InvalidScoreError(f"{name} score {score} exceeds maximum {maximum}")
            obtained += score
            possible += maximum
            counted += 1

        if counted == 0:
            return UNGRADED

        percentage = obtained * 100 / possible
        grade_point = self.grading_scale.grade_point_for_percentage(percentage)
        grade_label = self.grading_scale.grade_label_for_point(grade_point)
        return ScoreSummary(obtained, percentage, grade_point, grade_label)

    def build_grade(
        self,
        student_id: str,
        subject_instance: SubjectInstanceRef,
        components: ScoreComponents,
        grading_period_id: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> Grade:
        """Create a new grade record with its derived fields computed"""
        summary = self.aggregate(components)
        return Grade(
            student_id=student_id,
            subject_instance=subject_instance,
            grading_period_id=grading_period_id,
            components=components,
            remarks=remarks,
            **summary._asdict(),
        )

    def apply_update(self, grade: Grade, update: GradeUpdate) -> Grade:
        """Merge newly entered scores over a stored grade and recompute it"""
        components = grade.components.merged_with(update.components)
        summary = self.aggregate(components)

        if summary.grade_label != grade.grade_label:
            logger.debug(
                "Grade %s for student %s changed %s → %s",
                grade.id,
                grade.student_id,
                grade.grade_label,
                summary.grade_label,
            )

        return grade.model_copy(
            update={
                "components": components,
                "remarks": update.remarks if update.remarks is not None else grade.remarks,
                "updated_at": datetime.now(),
                **summary._asdict(),
            }
        )

    def recompute(self, grade: Grade) -> Grade:
        """Re-derive a stored grade, e.g. after the grading scale changed"""
        return grade.model_copy(update=self.aggregate(grade.components)._asdict())


__all__ = ["ScoreSummary", "UNGRADED", "ScoreAggregator"]
