"""
API schemas for the patient-facing magic-link questionnaire.

Answers are accepted as ``{"question_num": n, "value": v}``; the camel-case
``questionNum`` spelling used by browser clients is accepted as well.
"""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from mbc_tracker.application.services.lifecycle_manager import QuestionnaireView, SubmissionResult
from mbc_tracker.domain.entities.assessment_response import Answer
from mbc_tracker.domain.services.scoring import severity_description


class QuestionSchema(BaseModel):
    number: int
    text: str
    min_value: int
    max_value: int


class QuestionnaireResponse(BaseModel):
    instance_id: UUID
    status: str
    patient_first_name: str
    measure_name: str
    measure_full_name: str | None = None
    instructions: str | None = None
    questions: list[QuestionSchema]
    due_date: datetime
    expires_at: datetime

    @classmethod
    def from_view(cls, view: QuestionnaireView) -> "QuestionnaireResponse":
        measure = view.measure
        return cls(
            instance_id=view.instance.id,
            status=view.instance.status.value,
            patient_first_name=view.patient_first_name,
            measure_name=measure.name,
            measure_full_name=measure.full_name,
            instructions=measure.instructions,
            questions=[
                QuestionSchema(
                    number=q.number, text=q.text, min_value=q.min_value, max_value=q.max_value
                )
                for q in measure.questions
            ],
            due_date=view.instance.due_date,
            expires_at=view.instance.expires_at,
        )


class AnswerSchema(BaseModel):
    question_num: int = Field(validation_alias=AliasChoices("question_num", "questionNum"))
    value: int

    def to_domain(self) -> Answer:
        return Answer(question_num=self.question_num, value=self.value)


class SubmitAnswersRequest(BaseModel):
    answers: list[AnswerSchema] = Field(..., min_length=1)


class SubmissionResponse(BaseModel):
    instance_id: UUID
    status: str
    total_score: int
    severity_label: str
    severity_description: str
    max_possible_score: int
    completed_at: datetime

    @classmethod
    def from_result(cls, result: SubmissionResult) -> "SubmissionResponse":
        return cls(
            instance_id=result.instance.id,
            status=result.instance.status.value,
            total_score=result.score.total_score,
            severity_label=result.score.severity_label,
            severity_description=severity_description(result.score.severity_label),
            max_possible_score=result.score.max_possible_score,
            completed_at=result.response.completed_at,
        )
