# vidpod/schemas/grading.py
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vidpod.core.exceptions import InvalidQuestionConfig, InvalidQuestionType

OptionId = Union[int, str]
GradingMethod = Literal["best", "latest", "average", "first"]

# ==================== Question Variants ====================


class QuestionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: OptionId
    points: int = Field(..., gt=0, description="Points awarded for a fully correct answer")
    sort_order: int = Field(default=0)


class MultipleChoiceQuestion(QuestionBase):
    question_type: Literal["multiple_choice"] = "multiple_choice"
    answer_key: OptionId = Field(..., description="Identifier of the single correct option")


class MultipleSelectQuestion(QuestionBase):
    question_type: Literal["multiple_select"] = "multiple_select"
    answer_key: List[OptionId] = Field(..., min_length=1)


class TrueFalseQuestion(QuestionBase):
    question_type: Literal["true_false"] = "true_false"
    answer_key: bool


class ShortAnswerQuestion(QuestionBase):
    question_type: Literal["short_answer"] = "short_answer"
    answer_key: List[str] = Field(..., min_length=1, description="Accepted answers")
    case_sensitive: bool = False
    partial_credit: bool = False


class FillBlankQuestion(QuestionBase):
    question_type: Literal["fill_blank"] = "fill_blank"
    answer_key: List[Union[str, List[str]]] = Field(
        ..., min_length=1, description="One entry per blank, each accepted text or list of texts"
    )
    case_sensitive: bool = False


class MatchingQuestion(QuestionBase):
    question_type: Literal["matching"] = "matching"
    answer_key: Dict[str, OptionId] = Field(..., min_length=1, description="left -> right")


class OrderingQuestion(QuestionBase):
    question_type: Literal["ordering"] = "ordering"
    answer_key: List[OptionId] = Field(..., min_length=1)


class EssayQuestion(QuestionBase):
    question_type: Literal["essay"] = "essay"


Question = Annotated[
    Union[
        MultipleChoiceQuestion,
        MultipleSelectQuestion,
        TrueFalseQuestion,
        ShortAnswerQuestion,
        FillBlankQuestion,
        MatchingQuestion,
        OrderingQuestion,
        EssayQuestion,
    ],
    Field(discriminator="question_type"),
]

QUESTION_MODELS = {
    "multiple_choice": MultipleChoiceQuestion,
    "multiple_select": MultipleSelectQuestion,
    "true_false": TrueFalseQuestion,
    "short_answer": ShortAnswerQuestion,
    "fill_blank": FillBlankQuestion,
    "matching": MatchingQuestion,
    "ordering": OrderingQuestion,
    "essay": EssayQuestion,
}


def parse_question(data: Mapping[str, Any]) -> QuestionBase:
    """Build the typed question variant for a stored question.

    Raises InvalidQuestionType for an unknown ``question_type`` and
    InvalidQuestionConfig when the answer key does not fit the type.
    """
    question_id = data.get("id")
    question_type = data.get("question_type")
    model = QUESTION_MODELS.get(question_type)
    if model is None:
        raise InvalidQuestionType(question_type, question_id)

    payload = dict(data)
    if payload.get("answer_key") is None:
        payload.pop("answer_key", None)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidQuestionConfig(
            f"Invalid {question_type} question {question_id!r}: {problems}", question_id
        )


class QuestionRecord(BaseModel):
    """A question as stored; not yet checked against its type."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: OptionId
    question_type: str
    points: int = 1
    answer_key: Any = None
    case_sensitive: bool = False
    partial_credit: bool = False
    sort_order: int = 0

    def to_question(self) -> QuestionBase:
        return parse_question(self.model_dump())


# ==================== Grading Results ====================


class GradeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_correct: Optional[bool]
    earned_points: float
    needs_manual_review: bool = False


class QuestionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    answer: Any = None
    time_spent: int = Field(default=0, ge=0, description="Seconds spent on the question")


class QuestionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: OptionId
    question_type: str
    answer: Any = None
    is_correct: Optional[bool] = None
    earned_points: float = 0.0
    points_possible: int = 0
    needs_manual_review: bool = False
    counted: bool = True
    time_spent: int = 0
    error: Optional[str] = None


class QuizConfig(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: OptionId
    lesson_id: Optional[int] = None
    time_limit_minutes: Optional[int] = None
    attempts_allowed: int = Field(default=3, ge=1)
    grading_method: GradingMethod = "best"
    passing_score_percent: float = Field(default=70, ge=0, le=100)
    questions: List[QuestionRecord] = Field(default_factory=list)


class AttemptScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    earned_points: float
    total_points: float
    percentage_score: float = Field(..., ge=0, le=100)
    passed: bool
    correct_count: int = 0
    pending_review_count: int = 0
    per_question: List[QuestionResult] = Field(default_factory=list)


# ==================== Attempt History ====================


class AttemptRecord(BaseModel):
    """A persisted attempt as seen by the history aggregator."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[int] = None
    attempt_number: int = Field(..., ge=1)
    percentage_score: float = Field(default=0, ge=0, le=100)
    passed: bool = False
    is_practice: bool = False
    is_completed: bool = True
    submitted_at: Optional[datetime] = None
    responses: Dict[str, QuestionResponse] = Field(default_factory=dict)
    manual_scores: Dict[str, float] = Field(default_factory=dict)


class CountedAttempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    grading_method: GradingMethod
    percentage_score: float
    passed: bool
    is_completed: bool = True
    attempt_id: Optional[int] = None
    attempt_number: Optional[int] = None
    counted_attempts: int


class AttemptSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    quiz_id: OptionId
    total_attempts: int
    practice_attempts: int
    counted_attempts: int
    attempts_allowed: int
    attempts_remaining: int
    best_score: Optional[float] = None
    average_score: Optional[float] = None
    latest_score: Optional[float] = None
    last_attempt_at: Optional[datetime] = None
    counted: Optional[CountedAttempt] = None
