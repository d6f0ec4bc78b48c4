from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class StartQuizOut(BaseModel):
    attempt_id: int = Field(serialization_alias="attemptId")
    question_ids: List[int] = Field(serialization_alias="questionIds")


class QuizQuestionOut(BaseModel):
    """Question as shown to a student: the correct option is never included."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    question_text: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str


class SubmitAnswersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attempt_id: int = Field(alias="attemptId")
    # question id (JSON object keys are strings) -> chosen option
    answers: Dict[str, Any] = Field(default_factory=dict)
