from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_text: Optional[str] = Field(default=None, alias="questionText")
    option_a: Optional[str] = Field(default=None, alias="optionA")
    option_b: Optional[str] = Field(default=None, alias="optionB")
    option_c: Optional[str] = Field(default=None, alias="optionC")
    option_d: Optional[str] = Field(default=None, alias="optionD")
    correct_option: Optional[str] = Field(default=None, alias="correctOption")


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question_text: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: str
    created_at: Optional[datetime] = None


class ResultRow(BaseModel):
    full_name: str
    email: str
    score: int
    created_at: Optional[datetime] = None
    end_time: Optional[datetime] = None


class LeaderboardRow(BaseModel):
    full_name: str
    score: int
    created_at: Optional[datetime] = None
    end_time: Optional[datetime] = None


class MetricsOut(BaseModel):
    total_participants: int = Field(serialization_alias="totalParticipants")
    total_questions: int = Field(serialization_alias="totalQuestions")
    completed_quizzes: int = Field(serialization_alias="completedQuizzes")
    results: List[ResultRow] = Field(default_factory=list)
