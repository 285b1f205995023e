from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional

CATEGORY_NAMES = (
    "Communication Skills",
    "Technical Knowledge",
    "Problem-Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
)

CategoryName = Literal[
    "Communication Skills",
    "Technical Knowledge",
    "Problem-Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
]


class CamelModel(BaseModel):
    """Stored documents and API payloads use camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]):
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
        return cls.model_validate(data)


class User(CamelModel):
    id: str
    name: str
    email: str


class Interview(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str
    user_id: str
    finalized: bool = False
    created_at: Optional[str] = None


class TranscriptMessage(BaseModel):
    role: str
    content: str


class Feedback(CamelModel):
    id: str
    interview_id: str
    user_id: str
    total_score: float
    category_scores: Dict[str, float]
    strengths: List[str]
    areas_for_improvement: List[str]
    final_assessment: str
    created_at: str


# Structured output schema for the generation call

class CategoryScore(BaseModel):
    name: CategoryName
    score: int
    comment: str

    @field_validator("score")
    @classmethod
    def score_in_range(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("score must be between 0 and 100")
        return value


class FeedbackEvaluation(BaseModel):
    total_score: int
    category_scores: List[CategoryScore]
    strengths: List[str]
    areas_for_improvement: List[str]
    final_assessment: str

    @field_validator("total_score")
    @classmethod
    def total_in_range(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("total_score must be between 0 and 100")
        return value

    @model_validator(mode="after")
    def one_score_per_category(self):
        names = [item.name for item in self.category_scores]
        if sorted(names) != sorted(CATEGORY_NAMES):
            raise ValueError(f"expected one score for each of {CATEGORY_NAMES}, got {names}")
        return self

    def category_score_map(self) -> Dict[str, float]:
        return {item.name: item.score for item in self.category_scores}


# Operation parameters and results

class SignUpParams(CamelModel):
    uid: str = Field(min_length=1)
    name: str
    email: str


class SignInParams(CamelModel):
    email: str
    id_token: str = Field(min_length=1)


class GetLatestInterviewsParams(CamelModel):
    user_id: str
    limit: int = Field(default=20, ge=1, le=100)


class GetFeedbackByInterviewIdParams(CamelModel):
    interview_id: str
    user_id: str


class CreateFeedbackParams(CamelModel):
    interview_id: str
    user_id: str
    transcript: List[TranscriptMessage]


class CreateFeedbackRequest(BaseModel):
    transcript: List[TranscriptMessage]


class ActionResult(BaseModel):
    success: bool
    message: str


class FeedbackResult(CamelModel):
    success: bool
    feedback_id: Optional[str] = None
