"""
Database Schemas for the two-level quiz app

Each Pydantic model represents a collection in MongoDB. The collection name is the lowercase of the class name.
Identifiers (_id) and the createdAt/updatedAt timestamps are added by the stores, not by these models.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Union

class Problem(BaseModel):
    mainCategory: str = Field(..., min_length=1, description="Top level, e.g. an exam sitting like 'Oct-2025'")
    subCategory: str = Field(..., min_length=1, description="Second level, e.g. a question number like 'Q20'")
    problem: str = Field(..., min_length=1)
    translation: Optional[str] = None
    image: Optional[str] = Field(None, description="URL or reference to an image asset")

class WrongAnswer(BaseModel):
    # no _id: entries are plain values inside a result
    problem: Optional[str] = None
    userAnswer: Optional[str] = None
    correctAnswer: Optional[str] = None
    type: Optional[str] = None

class Result(BaseModel):
    user: str = Field(..., min_length=1)
    mainCategory: str = Field(..., min_length=1)
    subCategory: str = Field(..., min_length=1)
    score: Union[int, float]
    wrongSentenceCount: Optional[int] = Field(None, description="Sentences wrong on the first try")
    totalCount: Optional[int] = Field(None, description="Total sentences in this subCategory set")
    attemptedCount: Optional[int] = Field(None, description="Sentences attempted, lower when exited early")
    wrongAnswers: List[WrongAnswer] = Field(default_factory=list)
    status: Optional[str] = Field(None, description="Free-form, e.g. 'completed' or 'partial'")
