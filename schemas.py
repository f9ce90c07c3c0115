"""
Database Schemas for LinguaGenius

Each Pydantic model below maps to a MongoDB collection:
- LanguageClass -> "classes"
- Instructor -> "instructors"
- User -> "allUsers"
- SelectedClass -> "selectedClasses"

Class and selection documents keep whatever extra fields the client sends.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LanguageClass(BaseModel):
    """Stored as sent; only status is overwritten on submission."""
    model_config = ConfigDict(extra="allow")

    instructorEmail: Any = Field(None, description="Owner instructor's email")
    availableSeats: Any = Field(None, description="Used for popularity ordering")
    status: Any = Field("pending", description="pending | approved | denied")


class Instructor(BaseModel):
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Email address")


class User(BaseModel):
    email: str = Field(..., description="Email address, soft identifier")
    role: Literal["user", "instructor", "admin"] = Field("user")


class SelectedClass(BaseModel):
    model_config = ConfigDict(extra="allow")

    classID: Any = Field(..., description="Selected class _id, as the client sent it")
    email: Any = Field(..., description="Selecting user's email")


# Request bodies

class ClassAction(BaseModel):
    classID: str


class RoleChange(BaseModel):
    userID: str


class InstructorPromotion(BaseModel):
    userID: str
    name: Optional[str] = None
    email: Optional[str] = None


class FeedbackRequest(BaseModel):
    message: str
    classID: str


class RegisterRequest(BaseModel):
    userEmail: str
