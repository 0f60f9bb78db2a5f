"""
Graph schemas for input validation and read models.

This provides:
1. UserFields - validation and normalisation of user input
2. UserRecord - immutable snapshot of stored user fields (used by history)
3. UserView / FriendshipView - enriched read models returned by the store
4. GraphSnapshot - node list + edge list for graph consumers
5. DeleteUserResult - first-class outcome of user deletion
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from app.config import settings


class UserFields(BaseModel):
    """Mutable user fields shared by create and update."""

    username: StrictStr = Field(..., description="Display name, trimmed")
    age: StrictInt = Field(..., description="Age in years")
    hobbies: List[StrictStr] = Field(
        default_factory=list, description="Hobby tags, duplicates collapsed"
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Trim and enforce non-empty, bounded length"""
        v = v.strip()
        if not v:
            raise ValueError("Username is required and must be a non-empty string")
        if len(v) > settings.username_max_length:
            raise ValueError(
                f"Username must be at most {settings.username_max_length} characters"
            )
        return v

    @field_validator("age")
    @classmethod
    def validate_age(cls, v: int) -> int:
        if v < settings.age_min or v > settings.age_max:
            raise ValueError(
                f"Age must be a number between {settings.age_min} and {settings.age_max}"
            )
        return v

    @field_validator("hobbies")
    @classmethod
    def dedupe_hobbies(cls, v: List[str]) -> List[str]:
        """Collapse duplicates, keeping first-seen order for display"""
        seen = set()
        hobbies = []
        for hobby in v:
            hobby = hobby.strip()
            if hobby and hobby not in seen:
                seen.add(hobby)
                hobbies.append(hobby)
        return hobbies


class UserRecord(BaseModel):
    """Stored fields of a user at one point in time."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    age: int
    hobbies: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None


class UserView(BaseModel):
    """User enriched with neighbor ids and a freshly computed score."""

    id: str
    username: str
    age: int
    hobbies: List[str] = Field(default_factory=list)
    friends: List[str] = Field(default_factory=list)
    popularity_score: float = 0.0
    created_at: Optional[datetime] = None

    def to_record(self) -> UserRecord:
        return UserRecord(
            id=self.id,
            username=self.username,
            age=self.age,
            hobbies=tuple(self.hobbies),
            created_at=self.created_at,
        )


class FriendshipView(BaseModel):
    """Canonical friendship edge."""

    id: int
    user_id_1: str
    user_id_2: str
    created: bool = Field(
        default=False, description="True if this call inserted the edge"
    )

    @property
    def edge_id(self) -> str:
        return f"{self.user_id_1}-{self.user_id_2}"

    @property
    def pair(self) -> Tuple[str, str]:
        return self.user_id_1, self.user_id_2


class GraphEdge(BaseModel):
    """Edge as consumed by graph renderers"""

    id: str
    source: str
    target: str


class GraphSnapshot(BaseModel):
    """Read model of the whole graph."""

    users: List[UserView] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class DeleteStatus(str, Enum):
    """Possible outcomes of deleting a user"""

    DELETED = "deleted"
    HAS_FRIENDSHIPS = "has_friendships"
    NOT_FOUND = "not_found"


class DeleteUserResult(BaseModel):
    status: DeleteStatus
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == DeleteStatus.DELETED
