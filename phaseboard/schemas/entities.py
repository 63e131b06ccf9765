"""
PhaseBoard - Entity Schemas
Request and response contracts for users, projects and phases
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Tuple

# Third-party imports (alphabetical)
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator
from pydantic.alias_generators import to_camel

# Local imports (alphabetical)
from phaseboard.schemas.enums import PhaseStatus

# ===============================================================================
# CONSTANTS & CONFIGURATION
# ===============================================================================

MAX_USERNAME_LENGTH = 50
MAX_EMAIL_LENGTH = 100
MAX_NAME_LENGTH = 200
MAX_ROLE_LENGTH = 50
MAX_STATUS_LENGTH = 50

DEFAULT_USER_ROLE = "team_member"
DEFAULT_PROJECT_STATUS = "active"

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# ===============================================================================
# BASE MODELS
# ===============================================================================

class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RelationView(CamelModel):
    """
    View record whose hydrated relations are left out of the JSON when they
    could not be resolved, rather than serialized as null.
    """

    _optional_relations: ClassVar[Tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def _omit_missing_relations(self, handler) -> Dict[str, Any]:
        data = handler(self)
        for name in self._optional_relations:
            if getattr(self, name, None) is None:
                data.pop(name, None)
                data.pop(to_camel(name), None)
        return data


class PatchModel(CamelModel):
    """Partial update schema; explicit nulls are refused for required columns"""

    _required_columns: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_null_required(self):
        for name in self._required_columns:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def _strip_required(value: str, label: str) -> str:
    if not value.strip():
        raise ValueError(f"{label} cannot be empty")
    return value.strip()

# ===============================================================================
# USER SCHEMAS
# ===============================================================================

class UserCreate(CamelModel):
    """Schema for creating users"""
    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)
    email: str = Field(..., max_length=MAX_EMAIL_LENGTH, pattern=EMAIL_PATTERN)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    role: str = Field(default=DEFAULT_USER_ROLE, min_length=1, max_length=MAX_ROLE_LENGTH)
    avatar: Optional[str] = None

    @field_validator("username", "name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _strip_required(v, "Value")


class UserResponse(CamelModel):
    id: str
    username: str
    email: str
    name: str
    role: str
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

# ===============================================================================
# PROJECT SCHEMAS
# ===============================================================================

class NewProjectPhase(CamelModel):
    """Phase submitted together with a new project"""
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    assignee_id: Optional[str] = None
    start_date: datetime
    end_date: datetime
    notes: Optional[str] = None


class ProjectCreate(CamelModel):
    """Schema for creating projects, optionally with their initial phases"""
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    client: Optional[str] = None
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: str = Field(default=DEFAULT_PROJECT_STATUS, min_length=1, max_length=MAX_STATUS_LENGTH)
    created_by: Optional[str] = None
    phases: List[NewProjectPhase] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v, "Project name")

    def project_values(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"phases"})


class ProjectUpdate(PatchModel):
    """Schema for partial project updates"""
    _required_columns: ClassVar[Tuple[str, ...]] = ("name", "start_date", "end_date", "status")

    name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    client: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = Field(None, min_length=1, max_length=MAX_STATUS_LENGTH)
    created_by: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _strip_required(v, "Project name")


class ProjectResponse(CamelModel):
    id: str
    name: str
    client: Optional[str] = None
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# ===============================================================================
# PHASE SCHEMAS
# ===============================================================================

class PhaseCreate(CamelModel):
    """Schema for creating phases"""
    project_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    assignee_id: Optional[str] = None
    status: PhaseStatus = PhaseStatus.PENDING
    start_date: datetime
    end_date: datetime
    notes: Optional[str] = None
    order: int = 0

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v, "Phase name")


class PhaseUpdate(PatchModel):
    """Schema for partial phase updates"""
    _required_columns: ClassVar[Tuple[str, ...]] = (
        "project_id", "name", "status", "start_date", "end_date", "order"
    )

    project_id: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    assignee_id: Optional[str] = None
    status: Optional[PhaseStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    order: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _strip_required(v, "Phase name")


class PhaseResponse(CamelModel):
    id: str
    project_id: str
    name: str
    assignee_id: Optional[str] = None
    status: PhaseStatus
    start_date: datetime
    end_date: datetime
    notes: Optional[str] = None
    order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# ===============================================================================
# HYDRATED VIEW SCHEMAS
# ===============================================================================

class PhaseView(PhaseResponse, RelationView):
    """Phase with its assignee attached when one resolves"""
    _optional_relations: ClassVar[Tuple[str, ...]] = ("assignee",)

    assignee: Optional[UserResponse] = None


class ProjectWithPhases(ProjectResponse, RelationView):
    """Project with its phases, each carrying its assignee"""
    _optional_relations: ClassVar[Tuple[str, ...]] = ("creator",)

    phases: List[PhaseView] = Field(default_factory=list)
    creator: Optional[UserResponse] = None


class PhaseWithDetails(PhaseResponse, RelationView):
    """Phase with both its owning project and its assignee"""
    _optional_relations: ClassVar[Tuple[str, ...]] = ("project", "assignee")

    project: Optional[ProjectResponse] = None
    assignee: Optional[UserResponse] = None
