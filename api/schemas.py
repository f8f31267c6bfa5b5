"""
Pydantic models for request validation and responses.

Field names match the JSON the API speaks (camelCase), so validated payloads
can be handed to the data layer as-is.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sql_db.query_builder import CompanyFilter, JobFilter


class _StrictModel(BaseModel):
    """Rejects keys the model does not declare."""
    model_config = ConfigDict(extra="forbid")


class _PatchModel(_StrictModel):
    """Partial-update body: at least one field must be supplied."""

    @model_validator(mode="after")
    def require_a_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be supplied")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, in declaration order. Explicit nulls are kept for nullable columns."""
        return self.model_dump(exclude_unset=True)


# ---------- Companies ----------

class CompanyNew(_StrictModel):
    """Request body for creating a company."""
    handle: str = Field(..., min_length=1, max_length=25, description="Lower-case unique handle")
    name: str = Field(..., min_length=1, description="Company name")
    description: str = Field(..., description="Company description")
    numEmployees: Optional[int] = Field(None, ge=0, description="Head count")
    logoUrl: Optional[str] = Field(None, description="Logo URL")

    @field_validator("handle")
    @classmethod
    def lower_case_handle(cls, value: str) -> str:
        if value != value.lower():
            raise ValueError("handle must be lower-case")
        return value


class CompanyUpdate(_PatchModel):
    """Request body for patching a company. The handle cannot change."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    numEmployees: Optional[int] = Field(None, ge=0)
    logoUrl: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("cannot be null")
        return value


class CompanySearchQuery(_StrictModel):
    """Query string accepted by GET /companies."""
    nameLike: Optional[str] = Field(None, description="Case-insensitive partial name match")
    minEmployees: Optional[int] = Field(None, ge=0)
    maxEmployees: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_employee_range(self):
        if (
            self.minEmployees is not None
            and self.maxEmployees is not None
            and self.minEmployees > self.maxEmployees
        ):
            raise ValueError("minEmployees cannot be greater than maxEmployees")
        return self

    def to_filter(self) -> CompanyFilter:
        return CompanyFilter(
            name_like=self.nameLike,
            min_employees=self.minEmployees,
            max_employees=self.maxEmployees,
        )


class JobSummary(BaseModel):
    """A job as listed inside its company."""
    id: int
    title: str
    salary: Optional[int] = None
    equity: Optional[Decimal] = None


class Company(BaseModel):
    handle: str
    name: str
    description: str
    numEmployees: Optional[int] = None
    logoUrl: Optional[str] = None


class CompanyDetail(Company):
    jobs: List[JobSummary] = Field(default_factory=list)


class CompanyResponse(BaseModel):
    company: Company


class CompanyDetailResponse(BaseModel):
    company: CompanyDetail


class CompanyListResponse(BaseModel):
    companies: List[Company]


# ---------- Jobs ----------

class JobNew(_StrictModel):
    """Request body for creating a job."""
    title: str = Field(..., min_length=1)
    salary: Optional[int] = Field(None, ge=0)
    equity: Optional[Decimal] = Field(None, ge=0, le=1, description="Fraction between 0 and 1")
    companyHandle: str = Field(..., min_length=1, max_length=25)


class JobUpdate(_PatchModel):
    """Request body for patching a job. companyHandle is not accepted."""
    title: Optional[str] = Field(None, min_length=1)
    salary: Optional[int] = Field(None, ge=0)
    equity: Optional[Decimal] = Field(None, ge=0, le=1)

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("title cannot be null")
        return value


class JobSearchQuery(_StrictModel):
    """
    Query string accepted by GET /jobs.

    hasEquity=true keeps only jobs with non-zero equity; hasEquity=false is
    the same as leaving it out.
    """
    title: Optional[str] = Field(None, description="Case-insensitive partial title match")
    minSalary: Optional[int] = Field(None, ge=0)
    hasEquity: Optional[bool] = None

    @field_validator("hasEquity", mode="before")
    @classmethod
    def true_or_false(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value not in ("true", "false"):
                raise ValueError("hasEquity must be 'true' or 'false'")
            return value == "true"
        return value

    def to_filter(self) -> JobFilter:
        return JobFilter(
            title=self.title,
            min_salary=self.minSalary,
            has_equity=self.hasEquity,
        )


class Job(BaseModel):
    title: str
    salary: Optional[int] = None
    equity: Optional[Decimal] = None
    companyHandle: str


class JobResponse(BaseModel):
    job: Job


class JobListResponse(BaseModel):
    jobs: List[Job]


# ---------- Misc ----------

class DeletedResponse(BaseModel):
    deleted: str


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str = Field(..., description="Service health status")
    database: str = Field(..., description="Database connection status")
    cache: str = Field(..., description="Redis cache status")
