"""Entry schemas."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from src.kernel.models.entry import EntryKind


class PublicationType(str, Enum):
    JOURNAL_ARTICLE = "journal_article"
    CONFERENCE_PAPER = "conference_paper"
    BOOK_CHAPTER = "book_chapter"
    WORKING_PAPER = "working_paper"
    BLOG_POST = "blog_post"


class PartnerType(str, Enum):
    CORPORATE = "corporate"
    ACADEMIC = "academic"
    GOVERNMENT = "government"
    NGO = "ngo"


YEAR_PATTERN = r"^\d{4}$"


class ResearchPayload(BaseModel):
    """Academic research output."""

    title: str = Field(..., min_length=3, max_length=500)
    authors: str = Field(..., min_length=2)
    publication_type: PublicationType
    journal: Optional[str] = None
    year: str = Field(..., pattern=YEAR_PATTERN)
    doi: Optional[str] = None
    abstract: str = Field(..., min_length=20)
    keywords: str = Field(..., min_length=2)
    department: str = Field(..., min_length=1)


class PartnershipPayload(BaseModel):
    """Institutional partnership."""

    partner_name: str = Field(..., min_length=2)
    partner_type: PartnerType
    country: str = Field(..., min_length=2)
    strategic_objectives: str = Field(..., min_length=10)
    start_date: str = Field(..., min_length=1)
    end_date: Optional[str] = None
    contact_person: str = Field(..., min_length=2)
    contact_email: EmailStr
    description: str = Field(..., min_length=10)


class RankingPayload(BaseModel):
    """Ranking or accreditation result."""

    ranking_body: str = Field(..., min_length=2)
    program_name: str = Field(..., min_length=2)
    year: str = Field(..., pattern=YEAR_PATTERN)
    rank: str = Field(..., min_length=1)
    previous_rank: Optional[str] = None
    category: str = Field(..., min_length=1)
    accreditation_type: Optional[str] = None
    notes: Optional[str] = None


PAYLOAD_SCHEMAS: Dict[str, Type[BaseModel]] = {
    "research": ResearchPayload,
    "partnership": PartnershipPayload,
    "ranking": RankingPayload,
}


def validate_payload(kind: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a payload against its kind's schema and return the cleaned dict.

    Raises ValueError listing every failing field.
    """
    schema = PAYLOAD_SCHEMAS[kind]
    try:
        return schema.model_validate(payload).model_dump(mode="json")
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or kind}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValueError(f"Invalid {kind} payload: {problems}") from None


class EntryCreate(BaseModel):
    """New entry: kind plus the kind-specific payload."""

    kind: EntryKind
    payload: Dict[str, Any]

    @model_validator(mode="after")
    def check_payload(self) -> "EntryCreate":
        self.payload = validate_payload(self.kind.value, self.payload)
        return self


class EntryUpdate(BaseModel):
    """Partial payload edit; merged over the stored payload and re-validated."""

    payload: Dict[str, Any]


class EntryActionRequest(BaseModel):
    """Body for POST /entries/{id}/actions/{action}."""

    reason: Optional[str] = Field(None, max_length=2000)


class EntryResponse(BaseModel):
    """Entry response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    kind: str
    status: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    published_by: Optional[str] = None
    published_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    payload: Dict[str, Any]
    available_actions: List[str] = Field(default_factory=list)


class EntryStatsResponse(BaseModel):
    """Counts by status and kind."""

    total: int
    draft: int
    pending_review: int
    approved: int
    published: int
    rejected: int
    research: int
    partnership: int
    ranking: int


class EntryEventResponse(BaseModel):
    """One audit event."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    event_type: str
    actor: Optional[str] = None
    payload: Dict[str, Any]
    created_at: datetime
