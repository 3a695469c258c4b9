from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

Seriousness = Literal[
    "death",
    "life-threatening",
    "hospitalization",
    "disability",
    "congenital-anomaly",
    "other-important",
]
Outcome = Literal["recovered", "recovering", "not-recovered", "fatal", "sequelae", "unknown"]
EventType = Literal["primary", "secondary", "accent", "muted"]

# ids must fit a 64-bit SQLite INTEGER
MAX_ID = 2 ** 63 - 1


class CamelModel(BaseModel):
    """JSON uses camelCase keys, Python attributes stay snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        str_strip_whitespace = True


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ADR reports

class Medication(CamelModel):
    name: str = Field(..., min_length=1)
    manufacturer: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[str] = None
    dose_used: Optional[str] = None
    route_used: Optional[str] = None
    frequency: Optional[str] = None
    therapy_start_date: Optional[str] = None
    therapy_end_date: Optional[str] = None
    indication: Optional[str] = None
    action_taken: Optional[str] = None
    reintroduction_result: Optional[str] = None


class ADRReportBase(CamelModel):
    patient_initials: str = Field(..., min_length=1)
    age_at_event: str = Field(..., min_length=1)
    gender: Optional[str] = None
    weight: Optional[str] = None
    registration_number: Optional[str] = None

    reaction_start_date: str = Field(..., min_length=1)
    reaction_stop_date: Optional[str] = None
    reaction_description: str = Field(..., min_length=1)
    relevant_tests: Optional[str] = None
    medical_history: Optional[str] = None
    seriousness: List[Seriousness] = Field(default_factory=list)
    outcome: Optional[Outcome] = None

    suspected_medications: List[Medication] = Field(default_factory=list)
    suspected_medication_name: str = Field(..., min_length=1)
    manufacturer: Optional[str] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[str] = None
    dose_used: Optional[str] = None
    route_used: Optional[str] = None
    frequency: Optional[str] = None
    therapy_start_date: Optional[str] = None
    therapy_end_date: Optional[str] = None
    indication: Optional[str] = None
    action_taken: Optional[str] = None
    reintroduction_result: Optional[str] = None
    reintroduction_dose: Optional[str] = None
    concomitant_medications: Optional[str] = None
    additional_information: Optional[str] = None

    reporter_name: str = Field(..., min_length=1)
    reporter_address: Optional[str] = None
    reporter_address_line2: Optional[str] = None
    pin_code: Optional[str] = None
    reporter_email: EmailStr
    reporter_phone: Optional[str] = None
    reporter_occupation: str = Field(..., min_length=1)
    report_date: str = Field(..., min_length=1)

    @field_validator("outcome", mode="before")
    @classmethod
    def blank_outcome_is_none(cls, value):
        # the form posts "" when no outcome radio is picked
        return value or None


class ADRReportCreate(ADRReportBase):
    class Config:
        json_schema_extra = {
            "example": {
                "patientInitials": "RK",
                "ageAtEvent": "54",
                "gender": "M",
                "reactionStartDate": "2026-09-02",
                "reactionDescription": "Generalised urticaria two hours after the first dose",
                "seriousness": ["hospitalization"],
                "outcome": "recovering",
                "suspectedMedicationName": "Amoxicillin",
                "suspectedMedications": [
                    {"name": "Amoxicillin", "doseUsed": "500 mg", "routeUsed": "oral", "frequency": "TID"}
                ],
                "reporterName": "Dr. A. Mehta",
                "reporterEmail": "a.mehta@cityhospital.in",
                "reporterOccupation": "physician",
                "reportDate": "2026-09-03",
            }
        }


class ADRReportOut(ADRReportBase):
    id: int
    reporter_email: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ADRReportCreated(BaseModel):
    success: bool = True
    message: str
    reportId: int


class DrugStatistic(CamelModel):
    drug_name: str
    total_reports: int
    serious_count: int
    non_serious_count: int
    last_reported: datetime


# Chat

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)

    class Config:
        json_schema_extra = {"example": {"message": "what is adr"}}


class ChatOption(BaseModel):
    id: str
    text: str
    query: str


class ChatResponse(BaseModel):
    message: str
    options: List[ChatOption] = Field(default_factory=list)


class ChatMessageOut(CamelModel):
    id: int
    message: str
    response: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ConversationTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class AIChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    conversationHistory: List[ConversationTurn] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "message": "How do I assess causality for a suspected ADR?",
                "conversationHistory": [
                    {"role": "user", "content": "What is a serious ADR?"},
                    {"role": "assistant", "content": "A serious ADR is one that results in death..."},
                ],
            }
        }


class AIChatResponse(BaseModel):
    response: str
    conversationId: str
    connectionError: bool = False


# Calendar

class CalendarEventCreate(CamelModel):
    title: str = Field(..., min_length=1)
    event_date: datetime
    event_type: EventType
    description: Optional[str] = None

    @field_validator("event_date")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        return _as_utc(value).replace(tzinfo=None)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Quarterly ADR Reports Due",
                "eventDate": "2027-01-15T00:00:00Z",
                "eventType": "accent",
                "description": "Submit quarterly adverse drug reaction reports to the regulatory authority.",
            }
        }


class CalendarEventOut(CamelModel):
    id: int
    title: str
    event_date: datetime
    event_type: str
    description: Optional[str] = None
    created_at: datetime

    @field_validator("event_date", "created_at")
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class CalendarEventCreated(BaseModel):
    success: bool = True
    message: str
    eventId: int


# Users

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        # bcrypt only hashes the first 72 bytes
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return value


class UserLogin(BaseModel):
    username: str
    password: str


class StatusMessage(BaseModel):
    success: bool = True
    message: str
