from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from database import Base


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


# sqlite_autoincrement keeps ids from being reused after a delete
class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, name="hashed_password", nullable=False)
    created_at = Column(DateTime, default=utcnow)


class ADRReport(Base):
    __tablename__ = "adr_reports"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)

    # Patient
    patient_initials = Column(String, nullable=False)
    age_at_event = Column(String, nullable=False)
    gender = Column(String)
    weight = Column(String)
    registration_number = Column(String)

    # Reaction
    reaction_start_date = Column(String, nullable=False)
    reaction_stop_date = Column(String)
    reaction_description = Column(Text, nullable=False)
    relevant_tests = Column(Text)
    medical_history = Column(Text)
    seriousness = Column(JSON, default=list)
    outcome = Column(String)

    # Medication
    suspected_medications = Column(JSON, default=list)
    suspected_medication_name = Column(String, nullable=False)
    manufacturer = Column(String)
    batch_number = Column(String)
    expiry_date = Column(String)
    dose_used = Column(String)
    route_used = Column(String)
    frequency = Column(String)
    therapy_start_date = Column(String)
    therapy_end_date = Column(String)
    indication = Column(String)
    action_taken = Column(String)
    reintroduction_result = Column(String)
    reintroduction_dose = Column(String)
    concomitant_medications = Column(Text)
    additional_information = Column(Text)

    # Reporter
    reporter_name = Column(String, nullable=False)
    reporter_address = Column(String)
    reporter_address_line2 = Column(String)
    pin_code = Column(String)
    reporter_email = Column(String, nullable=False)
    reporter_phone = Column(String)
    reporter_occupation = Column(String, nullable=False)
    report_date = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow)


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    message = Column(Text, nullable=False)
    response = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class CalendarEvent(Base):
    __tablename__ = "calendar_events"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    event_date = Column(DateTime, nullable=False, index=True)  # naive UTC
    event_type = Column(String, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, default=utcnow)
