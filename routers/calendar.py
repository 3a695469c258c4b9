import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.exc import SQLAlchemyError

from schemas import MAX_ID, CalendarEventCreate, CalendarEventCreated, CalendarEventOut, StatusMessage
from storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[CalendarEventOut], summary="List Calendar Events")
def list_events(storage: Storage = Depends(get_storage)):
    try:
        return storage.calendar.get_all()
    except SQLAlchemyError:
        logger.exception("Failed to list calendar events")
        raise HTTPException(status_code=500, detail="An error occurred while fetching calendar events")


@router.get("/upcoming", response_model=List[CalendarEventOut],
    summary="Upcoming Deadlines",
    description="Events dated now or later, soonest first, at most `limit` of them."
)
def upcoming_events(limit: int = Query(10, ge=0, le=MAX_ID), storage: Storage = Depends(get_storage)):
    try:
        return storage.calendar.get_upcoming(limit=limit)
    except SQLAlchemyError:
        logger.exception("Failed to list upcoming events")
        raise HTTPException(status_code=500, detail="An error occurred while fetching upcoming events")


@router.get("/{event_id}", response_model=CalendarEventOut, summary="Get a Calendar Event")
def get_event(event_id: int = Path(..., ge=-MAX_ID, le=MAX_ID), storage: Storage = Depends(get_storage)):
    try:
        event = storage.calendar.get(event_id)
    except SQLAlchemyError:
        logger.exception("Failed to load calendar event %d", event_id)
        raise HTTPException(status_code=500, detail="An error occurred while fetching the event")
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("", status_code=201, response_model=CalendarEventCreated, summary="Add a Calendar Event")
def create_event(event: CalendarEventCreate, storage: Storage = Depends(get_storage)):
    try:
        saved = storage.calendar.create(**event.model_dump())
    except SQLAlchemyError:
        logger.exception("Failed to store calendar event")
        raise HTTPException(status_code=500, detail="An error occurred while creating the event")
    logger.info("Calendar event %d created: %s on %s", saved.id, saved.title, saved.event_date.isoformat())
    return {"success": True, "message": "Calendar event created successfully", "eventId": saved.id}


@router.delete("/{event_id}", response_model=StatusMessage, summary="Delete a Calendar Event")
def delete_event(event_id: int = Path(..., ge=-MAX_ID, le=MAX_ID), storage: Storage = Depends(get_storage)):
    try:
        deleted = storage.calendar.delete(event_id)
    except SQLAlchemyError:
        logger.exception("Failed to delete calendar event %d", event_id)
        raise HTTPException(status_code=500, detail="An error occurred while deleting the event")
    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    logger.info("Calendar event %d deleted", event_id)
    return {"success": True, "message": "Event deleted successfully"}
