"""Instructor dashboard endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from offer_tracker.core.deps import get_db, require_instructor
from offer_tracker.schemas.student import StudentsResponse
from offer_tracker.services import progress_service

router = APIRouter(dependencies=[Depends(require_instructor)])


@router.get("/students", response_model=StudentsResponse)
def list_students(db: Session = Depends(get_db)):
    """Progress of every student, ordered by name."""
    return StudentsResponse(students=progress_service.get_students_progress(db))
