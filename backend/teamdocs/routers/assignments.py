from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import case, or_
from sqlalchemy.orm import Session, selectinload

from teamdocs.core.settings import settings
from teamdocs.db.session import get_db
from teamdocs.models.assignment import Assignment
from teamdocs.models.enums import (
    PRIORITY_RANK,
    AssignmentCategory,
    AssignmentPriority,
    AssignmentStatus,
)
from teamdocs.schemas.assignment import (
    AssignmentCreate,
    AssignmentRead,
    AssignmentStatusUpdate,
    AssignmentUpdate,
    NoteCreate,
)
from teamdocs.schemas.base import MessageResponse, Page
from teamdocs.services import analytics
from teamdocs.services import assignments as assignment_service
from teamdocs.utils.pagination import MAX_PAGE_SIZE, paginate
from teamdocs.utils.search import contains_pattern

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


SortOrder = Literal["asc", "desc"]

_PRIORITY_ORDER = case(PRIORITY_RANK, value=Assignment.priority, else_=-1)

SORT_FIELDS = {
    "createdAt": Assignment.created_at,
    "updatedAt": Assignment.updated_at,
    "dueDate": Assignment.due_date,
    "priority": _PRIORITY_ORDER,
    "status": Assignment.status,
    "topic": Assignment.topic,
    "progress": Assignment.progress,
}


def _base_query(db: Session):
    return (
        db.query(Assignment)
        .options(selectinload(Assignment.assignee_member), selectinload(Assignment.notes))
        .filter(Assignment.is_deleted.is_(False))
    )


def _apply_sort(query, sort_by: str, sort_order: SortOrder):
    column = SORT_FIELDS.get(sort_by, Assignment.created_at)
    if sort_order == "asc":
        return query.order_by(column.asc(), Assignment.id.asc())
    return query.order_by(column.desc(), Assignment.id.desc())


def _get_assignment_or_404(db: Session, assignment_id: int) -> Assignment:
    try:
        return assignment_service.get_assignment(db, assignment_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _read(db: Session, assignment: Assignment) -> AssignmentRead:
    db.refresh(assignment)
    return AssignmentRead.model_validate(assignment)


@router.get("", response_model=Page[AssignmentRead])
def list_assignments(
    category: Optional[AssignmentCategory] = Query(None),
    status_filter: Optional[AssignmentStatus] = Query(None, alias="status"),
    priority: Optional[AssignmentPriority] = Query(None),
    assignee_id: Optional[int] = Query(None, alias="assigneeId"),
    search: Optional[str] = Query(None, max_length=200),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Page[AssignmentRead]:
    query = _base_query(db)

    if category:
        query = query.filter(Assignment.category == category)
    if status_filter:
        query = query.filter(Assignment.status == status_filter)
    if priority:
        query = query.filter(Assignment.priority == priority)
    if assignee_id:
        query = query.filter(Assignment.assignee_id == assignee_id)
    if search and search.strip():
        pattern = contains_pattern(search.strip())
        query = query.filter(
            or_(
                Assignment.topic.ilike(pattern, escape="\\"),
                Assignment.assignee.ilike(pattern, escape="\\"),
                Assignment.description.ilike(pattern, escape="\\"),
            )
        )

    query = _apply_sort(query, sort_by, sort_order)
    result = paginate(query, page=page, limit=limit)
    result["items"] = [AssignmentRead.model_validate(a) for a in result["items"]]
    return Page[AssignmentRead](**result)


@router.post("", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def create_assignment(
    assignment_in: AssignmentCreate,
    db: Session = Depends(get_db),
) -> AssignmentRead:
    try:
        assignment = assignment_service.create_assignment(db, assignment_in)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    return _read(db, assignment)


@router.get("/due/today", response_model=List[AssignmentRead])
def list_due_today(db: Session = Depends(get_db)) -> List[AssignmentRead]:
    assignments = (
        analytics.due_today_query(db, tz=settings.tzinfo)
        .options(selectinload(Assignment.assignee_member))
        .order_by(Assignment.due_date.asc(), Assignment.id.asc())
        .all()
    )
    return [AssignmentRead.model_validate(a) for a in assignments]


@router.get("/overdue", response_model=List[AssignmentRead])
def list_overdue(db: Session = Depends(get_db)) -> List[AssignmentRead]:
    assignments = (
        analytics.overdue_query(db)
        .options(selectinload(Assignment.assignee_member))
        .order_by(Assignment.due_date.asc(), Assignment.id.asc())
        .all()
    )
    return [AssignmentRead.model_validate(a) for a in assignments]


@router.get("/{assignment_id}", response_model=AssignmentRead)
def get_assignment(assignment_id: int, db: Session = Depends(get_db)) -> AssignmentRead:
    assignment = _get_assignment_or_404(db, assignment_id)
    return AssignmentRead.model_validate(assignment)


@router.put("/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: int,
    assignment_update: AssignmentUpdate,
    db: Session = Depends(get_db),
) -> AssignmentRead:
    assignment = _get_assignment_or_404(db, assignment_id)
    try:
        assignment_service.update_assignment(db, assignment, assignment_update)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    return _read(db, assignment)


@router.patch("/{assignment_id}", response_model=AssignmentRead)
@router.patch("/{assignment_id}/status", response_model=AssignmentRead)
def update_assignment_status(
    assignment_id: int,
    status_update: AssignmentStatusUpdate,
    db: Session = Depends(get_db),
) -> AssignmentRead:
    assignment = _get_assignment_or_404(db, assignment_id)
    assignment_service.change_status(db, assignment, status_update.status, progress=status_update.progress)
    db.commit()
    return _read(db, assignment)


@router.post("/{assignment_id}/notes", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def add_note(
    assignment_id: int,
    note_in: NoteCreate,
    db: Session = Depends(get_db),
) -> AssignmentRead:
    assignment = _get_assignment_or_404(db, assignment_id)
    try:
        assignment_service.add_note(db, assignment, author_id=note_in.author_id, content=note_in.content)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    return _read(db, assignment)


@router.delete("/{assignment_id}", response_model=MessageResponse)
def delete_assignment(assignment_id: int, db: Session = Depends(get_db)) -> MessageResponse:
    assignment = _get_assignment_or_404(db, assignment_id)
    assignment_service.soft_delete_assignment(db, assignment)
    db.commit()
    return MessageResponse(message="Assignment deleted successfully")
