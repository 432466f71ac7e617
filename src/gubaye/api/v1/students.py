"""
Student API Endpoints

Read access to student reference data, plus record creation.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gubaye.api.errors import not_found
from gubaye.assignment.roles import Gender
from gubaye.config import settings
from gubaye.core.database import get_db
from gubaye.core.models import Student
from gubaye.core.schemas import Pagination, StudentCreate, StudentListResponse, StudentSchema

router = APIRouter()


@router.get("/", response_model=StudentListResponse)
async def list_students(
    search: str | None = None,
    batch: str | None = None,
    gender: Gender | None = None,
    is_active: bool | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> StudentListResponse:
    """List students with optional filters."""
    stmt = select(Student)

    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Student.first_name.ilike(pattern),
                Student.middle_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.giby_gubaye_id.ilike(pattern),
            )
        )
    if batch:
        stmt = stmt.where(Student.batch == batch)
    if gender:
        stmt = stmt.where(Student.gender == gender.value)
    if is_active is not None:
        stmt = stmt.where(Student.is_active.is_(is_active))

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    result = await db.execute(
        stmt.order_by(Student.first_name, Student.last_name).offset((page - 1) * limit).limit(limit)
    )
    students = result.scalars().all()

    return StudentListResponse(
        students=[StudentSchema.model_validate(s) for s in students],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{student_id}", response_model=StudentSchema)
async def get_student(student_id: UUID, db: AsyncSession = Depends(get_db)) -> Student:
    """Get student details by ID."""
    student = await db.get(Student, student_id)

    if not student:
        raise not_found("Student", student_id)

    return student


@router.post("/", response_model=StudentSchema, status_code=status.HTTP_201_CREATED)
async def create_student(
    student_data: StudentCreate, db: AsyncSession = Depends(get_db)
) -> Student:
    """Create a student reference record."""
    if student_data.giby_gubaye_id:
        result = await db.execute(
            select(Student).where(Student.giby_gubaye_id == student_data.giby_gubaye_id)
        )
        if result.scalar_one_or_none():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Student already exists with ID {student_data.giby_gubaye_id}",
            )

    student = Student(**student_data.model_dump(), is_active=True, number_of_jobs=0)

    db.add(student)
    await db.commit()
    await db.refresh(student)

    return student
