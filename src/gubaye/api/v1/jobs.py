"""
Job Assignment API Endpoints

Assign students to jobs, set sub-class/type/background, and remove jobs.
Exclusive types and the per-student job cap are re-checked here before every
write, regardless of what the client already verified.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gubaye.api.errors import not_found, reject, stale_version
from gubaye.assignment.job_guard import check_job_assignment
from gubaye.assignment.job_slots import check_type_change, type_options
from gubaye.assignment.results import Invalid, InvalidCode
from gubaye.assignment.roles import JobType, SubClass
from gubaye.config import settings
from gubaye.core.database import get_db
from gubaye.core.models import Job, Student
from gubaye.core.schemas import (
    CountBucket,
    JobAssign,
    JobListResponse,
    JobSchema,
    JobStats,
    JobTypeOption,
    JobUpdate,
    Pagination,
    StudentSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_job(db: AsyncSession, job_id: UUID) -> Job:
    result = await db.execute(
        select(Job)
        .where(Job.id == job_id)
        .options(selectinload(Job.student))
        .execution_options(populate_existing=True)
    )
    job = result.scalar_one_or_none()

    if not job:
        raise not_found("Job", job_id)

    return job


def _parse_sub_class(value: str | None) -> SubClass | None:
    try:
        return SubClass.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.get("/", response_model=JobListResponse)
async def list_jobs(
    search: str | None = None,
    sub_class: str | None = None,
    sub_class_status: Literal["assigned", "not_assigned"] | None = None,
    job_type: JobType | None = Query(None, alias="type"),
    class_label: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> JobListResponse:
    """List job assignments with optional filters."""
    stmt = select(Job).join(Job.student)

    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.giby_gubaye_id.ilike(pattern),
            )
        )
    parsed_sub_class = _parse_sub_class(sub_class)
    if parsed_sub_class:
        stmt = stmt.where(Job.sub_class == parsed_sub_class.value)
    if sub_class_status == "assigned":
        stmt = stmt.where(Job.sub_class.is_not(None), Job.sub_class != "")
    elif sub_class_status == "not_assigned":
        stmt = stmt.where(or_(Job.sub_class.is_(None), Job.sub_class == ""))
    if job_type:
        stmt = stmt.where(Job.type == job_type.value)
    if class_label is not None:
        stmt = stmt.where(Job.class_label == class_label)

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    result = await db.execute(
        stmt.options(selectinload(Job.student))
        .order_by(Job.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    jobs = result.scalars().all()

    return JobListResponse(
        jobs=[JobSchema.model_validate(j) for j in jobs],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/eligible-students", response_model=list[StudentSummary])
async def list_eligible_students(
    search: str | None = None, db: AsyncSession = Depends(get_db)
) -> list[Student]:
    """Active students still below the job cap."""
    stmt = select(Student).where(
        Student.is_active.is_(True), Student.number_of_jobs < settings.MAX_JOBS_PER_STUDENT
    )
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.giby_gubaye_id.ilike(pattern),
            )
        )

    result = await db.execute(stmt.order_by(Student.first_name, Student.last_name))
    return list(result.scalars().all())


@router.get("/stats", response_model=JobStats)
async def get_job_stats(db: AsyncSession = Depends(get_db)) -> JobStats:
    """Totals by sub-class and by type."""
    total = (await db.execute(select(func.count(Job.id)))).scalar_one()
    with_sub_class = (
        await db.execute(
            select(func.count(Job.id)).where(Job.sub_class.is_not(None), Job.sub_class != "")
        )
    ).scalar_one()

    sub_class_rows = await db.execute(
        select(Job.sub_class, func.count(Job.id))
        .where(Job.sub_class.is_not(None), Job.sub_class != "")
        .group_by(Job.sub_class)
        .order_by(func.count(Job.id).desc())
    )
    type_rows = await db.execute(
        select(Job.type, func.count(Job.id)).group_by(Job.type).order_by(func.count(Job.id).desc())
    )

    return JobStats(
        total_jobs=total,
        assigned_with_sub_class=with_sub_class,
        without_sub_class=total - with_sub_class,
        sub_class_stats=[CountBucket(key=key, count=count) for key, count in sub_class_rows],
        type_stats=[CountBucket(key=key, count=count) for key, count in type_rows],
    )


@router.get("/type-options", response_model=list[JobTypeOption])
async def get_type_options(
    sub_class: str | None = None,
    exclude_job_id: UUID | None = None,
    db: AsyncSession = Depends(get_db),
) -> list[JobTypeOption]:
    """Every job type for a sub-class, with taken exclusive types marked unavailable."""
    parsed = _parse_sub_class(sub_class)
    jobs: list[Job] = []
    if parsed:
        result = await db.execute(select(Job).where(Job.sub_class == parsed.value))
        jobs = list(result.scalars().all())

    return [
        JobTypeOption(type=option.type, label=option.label, available=option.available)
        for option in type_options(jobs, parsed, exclude_job_id)
    ]


@router.get("/sub-class-options", response_model=list[str])
async def get_sub_class_options() -> list[str]:
    """Sub-classes a job can be placed in, in display order."""
    return [sub_class.value for sub_class in SubClass]


@router.get("/student/{student_id}/all", response_model=list[JobSchema])
async def list_student_jobs(student_id: UUID, db: AsyncSession = Depends(get_db)) -> list[Job]:
    """All jobs held by one student, across classes."""
    student = await db.get(Student, student_id)

    if not student:
        raise not_found("Student", student_id)

    result = await db.execute(
        select(Job)
        .where(Job.student_id == student_id)
        .options(selectinload(Job.student))
        .order_by(Job.created_at)
    )
    return list(result.scalars().all())


@router.post("/assign", response_model=JobSchema, status_code=status.HTTP_201_CREATED)
async def assign_job(job_data: JobAssign, db: AsyncSession = Depends(get_db)) -> Job:
    """Create an empty job for a student below the cap."""
    student = await db.get(Student, job_data.student_id)

    if not student:
        raise not_found("Student", job_data.student_id)

    check = check_job_assignment(student)
    if isinstance(check, Invalid):
        reject(check, conflict=True)

    # Conditional increment so concurrent assigns cannot overshoot the cap
    result = await db.execute(
        update(Student)
        .where(
            Student.id == student.id,
            Student.number_of_jobs < settings.MAX_JOBS_PER_STUDENT,
        )
        .values(number_of_jobs=Student.number_of_jobs + 1)
    )
    if result.rowcount == 0:
        reject(
            Invalid(InvalidCode.JOB_CAP_REACHED, "Student reached the job limit concurrently"),
            conflict=True,
        )

    job = Job(student_id=student.id, class_label=job_data.class_label)
    db.add(job)
    await db.commit()

    logger.info(f"Job {job.id} assigned to student {student.id}")
    return await _get_job(db, job.id)


@router.put("/{job_id}", response_model=JobSchema)
async def update_job(
    job_id: UUID, job_update: JobUpdate, db: AsyncSession = Depends(get_db)
) -> Job:
    """Update sub-class, type and background.

    Only updates fields that are explicitly provided.
    """
    job = await _get_job(db, job_id)

    if job.is_stale(job_update.version):
        raise stale_version("Job", job.version)

    update_data = job_update.model_dump(mode="json", exclude_unset=True, exclude={"version"})
    new_sub_class = update_data.get("sub_class", job.sub_class)
    new_type = update_data.get("type", job.type)

    if new_type is not None:
        result = await db.execute(
            select(Job).where(Job.sub_class == new_sub_class, Job.id != job.id)
        )
        check = check_type_change(result.scalars().all(), job.id, new_sub_class, new_type)
        if isinstance(check, Invalid):
            reject(check, conflict=True)

    for field, value in update_data.items():
        setattr(job, field, value)
    job.bump_version()

    try:
        await db.commit()
    except IntegrityError as e:
        # Another writer took the exclusive type after the check above
        await db.rollback()
        logger.warning(f"Job {job_id} lost exclusive type {new_type!r} in {new_sub_class!r}: {e}")
        reject(
            Invalid(
                InvalidCode.TYPE_UNAVAILABLE,
                f"{new_type} was assigned in {new_sub_class} by someone else",
            ),
            conflict=True,
        )

    logger.info(f"Job {job.id} updated: sub_class={job.sub_class!r}, type={job.type!r}")
    return await _get_job(db, job.id)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(job_id: UUID, db: AsyncSession = Depends(get_db)) -> None:
    """Delete a job and release the student's job slot."""
    job = await _get_job(db, job_id)
    student_id = job.student_id

    await db.delete(job)
    await db.execute(
        update(Student)
        .where(Student.id == student_id, Student.number_of_jobs > 0)
        .values(number_of_jobs=Student.number_of_jobs - 1)
    )
    await db.commit()

    logger.info(f"Job {job_id} deleted; released slot for student {student_id}")
