"""
Family API Endpoints

CRUD for family trees plus the builder helpers (candidate pools, student
selection, batches) and the auto-assign trigger.

Writes accept the id-reference payload, hydrate it into a draft and run the
family validator server side before anything is persisted.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gubaye.api.errors import not_found, reject, stale_version
from gubaye.assignment.draft import draft_from_payload, referenced_student_ids
from gubaye.assignment.family_validator import validate
from gubaye.assignment.pool import FamilyContext, filter_candidates
from gubaye.assignment.registry import compute_selected_ids
from gubaye.assignment.results import Invalid, InvalidCode
from gubaye.assignment.roles import FamilyStatus
from gubaye.config import settings
from gubaye.core.database import get_db
from gubaye.core.models import Family, FamilyChild, FamilyUnit, GrandParentUnit, Student
from gubaye.core.schemas import (
    AutoAssignRequest,
    AutoAssignResponse,
    BatchList,
    CandidateRequest,
    FamilyDraftIn,
    FamilyListResponse,
    FamilySchema,
    FamilyStats,
    FamilyStatusUpdate,
    FamilyWrite,
    Pagination,
    StudentSummary,
)
from gubaye.services.auto_assign import (
    AssignmentOptions,
    AutoAssignClient,
    AutoAssignError,
    AutoAssignNotConfiguredError,
    count_available_students,
    eligible_families,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_auto_assign_client() -> AutoAssignClient:
    """Dependency returning the configured auto-assign client."""
    return AutoAssignClient.from_settings()


# ============================================================================
# Helpers
# ============================================================================


def _tree_options() -> tuple:
    """Loader options for a family with its whole tree and every student."""
    grand_parents = selectinload(Family.grand_parents)
    units = grand_parents.selectinload(GrandParentUnit.family_units)
    return (
        selectinload(Family.family_leader),
        selectinload(Family.family_co_leader),
        selectinload(Family.family_secretary),
        grand_parents.selectinload(GrandParentUnit.grand_father),
        grand_parents.selectinload(GrandParentUnit.grand_mother),
        units.selectinload(FamilyUnit.father),
        units.selectinload(FamilyUnit.mother),
        units.selectinload(FamilyUnit.children).selectinload(FamilyChild.student),
    )


async def _get_family(db: AsyncSession, family_id: UUID) -> Family:
    result = await db.execute(
        select(Family)
        .where(Family.id == family_id)
        .options(*_tree_options())
        .execution_options(populate_existing=True)
    )
    family = result.scalar_one_or_none()

    if not family:
        raise not_found("Family", family_id)

    return family


async def _resolve_students(db: AsyncSession, payload: FamilyDraftIn) -> dict[UUID, Student]:
    """Load every student the payload references; unknown ids are rejected."""
    ids = referenced_student_ids(payload)
    if not ids:
        return {}

    result = await db.execute(select(Student).where(Student.id.in_(ids)))
    students = {s.id: s for s in result.scalars().all()}

    missing = ids - students.keys()
    if missing:
        reject(
            Invalid(
                InvalidCode.UNKNOWN_STUDENT,
                f"Unknown student ID(s): {', '.join(sorted(str(m) for m in missing))}",
            )
        )

    return students


async def _validated_write(db: AsyncSession, payload: FamilyDraftIn) -> FamilyWrite:
    """Hydrate, validate and project a submitted family."""
    draft = draft_from_payload(payload, await _resolve_students(db, payload))

    result = validate(draft, block_batch_mismatch=settings.blocks_batch_mismatch)
    if isinstance(result, Invalid):
        reject(result)

    for warning in result.warnings:
        logger.warning(f"Family '{payload.title}' saved with warning: {warning}")

    return result.value


def _apply_write(family: Family, data: FamilyWrite) -> None:
    """Copy a validated projection onto a family row, replacing its tree."""
    family.title = data.title
    family.location = data.location
    family.batch = data.batch
    family.allow_other_batches = data.allow_other_batches
    family.family_date = data.family_date
    family.family_leader_id = data.family_leader
    family.family_co_leader_id = data.family_co_leader
    family.family_secretary_id = data.family_secretary

    family.grand_parents = [
        GrandParentUnit(
            position=gp_index,
            title=gp.title,
            grand_father_id=gp.grand_father,
            grand_mother_id=gp.grand_mother,
            family_units=[
                FamilyUnit(
                    position=unit_index,
                    father_id=unit.father.student,
                    father_phone=unit.father.phone,
                    father_email=unit.father.email,
                    father_occupation=unit.father.occupation,
                    mother_id=unit.mother.student,
                    mother_phone=unit.mother.phone,
                    mother_email=unit.mother.email,
                    mother_occupation=unit.mother.occupation,
                    children=[
                        FamilyChild(
                            position=child_index,
                            student_id=child.student,
                            relationship_type=child.relationship.value,
                            birth_order=child.birth_order,
                        )
                        for child_index, child in enumerate(unit.children)
                    ],
                )
                for unit_index, unit in enumerate(gp.families)
            ],
        )
        for gp_index, gp in enumerate(data.grand_parents)
    ]


# ============================================================================
# Builder helpers
# ============================================================================


@router.get("/batches", response_model=BatchList)
async def list_batches(db: AsyncSession = Depends(get_db)) -> BatchList:
    """Distinct student batches, newest first."""
    result = await db.execute(
        select(Student.batch)
        .where(Student.batch.is_not(None), Student.batch != "")
        .distinct()
        .order_by(Student.batch.desc())
    )
    return BatchList(batches=list(result.scalars().all()))


@router.get("/students/selection", response_model=list[StudentSummary])
async def list_selection_students(db: AsyncSession = Depends(get_db)) -> list[Student]:
    """Active students available to the family builder's pickers."""
    result = await db.execute(
        select(Student)
        .where(Student.is_active.is_(True))
        .order_by(Student.first_name, Student.last_name)
    )
    return list(result.scalars().all())


@router.post("/candidates", response_model=list[StudentSummary])
async def list_candidates(
    request: CandidateRequest, db: AsyncSession = Depends(get_db)
) -> list[Student]:
    """Candidate pool for one slot of the submitted draft."""
    draft = draft_from_payload(request.draft, await _resolve_students(db, request.draft))

    result = await db.execute(
        select(Student)
        .where(Student.is_active.is_(True))
        .order_by(Student.first_name, Student.last_name)
    )

    return filter_candidates(
        request.role,
        result.scalars().all(),
        compute_selected_ids(draft),
        request.current_student_id,
        FamilyContext.from_draft(draft),
    )


@router.get("/stats", response_model=FamilyStats)
async def get_family_stats(db: AsyncSession = Depends(get_db)) -> FamilyStats:
    """Family counts by status and the total number of placed members."""
    result = await db.execute(select(Family).options(*_tree_options()))
    families = result.scalars().all()

    current = sum(1 for f in families if f.status == FamilyStatus.CURRENT)
    return FamilyStats(
        total_families=len(families),
        current_families=current,
        finished_families=len(families) - current,
        total_members=sum(f.member_count for f in families),
    )


@router.post("/auto-assign-children", response_model=AutoAssignResponse)
async def auto_assign_children(
    request: AutoAssignRequest | None = None,
    db: AsyncSession = Depends(get_db),
    client: AutoAssignClient = Depends(get_auto_assign_client),
) -> AutoAssignResponse:
    """Forward eligible families to the auto-assign service.

    Eligible families are current ones with at least one complete parent
    couple. The service mutates families on its own; clients refetch after.
    """
    request = request or AutoAssignRequest()

    result = await db.execute(
        select(Family).where(Family.status == FamilyStatus.CURRENT).options(*_tree_options())
    )
    current_families = result.scalars().all()

    targets = [
        f
        for f in eligible_families(current_families)
        if (not request.target_batch or f.batch == request.target_batch)
        and (request.family_ids is None or f.id in request.family_ids)
    ]
    if not targets:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "code": "no_eligible_families",
                "message": "No families with both a father and a mother to assign children to",
            },
        )

    batches = sorted({f.batch for f in targets})
    students = (await db.execute(select(Student).where(Student.is_active.is_(True)))).scalars()
    available = count_available_students(students.all(), current_families, set(batches))

    try:
        await client.request_assignment(
            family_ids=[f.id for f in targets],
            batches=batches,
            available_students=available,
            options=AssignmentOptions(
                target_batch=request.target_batch,
                mode=request.mode,
                max_children_per_family=request.max_children_per_family,
                consider_gender_balance=request.consider_gender_balance,
                consider_age=request.consider_age,
                address_level=request.address_level,
            ),
        )
    except AutoAssignNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    except AutoAssignError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    return AutoAssignResponse(
        refetch=True, eligible_families=len(targets), available_students=available
    )


# ============================================================================
# CRUD
# ============================================================================


@router.get("/", response_model=FamilyListResponse)
async def list_families(
    search: str | None = None,
    location: str | None = None,
    batch: str | None = None,
    family_status: FamilyStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> FamilyListResponse:
    """List families with optional filters, newest first."""
    stmt = select(Family)

    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Family.title.ilike(pattern), Family.location.ilike(pattern)))
    if location:
        stmt = stmt.where(Family.location.ilike(f"%{location.strip()}%"))
    if batch:
        stmt = stmt.where(Family.batch == batch)
    if family_status:
        stmt = stmt.where(Family.status == family_status.value)

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    result = await db.execute(
        stmt.options(*_tree_options())
        .order_by(Family.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    families = result.scalars().all()

    return FamilyListResponse(
        families=[FamilySchema.from_model(f) for f in families],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{family_id}", response_model=FamilySchema)
async def get_family(family_id: UUID, db: AsyncSession = Depends(get_db)) -> FamilySchema:
    """Get one family with its whole tree."""
    return FamilySchema.from_model(await _get_family(db, family_id))


@router.post("/", response_model=FamilySchema, status_code=status.HTTP_201_CREATED)
async def create_family(
    payload: FamilyDraftIn,
    db: AsyncSession = Depends(get_db),
    admin: str | None = Header(None, alias="X-Admin-User"),
) -> FamilySchema:
    """Create a family from a complete, valid tree."""
    data = await _validated_write(db, payload)

    family = Family(created_by=admin, status=FamilyStatus.CURRENT.value, grand_parents=[])
    _apply_write(family, data)
    db.add(family)
    await db.commit()

    logger.info(f"Family created: {family.id} ({family.title}, batch {family.batch})")
    return FamilySchema.from_model(await _get_family(db, family.id))


@router.put("/{family_id}", response_model=FamilySchema)
async def update_family(
    family_id: UUID, payload: FamilyDraftIn, db: AsyncSession = Depends(get_db)
) -> FamilySchema:
    """Replace a family's header and tree."""
    family = await _get_family(db, family_id)

    if family.is_stale(payload.version):
        raise stale_version("Family", family.version)

    data = await _validated_write(db, payload)
    _apply_write(family, data)
    family.bump_version()
    await db.commit()

    logger.info(f"Family updated: {family.id} (version {family.version})")
    return FamilySchema.from_model(await _get_family(db, family.id))


@router.patch("/{family_id}/status", response_model=FamilySchema)
async def update_family_status(
    family_id: UUID, status_update: FamilyStatusUpdate, db: AsyncSession = Depends(get_db)
) -> FamilySchema:
    """Mark a family current or finished."""
    family = await _get_family(db, family_id)

    family.status = status_update.status.value
    family.bump_version()
    await db.commit()

    logger.info(f"Family {family.id} status set to {family.status}")
    return FamilySchema.from_model(await _get_family(db, family.id))


@router.delete("/{family_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_family(family_id: UUID, db: AsyncSession = Depends(get_db)) -> None:
    """Delete a family and its whole tree."""
    family = await _get_family(db, family_id)

    await db.delete(family)
    await db.commit()

    logger.info(f"Family deleted: {family_id}")
