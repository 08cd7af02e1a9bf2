from typing import Any, List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import get_db
from trustcore.core import deps
from trustcore.modules.users.models import User
from trustcore.modules.reports import schemas, service

router = APIRouter()

@router.post("", response_model=schemas.ReportRead, status_code=status.HTTP_201_CREATED)
async def submit_report(
    report_in: schemas.ReportCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.create_report(
        db,
        current_user.id,
        report_in.content_type,
        report_in.content_id,
        report_in.reason,
    )

@router.get("/mine", response_model=List[schemas.ReportWithContent])
async def my_reports(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_my_reports(db, current_user.id)

@router.get("/pending", response_model=List[schemas.ReportRead])
async def pending_reports(
    current_user: User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_pending_reports(db)

@router.post("/{report_id}/review", response_model=schemas.ReportRead)
async def review_report(
    report_id: int,
    review_in: schemas.ReportReview,
    current_user: User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.review_report(db, report_id, current_user.id, review_in.status)
