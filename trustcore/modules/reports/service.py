import logging
from typing import Any, List

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.config import settings
from trustcore.core.db import is_unique_violation, utcnow
from trustcore.core.errors import Conflict, NotFound, PolicyViolation, ValidationError, store_errors
from trustcore.modules.admin import service as admin_service
from trustcore.modules.content.models import Comment, Post
from trustcore.modules.reports import schemas
from trustcore.modules.reports.models import Report, ReportContentType, ReportStatus
from trustcore.modules.users import service as user_service

logger = logging.getLogger(__name__)

_TERMINAL = {ReportStatus.REVIEWED, ReportStatus.DISMISSED}

def _parse_content_type(value: Any) -> ReportContentType:
    try:
        return ReportContentType(value)
    except ValueError:
        raise ValidationError("Invalid content type. Must be post, comment, or user")

def _parse_content_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("Invalid content ID. Must be a positive number")
    return value

def _clean_reason(value: Any) -> str:
    reason = value.strip() if isinstance(value, str) else ""
    if not reason:
        raise ValidationError("Report reason cannot be empty")
    if len(reason) > settings.REPORT_REASON_MAX_LENGTH:
        raise ValidationError(f"Report reason cannot exceed {settings.REPORT_REASON_MAX_LENGTH} characters")
    return reason

async def _resolve_owner(db: AsyncSession, content_type: ReportContentType, content_id: int) -> int:
    if content_type == ReportContentType.POST:
        post = await db.get(Post, content_id)
        if not post:
            raise NotFound("Post not found or inaccessible")
        return post.user_id
    if content_type == ReportContentType.COMMENT:
        comment = await db.get(Comment, content_id)
        if not comment:
            raise NotFound("Comment not found or inaccessible")
        return comment.user_id
    user = await user_service.get_user(db, content_id)
    if not user:
        raise NotFound("User not found")
    return user.id

async def create_report(
    db: AsyncSession,
    reporter_id: int,
    content_type: Any,
    content_id: Any,
    reason: Any,
) -> Report:
    content_type = _parse_content_type(content_type)
    content_id = _parse_content_id(content_id)
    reason = _clean_reason(reason)

    with store_errors("create report", actor_id=reporter_id, content_type=content_type.value, content_id=content_id):
        owner_id = await _resolve_owner(db, content_type, content_id)
        if owner_id == reporter_id:
            if content_type == ReportContentType.USER:
                raise PolicyViolation("You cannot report yourself")
            raise PolicyViolation("You cannot report your own content")

        report = Report(
            reporter_id=reporter_id,
            content_type=content_type,
            content_id=content_id,
            reason=reason,
            status=ReportStatus.PENDING,
        )
        db.add(report)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if is_unique_violation(e):
                raise Conflict("You have already reported this content")
            raise

    logger.info(
        f"[Reports] Report {report.id} on {content_type.value} {content_id} (owner {owner_id}) "
        f"by {reporter_id}: {reason[:100]}{'...' if len(reason) > 100 else ''}"
    )
    return report

async def _preview(db: AsyncSession, report: Report) -> schemas.ReportedContentPreview:
    if report.content_type == ReportContentType.USER:
        user = await user_service.get_user(db, report.content_id)
        if not user:
            return schemas.ReportedContentPreview(content="[User profile no longer available]", is_deleted=True)
        return schemas.ReportedContentPreview(
            content=f"User profile: @{user.username}",
            author_username=user.username,
            created_at=user.created_at,
        )

    model, label = (Post, "Post") if report.content_type == ReportContentType.POST else (Comment, "Comment")
    item = await db.get(model, report.content_id)
    if not item:
        return schemas.ReportedContentPreview(content=f"[{label} no longer available]", is_deleted=True)
    author = await user_service.get_user(db, item.user_id)
    return schemas.ReportedContentPreview(
        content=item.content,
        author_username=author.username if author else None,
        created_at=item.created_at,
    )

async def list_my_reports(db: AsyncSession, reporter_id: int) -> List[schemas.ReportWithContent]:
    with store_errors("list reports", actor_id=reporter_id):
        result = await db.execute(
            select(Report)
            .where(Report.reporter_id == reporter_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        reports = result.scalars().all()

        response = []
        for report in reports:
            item = schemas.ReportWithContent.model_validate(report)
            item.reported_content = await _preview(db, report)
            response.append(item)
    return response

async def list_pending_reports(db: AsyncSession) -> List[Report]:
    with store_errors("list pending reports"):
        result = await db.execute(
            select(Report)
            .where(Report.status == ReportStatus.PENDING)
            .order_by(Report.created_at.asc(), Report.id.asc())
        )
        return list(result.scalars().all())

async def review_report(
    db: AsyncSession,
    report_id: int,
    reviewer_id: int,
    status: Any,
) -> Report:
    """pending -> reviewed | dismissed. Terminal reports never move again."""
    try:
        target = ReportStatus(status)
    except ValueError:
        target = None
    if target not in _TERMINAL:
        raise ValidationError("Invalid status. Must be reviewed or dismissed")

    with store_errors("review report", actor_id=reviewer_id, content_type="report", content_id=report_id):
        # Conditional on the current state so two reviewers cannot both win.
        result = await db.execute(
            update(Report)
            .where(Report.id == report_id, Report.status == ReportStatus.PENDING)
            .values(status=target, reviewed_by=reviewer_id, reviewed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if (result.rowcount or 0) == 0:
            await db.rollback()
            existing = await db.get(Report, report_id)
            if not existing:
                raise NotFound("Report not found")
            raise Conflict(f"Report already {existing.status.value}")

        await admin_service.create_audit_log(
            db,
            action=f"report.review.{target.value}",
            user_id=reviewer_id,
            target_type="report",
            target_id=report_id,
        )
        await db.commit()

        report = await db.get(Report, report_id, populate_existing=True)

    logger.info(f"[Reports] Report {report_id} marked {target.value} by {reviewer_id}")
    return report
