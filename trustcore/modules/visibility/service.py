"""Per-viewer visibility and engagement decisions.

The decision itself (:func:`evaluate_visibility`) is pure: it takes the viewer,
the content and a :class:`VisibilityFacts` snapshot and returns a bool. The
async helpers only gather facts, in as few queries as possible, and fail closed
when the store cannot be read.

Listings push the same rules into SQL with :func:`visible_clause` so that
paging and counting happen in the database.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, TypeVar

from sqlalchemy import and_, false, not_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import utcnow
from trustcore.modules.bans.models import Ban, BanType
from trustcore.modules.blocks import service as block_service
from trustcore.modules.blocks.models import BlockEdge
from trustcore.modules.privacy import service as privacy_service
from trustcore.modules.privacy.models import (
    DEFAULT_PROFILE_VISIBILITY,
    EngagementAudience,
    PrivacySettings,
    ProfileVisibility,
)
from trustcore.modules.users.models import User

logger = logging.getLogger(__name__)


class Ownable(Protocol):
    """Anything with an owner and a flagged bit (posts, comments)."""

    user_id: int
    flagged: bool


T = TypeVar("T", bound=Ownable)


class EngagementKind(str, enum.Enum):
    REACT = "react"
    COMMENT = "comment"


@dataclass(frozen=True)
class Viewer:
    user_id: int
    university_id: Optional[int] = None

    @classmethod
    def of(cls, user: User) -> "Viewer":
        return cls(user_id=user.id, university_id=user.university_id)


@dataclass(frozen=True)
class OwnerPolicy:
    university_id: Optional[int]
    profile_visibility: ProfileVisibility
    who_can_react: EngagementAudience
    who_can_comment: EngagementAudience


@dataclass
class VisibilityFacts:
    """What the evaluator needs to know about a set of owners."""

    blocked_ids: Set[int] = field(default_factory=set)
    # Owners under an effective shadow ban: their content reaches nobody else.
    shadow_banned_ids: Set[int] = field(default_factory=set)
    owner_policies: Dict[int, OwnerPolicy] = field(default_factory=dict)


def _same_university(a: Optional[int], b: Optional[int]) -> bool:
    return a is not None and b is not None and a == b


def evaluate_visibility(viewer: Viewer, owner_id: int, flagged: bool, facts: VisibilityFacts) -> bool:
    # Order matters: first match wins.
    if owner_id == viewer.user_id:
        return True
    if flagged:
        return False
    if owner_id in facts.shadow_banned_ids:
        return False
    if owner_id in facts.blocked_ids:
        return False

    policy = facts.owner_policies.get(owner_id)
    if policy is None:
        # Unknown owner, nothing to evaluate against.
        return False
    if policy.profile_visibility == ProfileVisibility.NOBODY:
        return False
    if policy.profile_visibility == ProfileVisibility.UNIVERSITY:
        return _same_university(viewer.university_id, policy.university_id)
    return True


def evaluate_engagement(
    viewer: Viewer,
    owner_id: int,
    kind: EngagementKind,
    facts: VisibilityFacts,
) -> bool:
    if owner_id in facts.blocked_ids:
        return False

    policy = facts.owner_policies.get(owner_id)
    if policy is None:
        return False

    audience = policy.who_can_react if kind == EngagementKind.REACT else policy.who_can_comment
    if audience == EngagementAudience.EVERYONE:
        return True
    return _same_university(viewer.university_id, policy.university_id)


async def load_facts(db: AsyncSession, viewer: Viewer, owner_ids: Iterable[int]) -> VisibilityFacts:
    ids = set(owner_ids)
    if not ids:
        return VisibilityFacts()

    blocked = await block_service.blocked_user_ids(db, viewer.user_id, ids)

    shadow = await db.execute(
        select(Ban.user_id).distinct().where(
            Ban.user_id.in_(ids),
            Ban.ban_type == BanType.SHADOW_BAN,
            Ban.in_effect(utcnow()),
        )
    )
    shadow_banned = set(shadow.scalars().all())

    result = await db.execute(select(User.id, User.university_id).where(User.id.in_(ids)))
    universities = {user_id: university_id for user_id, university_id in result.all()}
    settings_by_user = await privacy_service.get_settings_for_users(db, universities.keys())

    policies = {}
    for user_id, university_id in universities.items():
        user_settings = settings_by_user[user_id]
        policies[user_id] = OwnerPolicy(
            university_id=university_id,
            profile_visibility=user_settings.profile_visibility,
            who_can_react=user_settings.who_can_react,
            who_can_comment=user_settings.who_can_comment,
        )
    return VisibilityFacts(blocked_ids=blocked, shadow_banned_ids=shadow_banned, owner_policies=policies)


async def is_visible(db: AsyncSession, viewer: Viewer, content: Ownable) -> bool:
    # Ownership and flagged state need no lookups.
    if content.user_id == viewer.user_id:
        return True
    if content.flagged:
        return False

    try:
        facts = await load_facts(db, viewer, [content.user_id])
    except SQLAlchemyError as e:
        logger.warning(f"[Visibility] Fact lookup failed for viewer {viewer.user_id}, hiding content: {e}")
        return False
    return evaluate_visibility(viewer, content.user_id, content.flagged, facts)


async def filter_visible(db: AsyncSession, viewer: Viewer, contents: Sequence[T]) -> List[T]:
    """Keep only the items the viewer may see, preserving order."""
    candidates = [c for c in contents if c.user_id == viewer.user_id or not c.flagged]
    if not candidates:
        return []

    try:
        facts = await load_facts(db, viewer, {c.user_id for c in candidates if c.user_id != viewer.user_id})
    except SQLAlchemyError as e:
        logger.warning(f"[Visibility] Fact lookup failed for viewer {viewer.user_id}, hiding {len(candidates)} items: {e}")
        return [c for c in candidates if c.user_id == viewer.user_id]

    return [c for c in candidates if evaluate_visibility(viewer, c.user_id, c.flagged, facts)]


async def can_engage(db: AsyncSession, viewer: Viewer, owner_id: int, kind: EngagementKind) -> bool:
    try:
        facts = await load_facts(db, viewer, [owner_id])
    except SQLAlchemyError as e:
        logger.warning(f"[Visibility] Engagement lookup failed for viewer {viewer.user_id} on owner {owner_id}: {e}")
        return False
    return evaluate_engagement(viewer, owner_id, kind, facts)


def _profile_is(owner_col, visibility: ProfileVisibility):
    has_setting = select(PrivacySettings.user_id).where(
        PrivacySettings.user_id == owner_col,
        PrivacySettings.profile_visibility == visibility,
    ).exists()
    if visibility != DEFAULT_PROFILE_VISIBILITY:
        return has_setting
    # No row means the default applies.
    has_row = select(PrivacySettings.user_id).where(PrivacySettings.user_id == owner_col).exists()
    return or_(has_setting, not_(has_row))


def visible_clause(viewer: Viewer, owner_col, flagged_col, now: Optional[datetime] = None):
    """SQL form of :func:`evaluate_visibility`, correlated on the content's
    owner and flagged columns. Used to page and count listings in the store."""
    now = now or utcnow()

    owner_exists = select(User.id).where(User.id == owner_col).exists()
    shadow_banned = select(Ban.id).where(
        Ban.user_id == owner_col,
        Ban.ban_type == BanType.SHADOW_BAN,
        Ban.in_effect(now),
    ).exists()
    blocked = select(BlockEdge.id).where(
        or_(
            and_(BlockEdge.blocker_id == viewer.user_id, BlockEdge.blocked_id == owner_col),
            and_(BlockEdge.blocker_id == owner_col, BlockEdge.blocked_id == viewer.user_id),
        )
    ).exists()

    if viewer.university_id is None:
        same_university = false()
    else:
        same_university = select(User.id).where(
            User.id == owner_col,
            User.university_id == viewer.university_id,
        ).exists()

    return or_(
        owner_col == viewer.user_id,
        and_(
            flagged_col.is_(False),
            not_(shadow_banned),
            not_(blocked),
            owner_exists,
            not_(_profile_is(owner_col, ProfileVisibility.NOBODY)),
            or_(not_(_profile_is(owner_col, ProfileVisibility.UNIVERSITY)), same_university),
        ),
    )
