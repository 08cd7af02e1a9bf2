from datetime import timedelta

import pytest
from sqlalchemy import select

from trustcore.core.db import utcnow
from trustcore.modules.bans.models import Ban, BanType
from trustcore.modules.content.models import Comment, Post
from trustcore.modules.moderation.models import ModerationLog
from trustcore.modules.privacy.models import EngagementAudience, ProfileVisibility
from trustcore.modules.users.models import UserRole

from conftest import StubClassifier, auth_header

EVERYONE = {"profile_visibility": ProfileVisibility.EVERYONE}
REMOVED = {"approved": False, "flagged": False, "action": "removed", "violations": ["harassment"]}


async def test_requires_token(client):
    r = await client.post("/api/v1/content/posts", json={"content": "hi"})
    assert r.status_code == 401
    assert r.json()["error"] == "auth_error"


async def test_approved_post_is_published(client, db, classifier, make_user):
    author = await make_user("author", privacy=EVERYONE)
    reader = await make_user("reader")

    r = await client.post("/api/v1/content/posts", json={"content": "  first post  "}, headers=auth_header(author))
    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "published"
    assert body["moderation"]["action"] == "approved"

    post = await db.get(Post, body["id"])
    assert post.content == "first post"
    assert post.flagged is False
    assert classifier.calls[0][:3] == ("first post", "post", body["id"])

    r = await client.get(f"/api/v1/content/posts/{body['id']}", headers=auth_header(reader))
    assert r.status_code == 200

    logs = (await db.execute(select(ModerationLog))).scalars().all()
    assert [(log.content_id, log.action, log.used_fallback) for log in logs] == [(body["id"], "approved", False)]


async def test_removed_post_is_retained_flagged(client, db, classifier, make_user):
    classifier.payload = REMOVED
    author = await make_user("author", privacy=EVERYONE)
    reader = await make_user("reader")

    r = await client.post("/api/v1/content/posts", json={"content": "nasty"}, headers=auth_header(author))
    assert r.json()["status"] == "rejected"
    post_id = r.json()["id"]

    post = await db.get(Post, post_id)
    assert post.flagged is True
    assert post.moderation_action == "removed"

    r = await client.get(f"/api/v1/content/posts/{post_id}", headers=auth_header(reader))
    assert r.status_code == 404
    r = await client.get(f"/api/v1/content/posts/{post_id}", headers=auth_header(author))
    assert r.status_code == 200


async def test_classifier_timeout_holds_for_review(client, db, classifier, make_user, monkeypatch):
    from trustcore.core.config import settings
    monkeypatch.setattr(settings, "CLASSIFIER_TIMEOUT_SECONDS", 0.05)
    classifier.delay = 1.0
    author = await make_user("author")

    r = await client.post("/api/v1/content/posts", json={"content": "slow"}, headers=auth_header(author))
    assert r.status_code == 201
    assert r.json()["status"] == "pending_review"

    post = await db.get(Post, r.json()["id"])
    assert post.flagged is False
    log = (await db.execute(select(ModerationLog))).scalars().one()
    assert log.used_fallback is True


@pytest.mark.parametrize("content", ["", "   ", "x" * 281])
async def test_post_length_limits(client, make_user, content):
    author = await make_user("author")
    r = await client.post("/api/v1/content/posts", json={"content": content}, headers=auth_header(author))
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


async def test_missing_body_field_is_400(client, make_user):
    author = await make_user("author")
    r = await client.post("/api/v1/content/posts", json={}, headers=auth_header(author))
    assert r.status_code == 400


async def test_escalation_bans_author(client, db, classifier, make_user):
    classifier.payload = {**REMOVED, "shouldBanUser": True, "banDuration": 7}
    author = await make_user("author")
    headers = auth_header(author)

    r = await client.post("/api/v1/content/posts", json={"content": "threat"}, headers=headers)
    assert r.json()["status"] == "rejected"
    assert r.json()["moderation"] == {"action": "removed", "flagged": True, "violations": ["harassment"]}

    ban = (await db.execute(select(Ban))).scalars().one()
    assert ban.ban_type == BanType.SHADOW_BAN
    assert ban.ban_duration_days == 7

    r = await client.get("/api/v1/moderation/ban-status", headers=headers)
    assert r.json()["is_banned"] is True
    assert r.json()["ban_type"] == "shadow_ban"

    classifier.payload = {"approved": True, "flagged": False, "action": "approved", "violations": []}
    r = await client.post("/api/v1/content/posts", json={"content": "sorry"}, headers=headers)
    assert r.status_code == 403
    assert r.json()["error"] == "policy_violation"


async def test_banned_user_cannot_comment_or_react(client, db, make_user, make_post):
    author = await make_user("author", privacy=EVERYONE)
    banned = await make_user("banned")
    post = await make_post(author)
    db.add(Ban(user_id=banned.id, ban_type=BanType.PERMANENT_BAN, reason="test", is_active=True, created_at=utcnow()))
    await db.commit()

    r = await client.post(f"/api/v1/content/posts/{post.id}/comments", json={"content": "hi"}, headers=auth_header(banned))
    assert r.status_code == 403
    r = await client.post(f"/api/v1/content/posts/{post.id}/reactions", headers=auth_header(banned))
    assert r.status_code == 403


async def test_comment_gates(client, db, make_university, make_user, make_post):
    north = await make_university("North")
    south = await make_university("South")
    author = await make_user("author", north, privacy={
        "profile_visibility": ProfileVisibility.EVERYONE,
        "who_can_comment": EngagementAudience.UNIVERSITY,
    })
    classmate = await make_user("classmate", north)
    outsider = await make_user("outsider", south)
    blocked = await make_user("blocked", north)
    post = await make_post(author)

    r = await client.put(f"/api/v1/blocks/{blocked.id}", headers=auth_header(author))
    assert r.status_code == 200

    r = await client.post(f"/api/v1/content/posts/{post.id}/comments", json={"content": "hi"}, headers=auth_header(classmate))
    assert r.status_code == 201
    assert r.json()["status"] == "published"

    r = await client.post(f"/api/v1/content/posts/{post.id}/comments", json={"content": "hi"}, headers=auth_header(outsider))
    assert r.status_code == 403

    r = await client.post(f"/api/v1/content/posts/{post.id}/comments", json={"content": "hi"}, headers=auth_header(blocked))
    assert r.status_code == 404

    r = await client.get(f"/api/v1/content/posts/{post.id}/comments", headers=auth_header(author))
    assert r.json()["total_count"] == 1

    # The classmate keeps the default university-only profile.
    r = await client.get(f"/api/v1/content/posts/{post.id}/comments", headers=auth_header(outsider))
    assert r.json()["total_count"] == 0


async def test_reaction_toggle(client, make_user, make_post):
    author = await make_user("author", privacy=EVERYONE)
    fan = await make_user("fan")
    post = await make_post(author)
    url = f"/api/v1/content/posts/{post.id}/reactions"

    r = await client.post(url, headers=auth_header(fan))
    assert r.json() == {"reacted": True}
    r = await client.post(url, headers=auth_header(fan))
    assert r.json() == {"reacted": False}


async def test_feed_counts_only_visible_posts(client, make_university, make_user, make_post):
    north = await make_university("North")
    south = await make_university("South")
    viewer = await make_user("viewer", north)
    open_author = await make_user("open", south, privacy=EVERYONE)
    campus_author = await make_user("campus", north)
    hidden_author = await make_user("hidden", south)
    blocker = await make_user("blocker", north, privacy=EVERYONE)

    for i in range(3):
        await make_post(open_author, f"open {i}")
    await make_post(campus_author, "campus")
    await make_post(hidden_author, "other campus only")
    await make_post(open_author, "flagged", flagged=True)
    await make_post(blocker, "blocked")
    await make_post(viewer, "own flagged", flagged=True)

    r = await client.put(f"/api/v1/blocks/{viewer.id}", headers=auth_header(blocker))
    assert r.status_code == 200

    headers = auth_header(viewer)
    r = await client.get("/api/v1/content/posts", params={"limit": 3}, headers=headers)
    body = r.json()
    assert body["total_count"] == 5
    assert body["has_more"] is True
    assert [p["content"] for p in body["data"]] == ["own flagged", "campus", "open 2"]

    r = await client.get("/api/v1/content/posts", params={"limit": 3, "offset": 3}, headers=headers)
    body = r.json()
    assert [p["content"] for p in body["data"]] == ["open 1", "open 0"]
    assert body["has_more"] is False

    r = await client.get("/api/v1/content/posts", params={"scope": "campus"}, headers=headers)
    assert [p["content"] for p in r.json()["data"]] == ["own flagged", "campus"]

    r = await client.get(f"/api/v1/content/users/{hidden_author.id}/posts", headers=headers)
    assert r.json() == {"data": [], "total_count": 0, "has_more": False}


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 51}, {"offset": -1}, {"scope": "trending"}])
async def test_feed_rejects_bad_paging(client, make_user, params):
    viewer = await make_user("viewer")
    r = await client.get("/api/v1/content/posts", params=params, headers=auth_header(viewer))
    assert r.status_code == 400


async def test_admin_only_routes_reject_members(client, make_user):
    member = await make_user("member", role=UserRole.MEMBER)
    r = await client.get("/api/v1/admin/audit-logs", headers=auth_header(member))
    assert r.status_code == 403


async def test_moderation_logs_admin_view(client, classifier, make_user):
    admin = await make_user("admin", role=UserRole.ADMIN)
    author = await make_user("author")
    headers = auth_header(author)

    await client.post("/api/v1/content/posts", json={"content": "one"}, headers=headers)
    classifier.payload = REMOVED
    await client.post("/api/v1/content/posts", json={"content": "two"}, headers=headers)

    r = await client.get(f"/api/v1/moderation/users/{author.id}/logs", headers=auth_header(admin))
    assert r.status_code == 200
    assert [(log["action"], log["flagged"]) for log in r.json()] == [("removed", True), ("approved", False)]

    r = await client.get(f"/api/v1/moderation/users/{author.id}/logs", headers=headers)
    assert r.status_code == 403


async def test_submission_response_hides_escalation(client, classifier, make_user):
    classifier.payload = {
        "approved": False, "flagged": True, "action": "manual_review",
        "violations": ["spam"], "shouldBanUser": True, "banDuration": 7,
    }
    author = await make_user("author")

    r = await client.post("/api/v1/content/posts", json={"content": "buy followers"}, headers=auth_header(author))
    assert r.status_code == 201
    moderation = r.json()["moderation"]
    assert set(moderation) == {"action", "flagged", "violations"}
    for key in ("shouldBanUser", "banDuration", "should_ban_user", "ban_duration", "contentId"):
        assert key not in moderation


async def test_approved_but_flagged_is_pending_review(client, db, classifier, make_user):
    classifier.payload = {"approved": True, "flagged": True, "action": "approved", "violations": []}
    author = await make_user("author", privacy=EVERYONE)
    reader = await make_user("reader")

    r = await client.post("/api/v1/content/posts", json={"content": "borderline"}, headers=auth_header(author))
    assert r.json()["status"] == "pending_review"
    post_id = r.json()["id"]
    assert (await db.get(Post, post_id)).flagged is True

    r = await client.get(f"/api/v1/content/posts/{post_id}", headers=auth_header(reader))
    assert r.status_code == 404


async def test_shadow_banned_author_reaches_nobody(client, db, make_user, make_post):
    author = await make_user("author", privacy=EVERYONE)
    reader = await make_user("reader", privacy=EVERYONE)
    post = await make_post(author, "still here")
    reader_post = await make_post(reader, "reader post")
    await make_post(author, "another")
    db.add(Ban(
        user_id=author.id, ban_type=BanType.SHADOW_BAN, reason="spam", is_active=True,
        expires_at=utcnow() + timedelta(days=3), created_at=utcnow(),
    ))
    await db.commit()

    r = await client.get(f"/api/v1/content/posts/{post.id}", headers=auth_header(reader))
    assert r.status_code == 404

    r = await client.get(f"/api/v1/content/users/{author.id}/posts", headers=auth_header(reader))
    assert r.json() == {"data": [], "total_count": 0, "has_more": False}

    r = await client.get("/api/v1/content/posts", headers=auth_header(reader))
    assert r.json()["total_count"] == 1
    assert [p["content"] for p in r.json()["data"]] == ["reader post"]

    r = await client.get(f"/api/v1/content/users/{author.id}/posts", headers=auth_header(author))
    assert r.json()["total_count"] == 2

    # Comments by the shadow banned author vanish too.
    db.add(Comment(post_id=reader_post.id, user_id=author.id, content="psst", flagged=False))
    await db.commit()
    r = await client.get(f"/api/v1/content/posts/{reader_post.id}/comments", headers=auth_header(reader))
    assert r.json()["total_count"] == 0
    r = await client.get(f"/api/v1/content/posts/{reader_post.id}/comments", headers=auth_header(author))
    assert r.json()["total_count"] == 1


async def test_expired_shadow_ban_restores_reach(client, db, make_user, make_post):
    author = await make_user("author", privacy=EVERYONE)
    reader = await make_user("reader")
    post = await make_post(author)
    db.add(Ban(
        user_id=author.id, ban_type=BanType.SHADOW_BAN, reason="spam", is_active=True,
        expires_at=utcnow() - timedelta(hours=1), created_at=utcnow() - timedelta(days=2),
    ))
    await db.commit()

    r = await client.get(f"/api/v1/content/posts/{post.id}", headers=auth_header(reader))
    assert r.status_code == 200
    r = await client.get("/api/v1/content/posts", headers=auth_header(reader))
    assert r.json()["total_count"] == 1


async def test_feed_pages_are_bounded_and_consistent(client, make_user, make_post):
    viewer = await make_user("viewer")
    author = await make_user("author", privacy=EVERYONE)
    hidden = await make_user("hidden", privacy={"profile_visibility": ProfileVisibility.NOBODY})
    for i in range(7):
        await make_post(author, f"post {i}")
        await make_post(hidden, f"hidden {i}")
    headers = auth_header(viewer)

    seen = []
    offset = 0
    while True:
        r = await client.get("/api/v1/content/posts", params={"limit": 3, "offset": offset}, headers=headers)
        body = r.json()
        assert body["total_count"] == 7
        assert len(body["data"]) <= 3
        seen.extend(p["content"] for p in body["data"])
        if not body["has_more"]:
            break
        offset += 3

    assert seen == [f"post {i}" for i in reversed(range(7))]
