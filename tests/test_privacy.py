from trustcore.modules.privacy import service
from trustcore.modules.privacy.models import EngagementAudience, ProfileVisibility
from trustcore.modules.privacy.schemas import PrivacySettingsUpdate

from conftest import auth_header


async def test_defaults_without_row(db, make_user):
    user = await make_user("alice")
    current = await service.get_privacy_settings(db, user.id)
    assert current.profile_visibility == ProfileVisibility.UNIVERSITY
    assert current.who_can_react == EngagementAudience.EVERYONE
    assert current.who_can_comment == EngagementAudience.EVERYONE


async def test_partial_update_keeps_other_defaults(db, make_user):
    user = await make_user("alice")
    updated = await service.update_privacy_settings(
        db, user.id, PrivacySettingsUpdate(who_can_comment=EngagementAudience.UNIVERSITY)
    )
    assert updated.who_can_comment == EngagementAudience.UNIVERSITY
    assert updated.profile_visibility == ProfileVisibility.UNIVERSITY

    updated = await service.update_privacy_settings(
        db, user.id, PrivacySettingsUpdate(profile_visibility=ProfileVisibility.NOBODY)
    )
    assert updated.profile_visibility == ProfileVisibility.NOBODY
    assert updated.who_can_comment == EngagementAudience.UNIVERSITY


async def test_privacy_api(client, make_user):
    user = await make_user("alice")

    r = await client.get("/api/v1/privacy", headers=auth_header(user))
    assert r.status_code == 200
    assert r.json()["profile_visibility"] == "university"

    r = await client.patch("/api/v1/privacy", json={}, headers=auth_header(user))
    assert r.status_code == 400
    assert r.json()["detail"] == "At least one privacy setting must be provided"

    r = await client.patch("/api/v1/privacy", json={"who_can_react": "university"}, headers=auth_header(user))
    assert r.status_code == 200
    assert r.json()["who_can_react"] == "university"

    r = await client.patch("/api/v1/privacy", json={"profile_visibility": "friends"}, headers=auth_header(user))
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"
