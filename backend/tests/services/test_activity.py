"""Activity Tracker: verifies visit recording, activity counts and the full-info view.

Invariants:
    - Each visit adds one activity row and bumps visit_count / last_visit together
    - Weekly and monthly counts only include visits inside their windows
    - full-info carries the oldest referral code, or null when the user has none
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from reward_tracker.core.errors import ResourceNotFoundError
from reward_tracker.models import ReferralCode, UserActivity
from reward_tracker.services.activity import ActivityTracker
from reward_tracker.services.user_service import UserService

NOW = datetime(2030, 3, 15, 12, 0, tzinfo=timezone.utc)


async def _log_visits(db, user_id, *ages: timedelta):
    db.add_all([UserActivity(user_id=user_id, activity_time=NOW - age) for age in ages])
    await db.commit()


async def test_record_visit_updates_counters_and_log(test_db, seed_user):
    user_id = seed_user.id
    user = await ActivityTracker(test_db).record_visit(user_id, at=NOW)
    assert user.visit_count == 1
    assert user.last_visit.replace(tzinfo=timezone.utc) == NOW

    await ActivityTracker(test_db).record_visit(user_id, at=NOW + timedelta(hours=1))
    logged = await test_db.scalar(
        select(func.count(UserActivity.id)).where(UserActivity.user_id == user_id),
    )
    assert logged == 2


async def test_record_visit_for_unknown_user_writes_nothing(test_db):
    with pytest.raises(ResourceNotFoundError):
        await ActivityTracker(test_db).record_visit(uuid4(), at=NOW)
    assert await test_db.scalar(select(func.count(UserActivity.id))) == 0


async def test_counts_split_by_window(test_db, seed_user):
    await _log_visits(
        test_db, seed_user.id,
        timedelta(days=1), timedelta(days=6),
        timedelta(days=10), timedelta(days=27),
        timedelta(days=40),
    )
    counts = await ActivityTracker(test_db).counts(seed_user.id, now=NOW)
    assert counts.weekly == 2
    assert counts.monthly == 4


async def test_counts_ignore_other_users(test_db, seed_user, make_user):
    other = await make_user("other@example.com")
    await _log_visits(test_db, other.id, timedelta(days=1))
    counts = await ActivityTracker(test_db).counts(seed_user.id, now=NOW)
    assert (counts.weekly, counts.monthly) == (0, 0)


async def test_full_info_includes_oldest_referral_code(test_db, seed_user):
    test_db.add(ReferralCode(
        user_id=seed_user.id, code="FIRST", created_at=NOW - timedelta(days=2),
    ))
    test_db.add(ReferralCode(
        user_id=seed_user.id, code="SECOND", created_at=NOW - timedelta(days=1),
    ))
    await test_db.commit()
    await _log_visits(test_db, seed_user.id, timedelta(days=3))

    info = await UserService(test_db).full_info(seed_user.id, now=NOW)
    assert info.referral_code == "FIRST"
    assert info.activity.weekly == 1
    assert info.activity.monthly == 1


async def test_full_info_for_unknown_user_is_not_found(test_db):
    with pytest.raises(ResourceNotFoundError):
        await UserService(test_db).full_info(uuid4())


async def test_visit_route_then_full_info(client, seed_user):
    res = await client.post(f"/api/v1/users/{seed_user.id}/visits")
    assert res.status_code == 201
    assert res.json()["visit_count"] == 1

    res = await client.get(f"/api/v1/users/{seed_user.id}/full-info")
    assert res.status_code == 200
    body = res.json()
    assert body["email"] == "alice@example.com"
    assert body["visit_count"] == 1
    assert body["referral_code"] is None
    assert body["weekly_activity"] == 1
    assert body["monthly_activity"] == 1


async def test_full_info_route_unknown_user_is_404(client):
    res = await client.get(f"/api/v1/users/{uuid4()}/full-info")
    assert res.status_code == 404


async def test_visit_route_unknown_user_is_404(client):
    res = await client.post(f"/api/v1/users/{uuid4()}/visits")
    assert res.status_code == 404
