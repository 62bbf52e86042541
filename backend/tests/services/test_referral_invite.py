"""Referral Invite Coordinator: verifies invitee creation and the inviter credit.

Invariants:
    - Success: PENDING invitee exists, inviter gains bonus and one referral
    - Duplicate e-mail: AlreadyExistsError and the inviter is unchanged
    - Malformed e-mail: BadRequestError before any write
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from reward_tracker.core.domain_types import UserStatus
from reward_tracker.core.errors import (
    AlreadyExistsError, BadRequestError, ResourceNotFoundError, ValidationError,
)
from reward_tracker.models import Invite, User
from reward_tracker.services.referral_invite import ReferralInviteCoordinator
from reward_tracker.services.user_service import UserService


async def _user_count(db) -> int:
    return await db.scalar(select(func.count(User.id)))


async def test_invite_creates_pending_user_and_credits_inviter(test_db, seed_user):
    inviter_id = seed_user.id
    await ReferralInviteCoordinator(test_db).invite(inviter_id, "bob@example.com")

    await test_db.refresh(seed_user)
    assert seed_user.balance == 60.0
    assert seed_user.referrals == 1

    invitee = await test_db.scalar(select(User).where(User.email == "bob@example.com"))
    assert invitee.status == UserStatus.PENDING.value
    assert invitee.username == "bob"
    assert invitee.balance == 0.0

    invite = await test_db.scalar(select(Invite).where(Invite.inviter_id == inviter_id))
    assert invite.invitee_id == invitee.id
    assert invite.bonus == 10.0


async def test_configured_bonus_is_used(test_db, seed_user):
    await ReferralInviteCoordinator(test_db, bonus=2.5).invite(
        seed_user.id, "carol@example.com",
    )
    await test_db.refresh(seed_user)
    assert seed_user.balance == 52.5


async def test_existing_email_is_rejected_without_credit(test_db, seed_user, make_user):
    await make_user("taken@example.com")
    inviter_id = seed_user.id
    count_before = await _user_count(test_db)

    with pytest.raises(AlreadyExistsError):
        await ReferralInviteCoordinator(test_db).invite(inviter_id, "taken@example.com")

    await test_db.refresh(seed_user)
    assert seed_user.balance == 50.0
    assert seed_user.referrals == 0
    assert await _user_count(test_db) == count_before


async def test_second_invite_for_same_email_is_rejected(test_db, seed_user):
    coordinator = ReferralInviteCoordinator(test_db)
    await coordinator.invite(seed_user.id, "dave@example.com")
    with pytest.raises(AlreadyExistsError):
        await coordinator.invite(seed_user.id, "dave@example.com")
    await test_db.refresh(seed_user)
    assert seed_user.referrals == 1


async def test_second_inviter_for_same_email_is_rejected(test_db, seed_user, make_user):
    other = await make_user("bob@example.com")
    first_id, second_id = seed_user.id, other.id
    await ReferralInviteCoordinator(test_db).invite(first_id, "dana@example.com")

    with pytest.raises(AlreadyExistsError):
        await ReferralInviteCoordinator(test_db).invite(second_id, "dana@example.com")

    await test_db.refresh(seed_user)
    await test_db.refresh(other)
    assert (seed_user.balance, seed_user.referrals) == (60.0, 1)
    assert (other.balance, other.referrals) == (0.0, 0)
    invites = (await test_db.scalars(select(Invite))).all()
    assert [i.inviter_id for i in invites] == [first_id]


async def test_domain_case_does_not_bypass_duplicate_check(test_db, seed_user):
    await UserService(test_db).create_user(username="gina", email="gina@EXAMPLE.com")
    inviter_id = seed_user.id

    with pytest.raises(AlreadyExistsError):
        await ReferralInviteCoordinator(test_db).invite(inviter_id, "gina@example.com")

    await test_db.refresh(seed_user)
    assert seed_user.referrals == 0
    stored = (await test_db.scalars(select(User.email).where(User.username == "gina"))).all()
    assert stored == ["gina@example.com"]


async def test_malformed_email_is_bad_request(test_db, seed_user):
    with pytest.raises(BadRequestError, match="invalid email format"):
        await ReferralInviteCoordinator(test_db).invite(seed_user.id, "not-an-email")


async def test_missing_inviter_id_is_bad_request(test_db):
    with pytest.raises(BadRequestError):
        await ReferralInviteCoordinator(test_db).invite(None, "eve@example.com")


async def test_unknown_inviter_is_not_found(test_db):
    with pytest.raises(ResourceNotFoundError):
        await ReferralInviteCoordinator(test_db).invite(uuid4(), "eve@example.com")
    assert await test_db.scalar(select(User).where(User.email == "eve@example.com")) is None


async def test_pending_inviter_cannot_invite(test_db, make_user):
    pending = await make_user("pending@example.com", status=UserStatus.PENDING)
    with pytest.raises(ValidationError, match="pending"):
        await ReferralInviteCoordinator(test_db).invite(pending.id, "frank@example.com")
