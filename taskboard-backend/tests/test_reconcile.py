# File: tests/test_reconcile.py

from datetime import datetime, timedelta, timezone

from sqlalchemy import insert, update

from app.models.team import Team, team_members
from app.models.user import User
from app.services import team_service


def test_consistent_data_is_left_alone(db, make_user):
    u = make_user("Uma")
    team_service.create_team(db, name="Eng", member_ids=[u.id], creator_id=u.id)

    report = team_service.reconcile_memberships(db)

    assert not report.changed


def test_repairs_back_references(db, make_user):
    listed, stray = make_user("Uma"), make_user("Vic")
    eng = team_service.create_team(db, name="Eng", member_ids=[listed.id], creator_id=listed.id)

    # out-of-band writes: one reference lost, one pointing at a team that doesn't list the user
    db.execute(update(User).where(User.id == listed.id).values(team_id=None))
    db.execute(update(User).where(User.id == stray.id).values(team_id=eng.id))
    db.commit()

    report = team_service.reconcile_memberships(db)

    assert report.relinked == [listed.id]
    assert report.cleared == [stray.id]
    db.expire_all()
    assert db.get(User, listed.id).team_id == eng.id
    assert db.get(User, stray.id).team_id is None


def test_user_on_two_lists_keeps_most_recent_team(db, make_user):
    u = make_user("Uma")
    eng = team_service.create_team(db, name="Eng", member_ids=[u.id], creator_id=u.id)
    ops = team_service.create_team(db, name="Ops", member_ids=[], creator_id=u.id)

    db.execute(insert(team_members).values(team_id=ops.id, user_id=u.id))
    now = datetime.now(timezone.utc)
    db.execute(update(Team).where(Team.id == eng.id).values(updated_at=now - timedelta(days=1)))
    db.execute(update(Team).where(Team.id == ops.id).values(updated_at=now))
    db.commit()

    report = team_service.reconcile_memberships(db)

    assert report.dropped == [(u.id, eng.id)]
    assert report.relinked == [u.id]
    db.expire_all()
    assert db.get(Team, eng.id).member_ids == set()
    assert db.get(Team, ops.id).member_ids == {u.id}
    assert db.get(User, u.id).team_id == ops.id
