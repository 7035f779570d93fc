from __future__ import annotations
import struct
import uuid
from datetime import datetime, timedelta, timezone
import pytest

from showdown.config import settings
from showdown.models.submission import QUALIFIED, PENDING
from showdown.models.user import User
from showdown.services.roles import grant_role, ADMIN


def glb(payload: bytes = b"\x00" * 8) -> bytes:
    return b"glTF" + struct.pack("<II", 2, 12 + len(payload)) + payload


PART = {"part_name": "Ducktail", "part_type": "spoiler", "car_model": "911", "description": "carbon"}


async def signup(client, name: str | None = None) -> tuple[uuid.UUID, dict]:
    name = name or f"u_{uuid.uuid4().hex[:8]}"
    email = f"{name}@example.com"
    r = await client.post("/auth/register", json={"email": email, "username": name, "password": "supersecret"})
    assert r.status_code == 201, r.text
    tokens = (await client.post("/auth/login", json={"email": email, "password": "supersecret"})).json()
    return uuid.UUID(tokens["user_id"]), {"Authorization": f"Bearer {tokens['access']}"}


async def upload(client, headers, filename="ducktail.glb", data=None, **fields):
    form = {**PART, **fields}
    return await client.post(
        "/parts", data=form, files={"file": (filename, data or glb(), "application/octet-stream")}, headers=headers,
    )


@pytest.mark.asyncio
async def test_upload_creates_pending_entry(client, competition_running, stored_objects, monkeypatch):
    monkeypatch.setattr(settings, "votes_required", 3)
    _, headers = await signup(client)
    r = await upload(client, headers)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == PENDING
    assert body["week_number"] == 1
    assert body["anonymous_id"].startswith("ENTRY_")
    assert (body["times_shown"], body["thumbs_up"], body["thumbs_down"], body["total_votes"]) == (0, 0, 0, 0)
    assert body["votes_completed"] == 0
    assert body["votes_required"] == 3
    assert body["file_path"].startswith("https://cdn.test/week1/")
    assert len(stored_objects) == 1

    mine = await client.get("/parts/mine", headers=headers)
    assert [s["id"] for s in mine.json()] == [body["id"]]


@pytest.mark.asyncio
@pytest.mark.parametrize("offset_days,message", [
    (-3, "Competition has not started yet!"),
    (80, "Competition has ended!"),
])
async def test_upload_outside_window_is_refused(client, monkeypatch, stored_objects, offset_days, message):
    start = datetime.now(timezone.utc).date() - timedelta(days=offset_days)
    monkeypatch.setattr(settings, "competition_start_date", start)
    _, headers = await signup(client)
    r = await upload(client, headers)
    assert r.status_code == 400
    assert r.json()["detail"] == message
    assert stored_objects == {}


@pytest.mark.asyncio
async def test_upload_validation(client, competition_running, stored_objects):
    _, headers = await signup(client)

    r = await upload(client, headers, part_name="")
    assert r.status_code == 400
    assert "part_name" in r.json()["detail"]

    r = await upload(client, headers, filename="ducktail.obj")
    assert r.status_code == 400
    assert r.json()["detail"] == "Only .glb and .gltf files are allowed!"

    r = await client.post("/parts", data=PART, headers=headers)
    assert r.status_code == 400
    assert stored_objects == {}


@pytest.mark.asyncio
async def test_upload_requires_token(client, competition_running):
    r = await client.post("/parts", data=PART, files={"file": ("a.glb", glb(), "application/octet-stream")})
    assert r.status_code in (401, 403)


@pytest.mark.asyncio
async def test_vote_until_qualified(client, competition_running, monkeypatch):
    monkeypatch.setattr(settings, "votes_required", 2)
    alice, alice_h = await signup(client, "alice")
    _, bob_h = await signup(client, "bob")
    _, carol_h = await signup(client, "carol")
    await upload(client, alice_h)
    bob_entry = (await upload(client, bob_h)).json()["id"]
    carol_entry = (await upload(client, carol_h)).json()["id"]

    batch = (await client.get(f"/voting/batch/{alice}", headers=alice_h)).json()["entries"]
    assert sorted(e["id"] for e in batch) == sorted([bob_entry, carol_entry])
    assert all(e["times_shown"] == 1 for e in batch)
    assert all("user_name" not in e and "email" not in e for e in batch)

    r = await client.post("/voting/vote", json={"voter_id": str(alice), "submission_id": bob_entry, "value": "up"}, headers=alice_h)
    assert r.status_code == 200
    assert r.json() == {
        "recorded": True, "message": "Vote recorded", "votes_completed": 1, "votes_required": 2, "qualified": False,
    }

    again = await client.post("/voting/vote", json={"voter_id": str(alice), "submission_id": bob_entry, "value": "down"}, headers=alice_h)
    assert again.json()["recorded"] is False
    assert again.json()["message"] == "Already voted"
    assert again.json()["votes_completed"] == 1

    r = await client.post("/voting/vote", json={"voter_id": str(alice), "submission_id": carol_entry, "value": "down"}, headers=alice_h)
    assert r.json()["qualified"] is True
    assert r.json()["message"] == "YOUR ENTRY IS NOW QUALIFIED TO WIN!"

    status = (await client.get(f"/parts/status/{alice}", headers=alice_h)).json()
    assert status["submission"]["status"] == QUALIFIED
    assert status["votes_completed"] == 2
    assert status["votes_required"] == 2

    gallery = {s["id"]: s for s in (await client.get("/parts/gallery")).json()}
    assert (gallery[bob_entry]["thumbs_up"], gallery[bob_entry]["total_votes"]) == (1, 1)
    assert (gallery[carol_entry]["thumbs_down"], gallery[carol_entry]["approval_rating"]) == (1, 0.0)


@pytest.mark.asyncio
async def test_vote_guards(client, competition_running):
    alice, alice_h = await signup(client)
    bob, bob_h = await signup(client)
    own = (await upload(client, alice_h)).json()["id"]

    r = await client.post("/voting/vote", json={"voter_id": str(alice), "submission_id": own, "value": "up"}, headers=alice_h)
    assert r.status_code == 400
    assert r.json()["detail"] == "You cannot vote on your own submission"

    r = await client.post("/voting/vote", json={"voter_id": str(alice), "submission_id": own, "value": "up"}, headers=bob_h)
    assert r.status_code == 403

    r = await client.get(f"/voting/batch/{alice}", headers=bob_h)
    assert r.status_code == 403

    r = await client.post("/voting/vote", json={"voter_id": str(bob), "submission_id": str(uuid.uuid4()), "value": "up"}, headers=bob_h)
    assert r.status_code == 404

    r = await client.post("/voting/vote", json={"voter_id": str(bob), "submission_id": own, "value": "meh"}, headers=bob_h)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_weekly_winners_endpoint(client, session, make_user, make_submission):
    a = await make_submission(await make_user(), status=QUALIFIED, thumbs_up=4, thumbs_down=1)
    b = await make_submission(await make_user(), status=QUALIFIED, thumbs_up=2)
    await make_submission(await make_user(), status=PENDING, thumbs_up=9)
    await session.commit()

    r = await client.get("/winners/week/1")
    assert r.status_code == 200
    body = r.json()
    assert body["minimum_votes"] == 1
    assert [w["id"] for w in body["winners"]] == [str(b.id), str(a.id)]
    assert (await client.get("/winners/week/2")).json()["winners"] == []


@pytest.mark.asyncio
async def test_admin_promotes_winner(client, session, make_user, make_submission):
    admin_id, admin_h = await signup(client, "boss")
    entry = await make_submission(await make_user("racer"), status=QUALIFIED, thumbs_up=3)
    await session.commit()

    assert (await client.get("/admin/submissions", headers=admin_h)).status_code == 403

    await grant_role(session, admin_id, ADMIN)
    await session.commit()

    listing = (await client.get("/admin/submissions", headers=admin_h)).json()
    assert [(s["id"], s["username"]) for s in listing] == [(str(entry.id), "racer")]
    assert (await client.get("/auth/me", headers=admin_h)).json()["is_admin"] is True

    r = await client.post(f"/admin/winners/{entry.id}", headers=admin_h)
    assert r.status_code == 200
    assert (r.json()["status"], r.json()["is_winner"]) == ("WINNER", True)
    again = await client.post(f"/admin/winners/{entry.id}", headers=admin_h)
    assert again.json()["status"] == "WINNER"

    winners = (await client.get("/winners")).json()
    assert [(w["id"], w["user_name"]) for w in winners] == [(str(entry.id), "racer")]

    assert (await client.post(f"/admin/winners/{uuid.uuid4()}", headers=admin_h)).status_code == 404


@pytest.mark.asyncio
async def test_competition_stats(client, session, competition_running, make_user, make_submission):
    await make_submission(await make_user(), week=1, status=QUALIFIED)
    await make_submission(await make_user(), week=1)
    await make_submission(await make_user(), week=2)
    await session.commit()

    stats = (await client.get("/competition/stats")).json()
    assert stats == {
        "current_week": 1,
        "total_submissions": 3,
        "weekly_submissions": 2,
        "total_winners": 0,
        "qualified_entries": 1,
        "competition_status": "Active",
    }


@pytest.mark.asyncio
async def test_qualified_email_goes_to_the_flipped_entry(client, session, make_user, make_submission, monkeypatch):
    monkeypatch.setattr(settings, "votes_required", 1)
    notified = []

    async def capture(s):
        notified.append(s.id)
        return True

    monkeypatch.setattr("showdown.routes.voting.notify_qualified", capture)
    voter_id, headers = await signup(client)
    voter = await session.get(User, voter_id)
    older = await make_submission(voter)
    await make_submission(voter, status=QUALIFIED)
    target = await make_submission(await make_user())
    await session.commit()

    r = await client.post("/voting/vote", json={"voter_id": str(voter_id), "submission_id": str(target.id), "value": "up"}, headers=headers)
    assert r.json()["qualified"] is True
    assert notified == [older.id]
