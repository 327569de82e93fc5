"""Notification side effects of create/update, and message composition."""

from datetime import date, datetime

from nctrack.config import Settings
from nctrack.notifications import Notifier, is_valid_email
from nctrack.schemas.nonconformance import NCRead


async def test_create_with_assignee_sends_assignment(client, make_nc, notifier):
    nc = await make_nc(responsible_person="Ana", responsible_person_email="ana@plant.example")
    assert len(notifier.sent) == 1
    msg = notifier.sent[0]
    assert msg["To"] == "ana@plant.example"
    assert msg["Subject"] == f"NC #{nc['id']} Assigned to You: {nc['title']}"


async def test_create_without_email_sends_nothing(make_nc, notifier):
    await make_nc(responsible_person="Ana")
    assert notifier.sent == []


async def test_assigning_email_on_update_sends_one_assignment(client, make_nc, notifier):
    nc = await make_nc()
    resp = await client.put(
        f"/api/ncs/{nc['id']}",
        json={"responsible_person": "A", "responsible_person_email": "a@b.com"},
    )
    assert resp.status_code == 200
    assert len(notifier.sent) == 1
    assert "Assigned to You" in notifier.sent[0]["Subject"]


async def test_transport_failure_does_not_fail_update(client, make_nc, notifier):
    nc = await make_nc()
    notifier.fail = True
    resp = await client.put(
        f"/api/ncs/{nc['id']}",
        json={"responsible_person": "A", "responsible_person_email": "a@b.com"},
    )
    assert resp.status_code == 200
    assert resp.json()["responsible_person_email"] == "a@b.com"
    assert len(notifier.sent) == 1

    stored = (await client.get(f"/api/ncs/{nc['id']}")).json()
    assert stored["responsible_person"] == "A"


async def test_status_change_notifies_assignee(client, make_nc, notifier):
    nc = await make_nc(responsible_person="Ana", responsible_person_email="ana@plant.example")
    notifier.sent.clear()

    await client.put(f"/api/ncs/{nc['id']}", json={"status": "Under Investigation"})
    assert len(notifier.sent) == 1
    assert notifier.sent[0]["Subject"] == f"NC #{nc['id']} Status Updated: Under Investigation"

    # Same status again: no email
    await client.put(f"/api/ncs/{nc['id']}", json={"status": "Under Investigation"})
    assert len(notifier.sent) == 1


async def test_reassignment_and_status_change_both_fire(client, make_nc, notifier):
    nc = await make_nc(responsible_person="Ana", responsible_person_email="ana@plant.example")
    notifier.sent.clear()

    await client.put(
        f"/api/ncs/{nc['id']}",
        json={
            "responsible_person": "Bo",
            "responsible_person_email": "bo@plant.example",
            "status": "Action Required",
        },
    )
    subjects = sorted(m["Subject"] for m in notifier.sent)
    assert len(subjects) == 2
    assert all(m["To"] == "bo@plant.example" for m in notifier.sent)
    assert any("Assigned to You" in s for s in subjects)
    assert any("Status Updated: Action Required" in s for s in subjects)


async def test_invalid_email_is_not_delivered(client, make_nc, notifier):
    resp = await client.post(
        "/api/ncs",
        json={
            "title": "t",
            "description": "d",
            "date_reported": "2024-01-01",
            "status": "Open",
            "severity": "Low",
            "responsible_person": "Ana",
            "responsible_person_email": "not-an-email",
        },
    )
    assert resp.status_code == 201
    assert notifier.sent == []


def test_is_valid_email():
    assert is_valid_email("a@b.com")
    assert not is_valid_email("a@b")
    assert not is_valid_email("a b@c.com")
    assert not is_valid_email(None)


def test_messages_escape_user_text():
    notifier = Notifier(Settings(app_base_url="http://nc.test/"))
    nc = NCRead(
        id=7,
        type="NC",
        title="<script>x</script>",
        description="Scrap & rework",
        date_reported=date(2024, 1, 1),
        status="Closed",
        severity="Critical",
        needs_effectiveness_check=True,
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 1, 2),
    )
    msg = notifier.build_status_change_message(nc, "Ana", "ana@plant.example", "Open")
    body = msg.get_body(preferencelist=("html",)).get_content()
    assert "&lt;script&gt;" in body
    assert "Scrap" not in body  # description is only in assignment emails
    assert "http://nc.test/ncs/7" in body
    assert "Previous Status:</strong> Open" in body

    msg = notifier.build_assignment_message(nc, "Ana", "ana@plant.example")
    body = msg.get_body(preferencelist=("html",)).get_content()
    assert "Scrap &amp; rework" in body
    assert "#ef4444" in body
