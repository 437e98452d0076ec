from __future__ import annotations


def test_collaborator_endpoints(client, login, make_user, make_event):
    make_user("owner")
    make_user("helper")
    event = make_event("owner")
    login(client, "owner")

    resp = client.post(f"/api/events/{event.id}/collaborators", json={"userId": "helper", "permissions": ["checkin"]})
    assert resp.status_code == 201
    assert resp.get_json()["permissions"] == ["view", "checkin"]

    resp = client.get(f"/api/events/{event.id}/collaborators")
    assert [c["userId"] for c in resp.get_json()] == ["helper"]

    resp = client.patch(f"/api/events/{event.id}/collaborators/helper", json={"permissions": ["edit_event"]})
    assert resp.status_code == 200
    assert resp.get_json()["permissions"] == ["view", "edit_event"]

    assert client.delete(f"/api/events/{event.id}/collaborators/helper").status_code == 204
    assert client.get(f"/api/events/{event.id}/collaborators").get_json() == []


def test_collaborator_cannot_invite_others(client, login, make_user, make_event, container):
    make_user("owner")
    make_user("helper")
    make_user("other")
    event = make_event("owner")
    container.collaborator_service.add(event.id, "owner", "helper")
    login(client, "helper")

    resp = client.post(f"/api/events/{event.id}/collaborators", json={"userId": "other"})

    assert resp.status_code == 403
