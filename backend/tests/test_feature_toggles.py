from conftest import API

from qa_ops.core.constants import ProductLine
from qa_ops.modules.feature_toggles.bootstrap import ensure_default_toggles
from qa_ops.modules.feature_toggles.service import FeatureTogglesService


def test_startup_creates_disabled_well_known_toggles(client, viewer_headers):
    toggles = client.get(f"{API}/feature-toggles", headers=viewer_headers).json()
    assert {(t["product_line"], t["key"]) for t in toggles} == {
        ("mothership", "branch_recreation_paused"),
        ("mothership", "gtg_freeze"),
        ("speedboat", "branch_recreation_paused"),
        ("speedboat", "gtg_freeze"),
    }
    assert not any(t["enabled"] for t in toggles)


def test_bootstrap_does_not_touch_existing_rows(db):
    assert ensure_default_toggles(db) == 4
    svc = FeatureTogglesService(db)
    toggle = next(t for t in svc.list_toggles(ProductLine.SPEEDBOAT) if t.key == "gtg_freeze")
    toggle.enabled = True
    db.commit()

    assert ensure_default_toggles(db) == 0
    assert svc.is_enabled("gtg_freeze", ProductLine.SPEEDBOAT) is True
    assert svc.is_enabled("gtg_freeze", "mothership") is False
    assert svc.is_enabled("does_not_exist", "mothership") is False


def test_create_update_delete_toggle(client, qa_headers, admin_headers):
    created = client.post(
        f"{API}/feature-toggles",
        json={"key": "new_checkout", "product_line": "speedboat", "enabled": True},
        headers=qa_headers,
    )
    assert created.status_code == 201
    toggle_id = created.json()["id"]

    duplicate = client.post(
        f"{API}/feature-toggles",
        json={"key": "new_checkout", "product_line": "speedboat"},
        headers=qa_headers,
    )
    assert duplicate.status_code == 409

    # Same key on the other product line is a separate toggle
    other = client.post(
        f"{API}/feature-toggles",
        json={"key": "new_checkout", "product_line": "mothership"},
        headers=qa_headers,
    )
    assert other.status_code == 201

    patched = client.patch(
        f"{API}/feature-toggles/{toggle_id}", json={"enabled": False}, headers=qa_headers
    )
    assert patched.json()["enabled"] is False

    assert client.delete(f"{API}/feature-toggles/{toggle_id}", headers=qa_headers).status_code == 403
    assert client.delete(f"{API}/feature-toggles/{toggle_id}", headers=admin_headers).status_code == 204
    assert client.patch(
        f"{API}/feature-toggles/{toggle_id}", json={"enabled": True}, headers=qa_headers
    ).status_code == 404


def test_filter_and_validation(client, qa_headers):
    speedboat = client.get(
        f"{API}/feature-toggles", params={"product_line": "speedboat"}, headers=qa_headers
    ).json()
    assert {t["product_line"] for t in speedboat} == {"speedboat"}

    bad = client.post(
        f"{API}/feature-toggles",
        json={"key": "x", "product_line": "rowboat"},
        headers=qa_headers,
    )
    assert bad.status_code == 422


def test_viewer_cannot_create_toggle(client, viewer_headers):
    response = client.post(
        f"{API}/feature-toggles",
        json={"key": "nope", "product_line": "mothership"},
        headers=viewer_headers,
    )
    assert response.status_code == 403
