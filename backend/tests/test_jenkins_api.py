from qa_ops.core.constants import BuildResult
from qa_ops.modules.jenkins.client import get_jenkins_client
from qa_ops.modules.jenkins.models import JenkinsJob

from conftest import API, FakeJenkinsClient, build


def _track(client, headers, name, product_line="speedboat", **extra):
    response = client.post(
        f"{API}/jenkins/jobs",
        json={"name": name, "product_line": product_line, **extra},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_track_job_and_reject_duplicates(client, qa_headers, viewer_headers):
    job = _track(client, qa_headers, "/qa/speedboat-e2e/")
    assert job["name"] == "qa/speedboat-e2e"
    assert job["gtg_required"] is True

    duplicate = client.post(
        f"{API}/jenkins/jobs",
        json={"name": "qa/speedboat-e2e", "product_line": "speedboat"},
        headers=qa_headers,
    )
    assert duplicate.status_code == 409

    assert client.post(
        f"{API}/jenkins/jobs",
        json={"name": "other", "product_line": "speedboat"},
        headers=viewer_headers,
    ).status_code == 403

    listed = client.get(f"{API}/jenkins/jobs", params={"product_line": "mothership"}, headers=viewer_headers)
    assert listed.json() == []


def test_collect_inserts_then_updates_builds(app, client, qa_headers, viewer_headers):
    job = _track(client, qa_headers, "e2e")
    fake = FakeJenkinsClient({"e2e": [build(3, BuildResult.FAILURE), build(2), build(1)]})
    app.dependency_overrides[get_jenkins_client] = lambda: fake

    first = client.post(f"{API}/jenkins/jobs/{job['id']}/collect", headers=qa_headers)
    assert first.status_code == 200
    assert first.json() == {"job_id": job["id"], "name": "e2e", "new_builds": 3, "updated_builds": 0, "error": None}

    # Build 3 was re-run with a new result, build 4 is new
    fake.builds["e2e"] = [build(4), build(3, BuildResult.SUCCESS), build(2), build(1)]
    second = client.post(f"{API}/jenkins/jobs/{job['id']}/collect", headers=qa_headers).json()
    assert (second["new_builds"], second["updated_builds"]) == (1, 1)

    builds = client.get(f"{API}/jenkins/jobs/{job['id']}/builds", params={"limit": 3}, headers=viewer_headers).json()
    assert [b["number"] for b in builds] == [4, 3, 2]
    assert builds[1]["result"] == "SUCCESS"

    refreshed = client.get(f"{API}/jenkins/jobs", headers=viewer_headers).json()[0]
    assert refreshed["last_collected_at"] is not None
    assert refreshed["last_error"] is None


def test_collect_failure_is_recorded_and_reported(app, client, qa_headers, db):
    job = _track(client, qa_headers, "ghost")
    app.dependency_overrides[get_jenkins_client] = lambda: FakeJenkinsClient(failing={"ghost"})

    response = client.post(f"{API}/jenkins/jobs/{job['id']}/collect", headers=qa_headers)
    assert response.status_code == 502
    assert response.json()["code"] == "upstream_error"

    db.expire_all()
    assert "not found" in db.get(JenkinsJob, job["id"]).last_error


def test_collect_all_continues_past_failures(app, client, qa_headers):
    _track(client, qa_headers, "good")
    _track(client, qa_headers, "bad", product_line="mothership")
    _track(client, qa_headers, "disabled", is_active=False)
    fake = FakeJenkinsClient({"good": [build(1)]}, failing={"bad"})
    app.dependency_overrides[get_jenkins_client] = lambda: fake

    results = client.post(f"{API}/jenkins/collect", headers=qa_headers).json()

    by_name = {r["name"]: r for r in results}
    assert set(by_name) == {"good", "bad"}
    assert by_name["good"]["new_builds"] == 1
    assert "not found" in by_name["bad"]["error"]
    assert [name for name, _ in fake.calls] == ["bad", "good"]


def test_collect_without_jenkins_configured(client, qa_headers):
    job = _track(client, qa_headers, "e2e")
    response = client.post(f"{API}/jenkins/jobs/{job['id']}/collect", headers=qa_headers)
    assert response.status_code == 503
    assert response.json()["code"] == "not_configured"


def test_metrics_report_aggregates_per_product_line(app, client, qa_headers, viewer_headers):
    green = _track(client, qa_headers, "green")
    red = _track(client, qa_headers, "red")
    _track(client, qa_headers, "legacy", product_line="mothership")
    fake = FakeJenkinsClient(
        {
            "green": [build(2), build(1)],
            "red": [build(2, BuildResult.FAILURE), build(1)],
            "legacy": [build(1, BuildResult.ABORTED)],
        }
    )
    app.dependency_overrides[get_jenkins_client] = lambda: fake
    client.post(f"{API}/jenkins/collect", headers=qa_headers)

    single = client.get(f"{API}/jenkins/jobs/{red['id']}/metrics", headers=viewer_headers).json()
    assert single["pass_rate"] == 0.5
    assert single["last_result"] == "FAILURE"

    report = client.get(f"{API}/jenkins/metrics", params={"window": 5}, headers=viewer_headers).json()
    assert report["window"] == 5
    assert {j["name"] for j in report["jobs"]} == {"green", "red", "legacy"}
    lines = {line["product_line"]: line for line in report["product_lines"]}
    assert lines["speedboat"] == {
        "product_line": "speedboat",
        "job_count": 2,
        "failing_job_count": 1,
        "mean_pass_rate": 0.75,
    }
    assert lines["mothership"]["mean_pass_rate"] is None
    assert lines["mothership"]["failing_job_count"] == 1

    filtered = client.get(
        f"{API}/jenkins/metrics", params={"product_line": "mothership"}, headers=viewer_headers
    ).json()
    assert [j["name"] for j in filtered["jobs"]] == ["legacy"]
    assert green["id"] not in {j["job_id"] for j in filtered["jobs"]}


def test_delete_job_requires_admin(client, qa_headers, admin_headers):
    job = _track(client, qa_headers, "e2e")
    assert client.delete(f"{API}/jenkins/jobs/{job['id']}", headers=qa_headers).status_code == 403
    assert client.delete(f"{API}/jenkins/jobs/{job['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"{API}/jenkins/jobs/{job['id']}/builds", headers=admin_headers).status_code == 404
