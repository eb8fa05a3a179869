from datetime import datetime, timedelta, timezone

import pytest

from qa_ops.core.constants import BuildResult, GtgStatus, ProductLine
from qa_ops.core.errors import InvalidOperationError, NotFoundError
from qa_ops.modules.feature_toggles.schemas import FeatureToggleCreate
from qa_ops.modules.feature_toggles.service import FeatureTogglesService
from qa_ops.modules.gtg.schemas import GtgOverrideRequest
from qa_ops.modules.gtg.service import GtgService, aggregate_status
from qa_ops.modules.jenkins.models import JenkinsBuild, JenkinsJob

from conftest import API


def _job(db, name, product_line="speedboat", results=(), hours=1.0, **extra):
    job = JenkinsJob(name=name, product_line=product_line, **extra)
    db.add(job)
    db.flush()
    now = datetime.now(timezone.utc)
    # results are newest first
    for offset, result in enumerate(results):
        db.add(
            JenkinsBuild(
                job_id=job.id,
                number=len(results) - offset,
                result=result.value,
                duration_ms=1000,
                started_at=now - timedelta(hours=hours + offset),
            )
        )
    db.commit()
    return job


S, F = BuildResult.SUCCESS, BuildResult.FAILURE


def test_aggregate_status_precedence():
    assert aggregate_status([]) == GtgStatus.UNKNOWN
    assert aggregate_status([GtgStatus.GO, GtgStatus.GO]) == GtgStatus.GO
    assert aggregate_status([GtgStatus.GO, GtgStatus.UNKNOWN]) == GtgStatus.UNKNOWN
    assert aggregate_status([GtgStatus.UNKNOWN, GtgStatus.NO_GO]) == GtgStatus.NO_GO


def test_no_required_jobs_is_unknown(db):
    _job(db, "optional", results=(S,), gtg_required=False)
    _job(db, "retired", results=(F,), is_active=False)
    report = GtgService(db).evaluate(ProductLine.SPEEDBOAT)
    assert report.status == GtgStatus.UNKNOWN
    assert report.reasons == ["no required jobs tracked"]
    assert report.jobs == []
    assert report.label == "Speedboat"


def test_all_green_is_go(db):
    _job(db, "unit", results=(S, S, S))
    _job(db, "e2e", results=(S,) * 9 + (F,))
    report = GtgService(db).evaluate("speedboat")
    assert report.status == GtgStatus.GO
    assert report.reasons == []
    assert {j.name: j.status for j in report.jobs} == {"unit": GtgStatus.GO, "e2e": GtgStatus.GO}


def test_failing_last_build_is_no_go(db):
    _job(db, "unit", results=(S,))
    _job(db, "e2e", results=(F, S, S))
    report = GtgService(db).evaluate(ProductLine.SPEEDBOAT)
    assert report.status == GtgStatus.NO_GO
    assert report.reasons == ["e2e: last build #3 is FAILURE"]


def test_low_pass_rate_is_no_go(db):
    _job(db, "flaky", results=(S, F, S, F, S))
    report = GtgService(db).evaluate(ProductLine.SPEEDBOAT)
    assert report.status == GtgStatus.NO_GO
    assert "pass rate 60% below 90%" in report.reasons[0]


def test_stale_or_empty_jobs_are_unknown(db):
    _job(db, "old", results=(S,), hours=72)
    _job(db, "never-ran")
    report = GtgService(db).evaluate(ProductLine.SPEEDBOAT)
    assert report.status == GtgStatus.UNKNOWN
    assert sorted(report.reasons) == ["never-ran: no builds collected", "old: last build is stale"]


def test_product_lines_are_evaluated_independently(db):
    _job(db, "speedboat-e2e", results=(F,))
    _job(db, "mothership-e2e", product_line="mothership", results=(S,))
    reports = {r.product_line: r.status for r in GtgService(db).evaluate_all()}
    assert reports == {ProductLine.MOTHERSHIP: GtgStatus.GO, ProductLine.SPEEDBOAT: GtgStatus.NO_GO}


def test_freeze_beats_override_and_green_jobs(db):
    _job(db, "unit", results=(S,))
    service = GtgService(db)
    service.set_override(ProductLine.SPEEDBOAT, GtgOverrideRequest(status="go", reason="hotfix"), set_by="lead@example.com")
    FeatureTogglesService(db).create_toggle(
        FeatureToggleCreate(key="gtg_freeze", product_line=ProductLine.SPEEDBOAT, enabled=True)
    )
    report = service.evaluate(ProductLine.SPEEDBOAT)
    assert report.status == GtgStatus.NO_GO
    assert report.reasons == ["release freeze active"]
    assert report.jobs[0].status == GtgStatus.GO
    assert report.override is not None


def test_override_applies_until_it_expires(db):
    _job(db, "e2e", results=(F,))
    service = GtgService(db)
    now = datetime.now(timezone.utc)
    service.set_override(
        "speedboat",
        GtgOverrideRequest(status="go", reason="known infra flake", expires_at=now + timedelta(hours=2)),
        set_by="lead@example.com",
        now=now,
    )

    active = service.evaluate("speedboat", now=now + timedelta(hours=1))
    assert active.status == GtgStatus.GO
    assert active.reasons == ["override by lead@example.com: known infra flake"]

    expired = service.evaluate("speedboat", now=now + timedelta(hours=3))
    assert expired.status == GtgStatus.NO_GO
    assert expired.override is None


def test_override_validation(db):
    service = GtgService(db)
    with pytest.raises(InvalidOperationError):
        service.set_override(
            "speedboat",
            GtgOverrideRequest(status="no_go", reason="x", expires_at=datetime(2000, 1, 1, tzinfo=timezone.utc)),
            set_by="a@example.com",
        )
    with pytest.raises(NotFoundError):
        service.evaluate("rowboat")
    with pytest.raises(NotFoundError):
        service.clear_override("speedboat")


def test_gtg_api(client, qa_headers, viewer_headers):
    listed = client.get(f"{API}/gtg", headers=viewer_headers)
    assert listed.status_code == 200
    assert [r["product_line"] for r in listed.json()] == ["mothership", "speedboat"]

    assert client.get(f"{API}/gtg/rowboat", headers=viewer_headers).status_code == 404

    assert client.put(
        f"{API}/gtg/mothership/override", json={"status": "no_go", "reason": "db migration"}, headers=viewer_headers
    ).status_code == 403

    put = client.put(
        f"{API}/gtg/mothership/override", json={"status": "no_go", "reason": "db migration"}, headers=qa_headers
    )
    assert put.status_code == 200
    assert put.json()["set_by"] == "qa@example.com"

    report = client.get(f"{API}/gtg/mothership", headers=viewer_headers).json()
    assert report["status"] == "no_go"
    assert report["override"]["reason"] == "db migration"

    assert client.put(
        f"{API}/gtg/mothership/override", json={"status": "maybe", "reason": "?"}, headers=qa_headers
    ).status_code == 422

    assert client.delete(f"{API}/gtg/mothership/override", headers=qa_headers).status_code == 204
    assert client.delete(f"{API}/gtg/mothership/override", headers=qa_headers).status_code == 404
    assert client.get(f"{API}/gtg/mothership", headers=viewer_headers).json()["status"] == "unknown"
