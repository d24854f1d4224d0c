# tests/test_routers.py

"""
Tests for the HTTP routes.

Persistence is replaced with in-memory fakes; nothing reaches Supabase.
"""

import pytest

from app.routers import confidence as confidence_router
from app.routers import jobs as jobs_router


ORDER_RULES = [
    {"field": "order_id", "type": "exact"},
    {"field": "amount", "type": "exact", "tolerance": 0.01},
]

JOB = {"id": "job_1", "user_id": "user_1", "rules": {"matching": ORDER_RULES}}


@pytest.fixture
def fake_db(monkeypatch):
    """Patch the persistence helpers the routers use."""
    saved = {"executions": [], "matches": [], "exceptions": []}

    async def get_job(job_id, user_id):
        return JOB if job_id == "job_1" else None

    async def save_execution(execution):
        saved["executions"].append(execution)
        return execution

    async def save_matches(job_id, execution_id, matches):
        saved["matches"].extend(matches)
        return len(matches)

    async def save_exceptions(job_id, execution_id, exceptions):
        saved["exceptions"].extend(exceptions)
        return len(exceptions)

    async def get_match(match_id, user_id):
        if match_id != "m1":
            return None
        return {
            "id": "m1",
            "job_id": "job_1",
            "source_id": "12345",
            "target_id": "ch_1",
            "source_data": {"order_id": "12345", "amount": 99.99},
            "target_data": {"order_id": "12345", "amount": 99.99},
        }

    async def get_job_match_confidences(job_id):
        return [1.0, 0.9, 0.4]

    monkeypatch.setattr(jobs_router, "get_job", get_job)
    monkeypatch.setattr(jobs_router, "save_execution", save_execution)
    monkeypatch.setattr(jobs_router, "save_matches", save_matches)
    monkeypatch.setattr(jobs_router, "save_exceptions", save_exceptions)
    monkeypatch.setattr(confidence_router, "get_job", get_job)
    monkeypatch.setattr(confidence_router, "get_match", get_match)
    monkeypatch.setattr(confidence_router, "get_job_match_confidences", get_job_match_confidences)

    return saved


# ============================================
# Health
# ============================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_reports_thresholds(self, client):
        matching = client.get("/ready").json()["matching"]

        assert matching["match_threshold"] == 0.8


# ============================================
# Playground
# ============================================

class TestPlayground:
    """Simulation runs without auth or persistence."""

    def test_examples(self, client):
        body = client.get("/playground/examples").json()

        assert body["count"] == 2

    def test_adapters(self, client):
        ids = [a["id"] for a in client.get("/playground/adapters").json()["data"]]

        assert ids == ["stripe", "shopify", "quickbooks"]

    @pytest.mark.parametrize("example_id", ["shopify-stripe", "stripe-quickbooks"])
    def test_examples_fully_match(self, client, example_id):
        examples = client.get("/playground/examples").json()["data"]
        example = next(e for e in examples if e["id"] == example_id)

        response = client.post("/playground/reconcile", json={
            "source_adapter": example["source_adapter"],
            "source_data": example["source_data"],
            "target_adapter": example["target_adapter"],
            "target_data": example["target_data"],
            "rules": example["rules"],
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["summary"]["accuracy"] == 100
        assert data["summary"]["unmatched"] == 0
        assert data["exceptions"] == []
        assert all(m["confidence"] == 100 for m in data["matches"])
        assert data["visualization"]["confidence_distribution"]["high"] == len(data["matches"])

    def test_exception_result(self, client):
        response = client.post("/playground/reconcile", json={
            "source_adapter": "shopify",
            "source_data": [{"order_id": "12345", "amount": 99.99}],
            "target_adapter": "stripe",
            "target_data": [{"charge_id": "ch_1", "order_id": "12345", "amount": 99.50}],
            "rules": ORDER_RULES,
        })

        body = response.json()
        assert body["playground"] is True
        assert body["data"]["exceptions"] == [
            {"source_id": "12345", "reason": "Low confidence match (50.0%)", "severity": "low", "source_index": 0},
        ]

    def test_malformed_values_do_not_fail_the_run(self, client):
        response = client.post("/playground/reconcile", json={
            "source_adapter": "shopify",
            "source_data": [
                {"order_id": "12345", "amount": 10**400, "date": "2024-01-01T00:00:00+99:00"},
            ],
            "target_adapter": "stripe",
            "target_data": [
                {"charge_id": "ch_1", "order_id": "12345", "amount": 99.99, "date": "2024-01-01"},
            ],
            "rules": ORDER_RULES + [{"field": "date", "type": "range", "days": 1}],
        })

        assert response.status_code == 200
        exceptions = response.json()["data"]["exceptions"]
        assert exceptions[0]["reason"] == "Low confidence match (33.3%)"

    def test_unknown_adapter(self, client):
        response = client.post("/playground/reconcile", json={
            "source_adapter": "paypal",
            "source_data": [],
            "target_adapter": "stripe",
            "target_data": [],
            "rules": [],
        })

        assert response.status_code == 400

    def test_invalid_rule_rejected(self, client):
        response = client.post("/playground/reconcile", json={
            "source_adapter": "shopify",
            "source_data": [],
            "target_adapter": "stripe",
            "target_data": [],
            "rules": [{"field": "date", "type": "range"}],
        })

        assert response.status_code == 422


# ============================================
# Rules
# ============================================

class TestRules:

    def test_requires_auth(self, client):
        assert client.get("/rules/templates").status_code in (401, 403)

    def test_templates(self, auth_client):
        assert auth_client.get("/rules/templates").json()["count"] == 3

    def test_templates_filtered(self, auth_client):
        body = auth_client.get("/rules/templates", params={"use_case": "e-commerce"}).json()

        assert [t["id"] for t in body["data"]] == ["flexible-fuzzy-match"]

    def test_preview(self, auth_client):
        response = auth_client.post("/rules/preview", json={
            "rules": ORDER_RULES,
            "sample_data": {
                "source": {"order_id": "12345", "amount": 99.99},
                "target": {"order_id": "12345", "amount": 99.99},
            },
        })

        data = response.json()["data"]
        assert data["preview"]["would_match"] is True
        assert data["preview"]["confidence"] == 1.0
        assert data["insights"]["factors"]["exact_matches"] == 2
        assert data["insights"]["explanation"].startswith("High confidence")
        assert data["insights"]["recommendations"] == []

    def test_preview_requires_sample(self, auth_client):
        response = auth_client.post("/rules/preview", json={"rules": ORDER_RULES})

        assert response.status_code == 400

    def test_validate(self, auth_client):
        body = auth_client.post("/rules/validate", json={
            "rules": [{"field": "date", "type": "range"}],
        }).json()

        assert body["valid"] is False
        assert body["errors"][0]["field"] == "date"


# ============================================
# Jobs
# ============================================

class TestJobReconciliation:
    """Runs against a job's stored rules."""

    payload = {
        "source_records": [
            {"order_id": "12345", "amount": 99.99},
            {"order_id": "99999", "amount": 10.00},
        ],
        "target_records": [{"charge_id": "ch_1", "order_id": "12345", "amount": 99.99}],
    }

    def test_run_and_persist(self, auth_client, fake_db):
        response = auth_client.post("/jobs/job_1/reconcile", json=self.payload)

        assert response.status_code == 200
        body = response.json()
        assert body["execution_id"] is not None
        assert body["summary"]["matched"] == 1
        assert body["summary"]["unmatched"] == 1

        assert len(fake_db["executions"]) == 1
        assert fake_db["matches"][0]["target_data"]["charge_id"] == "ch_1"
        assert fake_db["exceptions"][0]["source_id"] == "99999"

    def test_stored_records_follow_their_match(self, auth_client, fake_db):
        """Records sharing an id are stored with the right pair."""
        response = auth_client.post("/jobs/job_1/reconcile", json={
            "source_records": [
                {"order_id": "A", "amount": 10.0},
                {"order_id": "A", "amount": 20.0},
                {"amount": 30.0},
            ],
            "target_records": [
                {"charge_id": "ch_1", "order_id": "A", "amount": 10.0},
                {"charge_id": "ch_2", "order_id": "A", "amount": 20.0},
            ],
        })

        assert response.status_code == 200
        stored = [
            (m["target_id"], m["source_data"]["amount"], m["target_data"]["amount"])
            for m in fake_db["matches"]
        ]
        assert stored == [("ch_1", 10.0, 10.0), ("ch_2", 20.0, 20.0)]

        exception = fake_db["exceptions"][0]
        assert exception["source_id"] == "unknown"
        assert exception["source_data"] == {"amount": 30.0}
        assert "source_index" not in exception

    def test_run_without_persisting(self, auth_client, fake_db):
        response = auth_client.post("/jobs/job_1/reconcile", json={**self.payload, "persist": False})

        assert response.json()["execution_id"] is None
        assert fake_db["executions"] == []

    def test_persistence_failure_does_not_fail_run(self, auth_client, fake_db, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(jobs_router, "save_execution", broken)

        response = auth_client.post("/jobs/job_1/reconcile", json=self.payload)

        assert response.status_code == 200
        assert response.json()["execution_id"] is None

    def test_unknown_job(self, auth_client, fake_db):
        response = auth_client.post("/jobs/job_2/reconcile", json=self.payload)

        assert response.status_code == 404

    def test_concurrent_run_rejected(self, auth_client, fake_db, monkeypatch):
        monkeypatch.setattr(jobs_router, "_active_runs", {"job_1"})

        response = auth_client.post("/jobs/job_1/reconcile", json=self.payload)

        assert response.status_code == 409

    def test_second_run_rejected_while_first_is_running(self, auth_client, fake_db, monkeypatch):
        statuses = []
        run_engine = jobs_router.reconcile

        def reconcile_with_overlapping_request(*args, **kwargs):
            statuses.append(auth_client.post("/jobs/job_1/reconcile", json=self.payload).status_code)
            return run_engine(*args, **kwargs)

        monkeypatch.setattr(jobs_router, "reconcile", reconcile_with_overlapping_request)

        response = auth_client.post("/jobs/job_1/reconcile", json=self.payload)

        assert response.status_code == 200
        assert statuses == [409]

    def test_guard_released_after_run(self, auth_client, fake_db):
        auth_client.post("/jobs/job_1/reconcile", json=self.payload)

        assert "job_1" not in jobs_router._active_runs


# ============================================
# Confidence
# ============================================

class TestConfidence:

    def test_match_confidence(self, auth_client, fake_db):
        data = auth_client.get("/matches/m1/confidence").json()["data"]

        assert data["match_id"] == "m1"
        assert data["confidence"]["score"] == 1.0
        assert data["confidence"]["percentage"] == "100.0"
        assert data["confidence"]["explanation"].startswith("High confidence")
        assert len(data["confidence"]["breakdown"]) == 2

    def test_unknown_match(self, auth_client, fake_db):
        assert auth_client.get("/matches/m2/confidence").status_code == 404

    def test_job_accuracy(self, auth_client, fake_db):
        accuracy = auth_client.get("/jobs/job_1/accuracy").json()["data"]["accuracy"]

        assert accuracy["total_matches"] == 3
        assert accuracy["high_confidence"] == 1
        assert accuracy["medium_confidence"] == 1
        assert accuracy["low_confidence"] == 1
        assert accuracy["badge"] == "low"
