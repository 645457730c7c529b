from core.openai_client import AIServiceError
from main import app
from routers.deps import connect_firestore, get_report_store
from services.report_store import FirestoreReportStore, StoreUnavailableError

PAYLOAD = {
    "professionalLevel": "Mid-level",
    "currentSkills": "SQL, Python",
    "educationalBackground": "BSc Mathematics",
    "careerHistory": "Data analyst",
    "desiredRole": "Data Engineer",
    "country": "Australia",
    "userId": "user-1",
}


def _analyze(client, **overrides):
    return client.post("/api/career-pathway-analysis-structured", json={**PAYLOAD, **overrides})


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Career Analysis Report API"
    health = client.get("/health").json()
    assert health["report_store"] == "available"


def test_analysis_returns_report_and_id(client, store):
    response = _analyze(client)
    assert response.status_code == 200
    body = response.json()
    assert body["executiveSummary"]["careerGoal"] == "Data Engineer"
    assert "Spark" in [g["skill"] for g in body["skillGapAnalysis"]["gaps"]]

    analysis_id = response.headers["X-Analysis-Id"]
    assert store.get_by_id(analysis_id).badges == ["career-explorer"]


def test_anonymous_analysis_has_no_id(client):
    response = _analyze(client, userId=None)
    assert response.status_code == 200
    assert "X-Analysis-Id" not in response.headers


def test_malformed_request_is_422(client):
    response = client.post("/api/career-pathway-analysis-structured", json={"desiredRole": "Data Engineer"})
    assert response.status_code == 422


def test_malformed_ai_output_is_502(client, fake_client):
    fake_client.payload["similarRoles"] = {"role": "not a list"}
    response = _analyze(client)
    assert response.status_code == 502
    assert response.json()["section"] == "similarRoles"
    assert response.json()["error"] == "invalid_report"


def test_ai_failure_is_502(client, fake_client):
    fake_client.error = AIServiceError("AI service unavailable: timeout", attempts=3)
    response = _analyze(client)
    assert response.status_code == 502
    assert response.json() == {"error": "ai_service_error", "message": "AI service unavailable: timeout"}


def test_fetch_and_list(client):
    first = _analyze(client).headers["X-Analysis-Id"]
    second = _analyze(client).headers["X-Analysis-Id"]

    record = client.get(f"/api/career-analyses/{first}").json()
    assert record["id"] == first
    assert record["userId"] == "user-1"
    assert record["result"]["careerPathway"]["withDegree"][0]["role"] == "Junior Data Engineer"

    listed = client.get("/api/users/user-1/career-analyses").json()
    assert [r["id"] for r in listed] == [second, first]


def test_fetch_missing_is_404(client):
    response = client.get("/api/career-analyses/nope")
    assert response.status_code == 404
    assert "nope" in response.json()["message"]


def test_delete_requires_owner(client):
    analysis_id = _analyze(client).headers["X-Analysis-Id"]

    assert client.delete(f"/api/career-analyses/{analysis_id}").status_code == 401
    forbidden = client.delete(f"/api/career-analyses/{analysis_id}", headers={"X-User-Id": "intruder"})
    assert forbidden.status_code == 403
    assert client.get(f"/api/career-analyses/{analysis_id}").status_code == 200

    deleted = client.delete(f"/api/career-analyses/{analysis_id}", headers={"X-User-Id": "user-1"})
    assert deleted.status_code == 204
    assert client.get(f"/api/career-analyses/{analysis_id}").status_code == 404
    assert client.get("/api/users/user-1/saved-analyses").json() == []


def test_saved_analyses(client):
    analysis_id = _analyze(client).headers["X-Analysis-Id"]
    entries = client.get("/api/users/user-1/saved-analyses").json()
    assert [e["metadata"]["id"] for e in entries] == [analysis_id]
    assert entries[0]["metadata"]["desiredRole"] == "Data Engineer"
    assert entries[0]["stale"] is False


def test_store_outage_is_503(client, store, monkeypatch):
    def unavailable(analysis_id):
        raise StoreUnavailableError("down")

    monkeypatch.setattr(store, "get_by_id", unavailable)
    response = client.get("/api/career-analyses/anything")
    assert response.status_code == 503


def test_report_charts(client):
    analysis_id = _analyze(client).headers["X-Analysis-Id"]
    charts = client.get(f"/api/career-analyses/{analysis_id}/charts").json()
    assert charts["analysisId"] == analysis_id
    assert len(charts["radar"]) == 6
    assert charts["radar"][0]["fullMark"] == 5
    assert set(charts["frameworkBars"]) == {"sfia9", "digcomp22"}


def test_industry_charts(client):
    response = client.post("/api/charts/industry", json={
        "name": "Fintech",
        "growthRate": "5% per year",
        "trendDirection": "Stable",
        "topCompanies": ["A"],
        "roles": [{"title": "Quant Developer", "prevalence": "High"}],
        "skills": [{"name": "SQL", "category": "Data", "importance": "Critical"}],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["industry"] == "Fintech"
    assert body["rolePrevalence"][0]["value"] == 4
    assert all(point["illustrative"] for point in body["trends"])


def test_sample_activity(client):
    response = client.get("/api/admin/dashboard/sample-activity", params={"days": 7, "today": "2026-02-07"})
    body = response.json()
    assert body["sample"] is True
    assert len(body["dailyActivity"]) == 7
    assert body["dailyActivity"][-1]["date"] == "2026-02-07"
    assert client.get("/api/admin/dashboard/sample-activity", params={"days": 7, "today": "2026-02-07"}).json() == body
    assert client.get("/api/admin/dashboard/sample-activity", params={"days": 0}).status_code == 422


def test_unconfigured_firestore_degrades_health_and_returns_503(client, monkeypatch):
    monkeypatch.setattr("routers.deps.settings.FB_PROJECT_ID", None)
    app.dependency_overrides[get_report_store] = lambda: FirestoreReportStore(connect=connect_firestore)

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["report_store"] == "unavailable"
    assert health.json()["status"] == "degraded"

    response = client.get("/api/career-analyses/anything")
    assert response.status_code == 503
    assert response.json() == {"message": "Report store unavailable"}
