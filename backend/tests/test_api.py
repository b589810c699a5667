from fastapi.testclient import TestClient

from api.dependencies import get_store
from main import app
from services.store import InMemoryStore

client = TestClient(app)

CANDIDATE = {
    "id": "c1",
    "first_name": "Aroha",
    "last_name": "Ngata",
    "institution": "University of Auckland",
    "graduation_year": 2025,
    "skills": ["Python", "SQL"],
    "location": "Auckland",
    "availability": "internship",
    "status": "approved",
}
ORGANIZATION = {"id": "o1", "company_name": "Kiwi Data", "industry": "Technology", "status": "approved"}
POSTING = {
    "id": "p1",
    "organization_id": "o1",
    "title": "Data Intern",
    "description": "Build pipelines.",
    "skills_required": ["Python", "Django"],
    "location": "Auckland",
    "employment_type": "internship",
    "status": "published",
}


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["gemini_configured"] is False


def test_eligibility_check():
    response = client.post(
        "/eligibility/check",
        json={"graduation_year": 2024, "institution": "AUT", "as_of": "2025-12-31"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_eligible"] is True
    assert data["months_since_graduation"] == 12


def test_eligibility_unrecognized():
    response = client.post("/eligibility/check", json={"graduation_year": 2025, "institution": "Harvard University"})
    assert response.status_code == 200
    assert response.json()["reason"] == "Institution not recognized"


def test_document_validate():
    response = client.post(
        "/documents/validate",
        json={
            "extracted": {"name": "Aroha Ngata", "institution": "University of Auckland",
                          "degree": "BSc", "graduation_year": "2025"},
            "declared": {"name": "Aroha Ngata", "institution": "University of Auckland",
                         "degree": "BSc", "graduation_year": 2025},
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["alignment_score"] == 10.0
    assert data["is_aligned"] is True


def test_document_validate_without_extraction():
    response = client.post("/documents/validate", json={"declared": {"name": "Aroha Ngata"}})
    assert response.status_code == 200
    assert response.json()["manual_review_required"] is True


def test_document_analyze_rejects_non_pdf():
    response = client.post(
        "/documents/analyze",
        files={"document": ("cv.txt", b"not a pdf", "text/plain")},
        data={"name": "Aroha Ngata"},
    )
    assert response.status_code == 400


def test_document_analyze_unreadable_pdf():
    response = client.post(
        "/documents/analyze",
        files={"document": ("cv.pdf", b"%PDF-broken", "application/pdf")},
        data={"name": "Aroha Ngata", "institution": "University of Auckland", "graduation_year": "2025"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["extraction_method"] == "none"
    assert data["analysis_score"] == 3.0


def test_match_score():
    response = client.post(
        "/matches/score",
        json={
            "candidate": CANDIDATE,
            "organization": ORGANIZATION,
            "posting": POSTING,
            "as_of": "2025-06-15",
            "include_notes": True,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 71
    assert data["method"] == "rule_based"
    assert data["breakdown"]["matched_skills"] == ["Python"]
    assert data["notes"].startswith("Strong skills alignment")


def test_match_score_rejects_bad_posting():
    bad = {**POSTING, "salary_min": 90000, "salary_max": 10000}
    response = client.post(
        "/matches/score",
        json={"candidate": CANDIDATE, "organization": ORGANIZATION, "posting": bad},
    )
    assert response.status_code == 422


def test_posting_quality_with_enhancement():
    response = client.post("/postings/quality", json={"posting": POSTING, "enhance": True})
    assert response.status_code == 200
    data = response.json()
    assert data["assessment"]["method"] == "rule_based"
    assert "description_length" in data["assessment"]["failed_checks"]
    assert data["enhancement_method"] == "rule_based"
    assert data["enhanced_description"].startswith("Build pipelines.")


def test_match_batch():
    store = InMemoryStore(candidates=[CANDIDATE], organizations=[ORGANIZATION], postings=[POSTING])
    app.dependency_overrides[get_store] = lambda: store
    try:
        response = client.post("/batches/matches", json={"mode": "baseline", "as_of": "2025-06-15"})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["created"] == 1
        assert len(store.list_matches()) == 1
    finally:
        app.dependency_overrides.clear()


def test_insights_include_scoring_log():
    store = InMemoryStore()
    app.dependency_overrides[get_store] = lambda: store
    try:
        client.post(
            "/matches/score",
            json={"candidate": CANDIDATE, "organization": ORGANIZATION, "posting": POSTING},
        )
        response = client.get("/insights")
        assert response.status_code == 200
        data = response.json()
        assert data["scoring"]["total_interactions"] == 1
        assert data["scoring"]["tool_usage"] == {"match_scoring": 1}
        assert data["platform"]["match_success_rate"] == 0
    finally:
        app.dependency_overrides.clear()
