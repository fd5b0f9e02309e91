from fastapi.testclient import TestClient

from services import job_store, pdf_parser

UNKNOWN_JOB_ID = "0" * 24


def test_health(client):
    response = client.get("/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "time" in data


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_unexpected_error_uses_error_envelope(client, monkeypatch):
    def _boom(db, job_id):
        raise RuntimeError("database went away")

    monkeypatch.setattr(job_store, "get_job", _boom)
    failing_client = TestClient(client.app, raise_server_exceptions=False)
    response = failing_client.get(f"/v1/jobs/{UNKNOWN_JOB_ID}")
    assert response.status_code == 500
    assert response.json() == {"error": {"code": "INTERNAL", "message": "Server error"}}


# --- /ats/score ---


def test_ats_score(client, auth_headers, job_id, sample_resume):
    response = client.post(
        "/v1/ats/score",
        json={"job_id": job_id, "resume_text": sample_resume},
        headers=auth_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["job_id"] == job_id
    assert data["score"] == 75
    assert data["breakdown"] == {"skills": 60, "keywords": 15}
    assert data["matched_skills"] == ["Python", "Docker"]
    assert data["missing_skills"] == []
    assert data["matched_keywords"] == ["build", "python", "docker"]
    assert data["recommendations"] == [
        "Mention relevant terms like: backend, engineer, acme, remote, apis"
    ]


def test_ats_score_does_not_persist(client, auth_headers, job_id, sample_resume):
    client.post(
        "/v1/ats/score",
        json={"job_id": job_id, "resume_text": sample_resume},
        headers=auth_headers,
    )
    response = client.get("/v1/ats/scores", headers=auth_headers)
    assert response.json()["items"] == []


def test_ats_score_caps_keyword_lists(client, auth_headers):
    words = " ".join(f"keyword{i}" for i in range(40))
    job = client.post(
        "/v1/jobs/import",
        json={"title": "Generalist", "company": {"name": "Initech"}, "description_html": words},
        headers=auth_headers,
    ).json()
    response = client.post(
        "/v1/ats/score",
        json={"job_id": job["id"], "resume_text": "nothing in common with that posting"},
        headers=auth_headers,
    )
    data = response.json()
    assert len(data["missing_keywords"]) == 15
    assert data["score"] == 0


def test_ats_score_requires_auth(client, job_id, sample_resume):
    response = client.post("/v1/ats/score", json={"job_id": job_id, "resume_text": sample_resume})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_ats_score_rejects_bad_scheme(client, job_id, sample_resume):
    response = client.post(
        "/v1/ats/score",
        json={"job_id": job_id, "resume_text": sample_resume},
        headers={"Authorization": "Token abc"},
    )
    assert response.status_code == 401


def test_ats_score_rejects_garbage_token(client, job_id, sample_resume):
    response = client.post(
        "/v1/ats/score",
        json={"job_id": job_id, "resume_text": sample_resume},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


def test_ats_score_short_resume(client, auth_headers, job_id):
    response = client.post(
        "/v1/ats/score",
        json={"job_id": job_id, "resume_text": "too short"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_ats_score_whitespace_padded_resume(client, auth_headers, job_id):
    response = client.post(
        "/v1/ats/score",
        json={"job_id": job_id, "resume_text": "   python     " + " " * 20},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_ats_score_missing_field(client, auth_headers):
    response = client.post("/v1/ats/score", json={"resume_text": "x" * 30}, headers=auth_headers)
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"]


def test_ats_score_invalid_job_id(client, auth_headers, sample_resume):
    response = client.post(
        "/v1/ats/score",
        json={"job_id": "not-an-object-id", "resume_text": sample_resume},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"


def test_ats_score_unknown_job(client, auth_headers, sample_resume):
    response = client.post(
        "/v1/ats/score",
        json={"job_id": UNKNOWN_JOB_ID, "resume_text": sample_resume},
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == {"code": "NOT_FOUND", "message": "Job not found"}


# --- /ats/score/upload ---


def test_ats_score_upload(client, auth_headers, job_id, sample_resume, monkeypatch):
    monkeypatch.setattr(pdf_parser, "extract_text", lambda content: sample_resume)
    response = client.post(
        "/v1/ats/score/upload",
        data={"job_id": job_id},
        files={"resume_file": ("resume.pdf", b"%PDF-1.4 fake", "application/pdf")},
        headers=auth_headers,
    )
    assert response.status_code == 200, response.text
    assert response.json()["score"] == 75


def test_ats_score_upload_rejects_non_pdf(client, auth_headers, job_id):
    response = client.post(
        "/v1/ats/score/upload",
        data={"job_id": job_id},
        files={"resume_file": ("resume.txt", b"not a pdf", "text/plain")},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Only PDF files are accepted"


def test_ats_score_upload_unparseable(client, auth_headers, job_id, monkeypatch):
    def _boom(content):
        raise ValueError("corrupt")

    monkeypatch.setattr(pdf_parser, "extract_text", _boom)
    response = client.post(
        "/v1/ats/score/upload",
        data={"job_id": job_id},
        files={"resume_file": ("resume.pdf", b"%PDF-1.4 broken", "application/pdf")},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Could not parse PDF file"


def test_ats_score_upload_empty_text(client, auth_headers, job_id, monkeypatch):
    monkeypatch.setattr(pdf_parser, "extract_text", lambda content: "")
    response = client.post(
        "/v1/ats/score/upload",
        data={"job_id": job_id},
        files={"resume_file": ("resume.pdf", b"%PDF-1.4 scanned", "application/pdf")},
        headers=auth_headers,
    )
    assert response.status_code == 400


# --- /ats/evaluate and history ---


def test_ats_evaluate_persists(client, auth_headers, job_id, sample_resume):
    response = client.post(
        "/v1/ats/evaluate",
        json={"job_id": job_id, "resume_text": sample_resume},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["job_id"] == job_id
    assert created["score"] == 75
    assert created["breakdown"] == {"skills": 60, "keywords": 15}
    assert created["missing_skills"] == []

    evaluation_id = created["ats_score_id"]
    response = client.get(f"/v1/ats/scores/{evaluation_id}", headers=auth_headers)
    assert response.status_code == 200
    stored = response.json()
    assert stored["resume_text"] == sample_resume
    assert stored["matched_keywords"] == ["build", "python", "docker"]
    assert stored["missing_keywords"] == ["backend", "engineer", "acme", "remote", "apis"]

    listing = client.get("/v1/ats/scores", params={"job_id": job_id}, headers=auth_headers)
    assert [item["id"] for item in listing.json()["items"]] == [evaluation_id]


def test_ats_evaluate_truncates_snapshot(client, auth_headers, job_id):
    resume = "Python Docker " * 3000  # 42,000 chars
    response = client.post(
        "/v1/ats/evaluate",
        json={"job_id": job_id, "resume_text": resume},
        headers=auth_headers,
    )
    evaluation_id = response.json()["ats_score_id"]
    stored = client.get(f"/v1/ats/scores/{evaluation_id}", headers=auth_headers).json()
    assert len(stored["resume_text"]) == 32_000


def test_ats_scores_list_limit(client, auth_headers, job_id, sample_resume):
    for _ in range(3):
        client.post(
            "/v1/ats/evaluate",
            json={"job_id": job_id, "resume_text": sample_resume},
            headers=auth_headers,
        )
    response = client.get("/v1/ats/scores", params={"limit": 2}, headers=auth_headers)
    assert len(response.json()["items"]) == 2

    response = client.get("/v1/ats/scores", params={"limit": 51}, headers=auth_headers)
    assert response.status_code == 400


def test_ats_scores_are_owner_only(client, auth_headers, register_user, job_id, sample_resume):
    created = client.post(
        "/v1/ats/evaluate",
        json={"job_id": job_id, "resume_text": sample_resume},
        headers=auth_headers,
    ).json()

    other = register_user(email="mallory@example.com")
    other_headers = {"Authorization": f"Bearer {other['access_token']}"}
    url = f"/v1/ats/scores/{created['ats_score_id']}"
    assert client.get(url, headers=other_headers).status_code == 404
    assert client.delete(url, headers=other_headers).status_code == 404
    assert client.get("/v1/ats/scores", headers=other_headers).json()["items"] == []


def test_ats_score_delete(client, auth_headers, job_id, sample_resume):
    created = client.post(
        "/v1/ats/evaluate",
        json={"job_id": job_id, "resume_text": sample_resume},
        headers=auth_headers,
    ).json()
    url = f"/v1/ats/scores/{created['ats_score_id']}"
    assert client.delete(url, headers=auth_headers).status_code == 204
    assert client.get(url, headers=auth_headers).status_code == 404


def test_ats_score_get_invalid_id(client, auth_headers):
    response = client.get("/v1/ats/scores/xyz", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"


# --- /ats/compare ---


def test_ats_compare_ranks_best_first(client, auth_headers, job_id):
    response = client.post(
        "/v1/ats/compare",
        json={
            "job_id": job_id,
            "resumes": [
                {"label": "python-only", "resume_text": "Backend work in Python for many years"},
                {"label": "both", "resume_text": "Backend work in Python and Docker for years"},
            ],
        },
        headers=auth_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["job_id"] == job_id
    labels = [r["label"] for r in data["results"]]
    assert labels == ["both", "python-only"]
    assert data["results"][0]["score"] >= data["results"][1]["score"]
    assert data["results"][1]["missing_skills"] == ["Docker"]


def test_ats_compare_needs_two_resumes(client, auth_headers, job_id, sample_resume):
    response = client.post(
        "/v1/ats/compare",
        json={"job_id": job_id, "resumes": [{"label": "solo", "resume_text": sample_resume}]},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_ats_compare_rejects_more_than_ten(client, auth_headers, job_id, sample_resume):
    resumes = [{"label": f"r{i}", "resume_text": sample_resume} for i in range(11)]
    response = client.post(
        "/v1/ats/compare",
        json={"job_id": job_id, "resumes": resumes},
        headers=auth_headers,
    )
    assert response.status_code == 400
