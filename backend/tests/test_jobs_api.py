import pytest


@pytest.fixture
def seeded_jobs(client, auth_headers):
    jobs = [
        {
            "title": "Backend Engineer",
            "company": {"name": "Acme"},
            "location": "Remote",
            "remote": "remote",
            "seniority": "mid",
            "posted_at": "2026-09-01T00:00:00Z",
            "skills_required": ["Python", "Docker"],
        },
        {
            "title": "Frontend Engineer",
            "company": {"name": "Globex"},
            "location": "Berlin, Germany",
            "remote": "hybrid",
            "seniority": "senior",
            "posted_at": "2026-10-01T00:00:00Z",
            "skills_required": ["TypeScript", "React"],
        },
        {
            "title": "Data Engineer",
            "company": {"name": "Initech"},
            "location": "Berlin, Germany",
            "remote": "on_site",
            "seniority": "senior",
            "posted_at": "2026-08-01T00:00:00Z",
            "skills_required": ["Python", "Spark"],
        },
    ]
    ids = []
    for job in jobs:
        response = client.post("/v1/jobs/import", json=job, headers=auth_headers)
        assert response.status_code == 201, response.text
        ids.append(response.json()["id"])
    return ids


def _titles(response) -> list[str]:
    return [item["title"] for item in response.json()["items"]]


def test_import_requires_auth(client, sample_job_payload):
    response = client.post("/v1/jobs/import", json=sample_job_payload)
    assert response.status_code == 401


def test_import_validates_payload(client, auth_headers):
    response = client.post(
        "/v1/jobs/import",
        json={"title": "X", "company": {"name": "Acme"}},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_import_rejects_unknown_enum(client, auth_headers, sample_job_payload):
    payload = {**sample_job_payload, "remote": "moon"}
    response = client.post("/v1/jobs/import", json=payload, headers=auth_headers)
    assert response.status_code == 400


def test_get_job(client, job_id, sample_job_payload):
    response = client.get(f"/v1/jobs/{job_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == job_id
    assert data["title"] == sample_job_payload["title"]
    assert data["company"]["name"] == "Acme"
    assert data["skills_required"] == ["Python", "Docker"]


def test_get_job_invalid_and_unknown(client):
    assert client.get("/v1/jobs/bogus").status_code == 400
    response = client.get(f"/v1/jobs/{'f' * 24}")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_search_newest_first(client, seeded_jobs):
    response = client.get("/v1/jobs/search")
    assert response.status_code == 200
    assert _titles(response) == ["Frontend Engineer", "Backend Engineer", "Data Engineer"]
    assert response.json()["next_cursor"] is None


def test_search_text_query(client, seeded_jobs):
    assert _titles(client.get("/v1/jobs/search", params={"q": "globex"})) == ["Frontend Engineer"]
    assert _titles(client.get("/v1/jobs/search", params={"q": "data"})) == ["Data Engineer"]


def test_search_filters(client, seeded_jobs):
    response = client.get("/v1/jobs/search", params={"location": "berlin", "seniority": "senior"})
    assert _titles(response) == ["Frontend Engineer", "Data Engineer"]

    response = client.get("/v1/jobs/search", params={"remote": "on_site"})
    assert _titles(response) == ["Data Engineer"]


def test_search_requires_all_skills(client, seeded_jobs):
    response = client.get("/v1/jobs/search", params={"skills": ["Python"]})
    assert _titles(response) == ["Backend Engineer", "Data Engineer"]

    response = client.get("/v1/jobs/search", params={"skills": ["Python", "Spark"]})
    assert _titles(response) == ["Data Engineer"]


def test_search_limit(client, seeded_jobs):
    assert len(client.get("/v1/jobs/search", params={"limit": 1}).json()["items"]) == 1
    assert client.get("/v1/jobs/search", params={"limit": 0}).status_code == 400


def test_search_treats_like_wildcards_literally(client, auth_headers, seeded_jobs):
    assert _titles(client.get("/v1/jobs/search", params={"q": "%"})) == []
    assert _titles(client.get("/v1/jobs/search", params={"q": "_"})) == []
    assert _titles(client.get("/v1/jobs/search", params={"location": "%"})) == []

    payload = {
        "title": "Growth Engineer (100% remote)",
        "company": {"name": "Hooli"},
        "location": "Remote_EU",
    }
    assert client.post("/v1/jobs/import", json=payload, headers=auth_headers).status_code == 201
    assert _titles(client.get("/v1/jobs/search", params={"q": "100%"})) == [payload["title"]]
    assert _titles(client.get("/v1/jobs/search", params={"location": "remote_eu"})) == [
        payload["title"]
    ]


def test_import_stores_urls(client, auth_headers, sample_job_payload):
    payload = {
        **sample_job_payload,
        "company": {"name": "Acme", "site": "https://acme.example.com/careers"},
        "source": {"provider": "greenhouse", "url": "https://boards.example.com/acme/1"},
    }
    response = client.post("/v1/jobs/import", json=payload, headers=auth_headers)
    assert response.status_code == 201
    job_id = response.json()["id"]

    data = client.get(f"/v1/jobs/{job_id}").json()
    assert data["company"]["site"] == "https://acme.example.com/careers"
    assert data["source"] == {"provider": "greenhouse", "url": "https://boards.example.com/acme/1"}


@pytest.mark.parametrize(
    "field",
    [
        {"company": {"name": "Acme", "site": "not a url"}},
        {"source": {"provider": "greenhouse", "url": "ftp//broken"}},
    ],
)
def test_import_rejects_invalid_urls(client, auth_headers, sample_job_payload, field):
    response = client.post(
        "/v1/jobs/import", json={**sample_job_payload, **field}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
