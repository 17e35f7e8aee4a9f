import pytest

from conftest import create_job, signup_candidate, signup_hr


@pytest.mark.parametrize("path,name", [("/", "home"), ("/signup", "signup"), ("/features", "features"), ("/how-it-works", "how-it-works"), ("/contact", "contact")])
def test_public_pages(client, path, name):
    r = client.get(path)
    assert r.status_code == 200, r.text
    assert r.json() == {"page": name}


def test_health(client):
    assert client.get("/health").status_code == 200
    r = client.get("/db/health")
    assert r.status_code == 200, r.text
    assert r.json() == {"status": "ok"}


def test_hr_dashboard_stats(make_client):
    hr = make_client()
    signup_hr(hr)
    job = create_job(hr)
    create_job(hr, title="Closed Role", status="closed")

    candidate = make_client()
    signup_candidate(candidate)
    app_id = candidate.post("/applications", json={"jobId": job["id"]}).json()["applicationId"]
    hr.post("/interviews", json={"applicationId": app_id, "interviewDate": "2030-01-20"})

    r = hr.get("/hr-dashboard")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["stats"] == {
        "totalJobs": 2,
        "activeJobs": 1,
        "totalApplicants": 1,
        "scheduledInterviews": 1,
        "candidatesInInterview": 1,
        "hired": 0,
    }
    assert len(data["applications"]) == 1


def test_job_applicants_view_includes_summary_and_quizzes(make_client):
    hr = make_client()
    signup_hr(hr)
    job = create_job(hr)

    candidate = make_client()
    signup_candidate(candidate)
    candidate.post("/applications", json={"jobId": job["id"]})
    candidate.post("/upload", json={"name": "Cara", "role": "candidate", "summary": "Data analyst."})

    r = hr.get(f"/hr-dashboard/jobs/{job['id']}/applicants")
    assert r.status_code == 200, r.text
    applicants = r.json()["applicants"]
    assert len(applicants) == 1
    assert applicants[0]["cvSummary"]["summary"] == "Data analyst."
    assert applicants[0]["quizzes"] == []

    assert hr.get("/hr-dashboard/jobs/9999/applicants").status_code == 404


def test_candidate_dashboard(make_client):
    hr = make_client()
    signup_hr(hr)
    job = create_job(hr)
    create_job(hr, title="Draft Role", status="draft")

    candidate = make_client()
    signup_candidate(candidate)
    app_id = candidate.post("/applications", json={"jobId": job["id"]}).json()["applicationId"]
    hr.post("/interviews", json={"applicationId": app_id, "interviewDate": "2099-01-20"})
    candidate.post(
        "/mock-interviews",
        json={"jobTitle": "Backend", "category": "Technical", "date": "2030-02-01"},
    )

    r = candidate.get("/candidate-dashboard")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["stats"]["upcomingInterviews"] == 1
    assert data["stats"]["activeApplications"] == 1
    assert data["stats"]["totalMockInterviews"] == 1
    assert data["stats"]["totalApplications"] == 1
    assert [j["title"] for j in data["jobs"]] == [job["title"]]


def test_profile_shows_latest_summary(client):
    signup_candidate(client)
    client.post("/upload", json={"name": "Cara", "role": "candidate", "summary": "Old."})
    client.post("/upload", json={"name": "Cara", "role": "candidate", "summary": "New."})
    r = client.get("/profile")
    assert r.status_code == 200, r.text
    assert r.json()["summary"] == "New."


def test_hr_profile(make_client):
    hr = make_client()
    signup_hr(hr)
    r = hr.get("/hr/profile")
    assert r.status_code == 200, r.text
    assert r.json()["company"] == "Acme Corp"

    candidate = make_client()
    signup_candidate(candidate)
    assert candidate.get("/hr/profile").status_code == 403
