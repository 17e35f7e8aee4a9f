from conftest import create_job, job_body, signup_candidate, signup_hr


def test_hr_can_create_job(client):
    hr = signup_hr(client)
    job = create_job(client)
    assert job["title"] == "Backend Engineer"
    assert job["status"] == "active"
    assert job["applicants"] == 0
    assert job["postedById"] == hr["id"]
    assert job["companyName"] == "Acme Corp"


def test_company_and_poster_default_to_hr_account(client):
    signup_hr(client, name="Hana HR")
    body = job_body()
    del body["companyName"]
    del body["postedByName"]
    r = client.post("/jobs", json=body)
    assert r.status_code == 201, r.text
    assert r.json()["companyName"] == "Acme Corp"
    assert r.json()["postedByName"] == "Hana HR"


def test_candidate_cannot_create_job(client):
    signup_candidate(client)
    r = client.post("/jobs", json=job_body())
    assert r.status_code == 403, r.text
    assert r.json()["error"] == "Unauthorized, not an HR user"


def test_job_validation_messages(client):
    signup_hr(client)

    r = client.post("/jobs", json=job_body(title="QA"))
    assert r.status_code == 400, r.text
    assert r.json()["error"] == "Job title must be at least 3 characters"

    r = client.post("/jobs", json=job_body(description="Too short"))
    assert r.status_code == 400, r.text
    assert r.json()["error"] == "Description must be at least 50 characters"

    r = client.post("/jobs", json=job_body(department="Space"))
    assert r.status_code == 400, r.text
    assert r.json()["error"].startswith("Invalid department")

    body = job_body()
    del body["location"]
    r = client.post("/jobs", json=body)
    assert r.status_code == 400, r.text
    assert r.json()["error"] == "Location is required"


def test_list_jobs_filters(client):
    signup_hr(client)
    create_job(client, title="Backend Engineer")
    create_job(client, title="Product Designer", department="Design", status="closed")

    r = client.get("/jobs")
    assert r.status_code == 200, r.text
    assert len(r.json()) == 2

    r = client.get("/jobs", params={"status": "active"})
    assert [j["title"] for j in r.json()] == ["Backend Engineer"]

    r = client.get("/jobs", params={"department": "Design"})
    assert [j["title"] for j in r.json()] == ["Product Designer"]

    r = client.get("/jobs", params={"search": "designer"})
    assert [j["title"] for j in r.json()] == ["Product Designer"]


def test_list_jobs_newest_first(client):
    signup_hr(client)
    first = create_job(client, title="First Role")
    second = create_job(client, title="Second Role")
    ids = [j["id"] for j in client.get("/jobs").json()]
    assert ids == [second["id"], first["id"]]


def test_get_job_and_missing_job(client):
    signup_hr(client)
    job = create_job(client)
    r = client.get(f"/jobs/{job['id']}")
    assert r.status_code == 200, r.text
    assert r.json()["id"] == job["id"]

    r = client.get("/jobs/9999")
    assert r.status_code == 404, r.text
    assert r.json()["error"] == "Job not found"


def test_update_job_is_partial(client):
    signup_hr(client)
    job = create_job(client)
    r = client.put(f"/jobs/{job['id']}", json={"status": "closed"})
    assert r.status_code == 200, r.text
    updated = r.json()
    assert updated["status"] == "closed"
    assert updated["title"] == job["title"]

    r = client.put(f"/jobs/{job['id']}", json={"status": "archived"})
    assert r.status_code == 400, r.text


def test_delete_job(client):
    signup_hr(client)
    job = create_job(client)
    r = client.delete(f"/jobs/{job['id']}")
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Job deleted successfully"
    assert client.get(f"/jobs/{job['id']}").status_code == 404


def test_candidate_can_browse_but_not_edit(make_client):
    hr = make_client()
    signup_hr(hr)
    job = create_job(hr)

    candidate = make_client()
    signup_candidate(candidate)
    assert candidate.get("/jobs").status_code == 200
    assert candidate.get(f"/jobs/{job['id']}").status_code == 200
    assert candidate.put(f"/jobs/{job['id']}", json={"status": "closed"}).status_code == 403
    assert candidate.delete(f"/jobs/{job['id']}").status_code == 403
