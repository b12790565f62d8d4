from fastapi.testclient import TestClient

from api.main import app

client = TestClient(app)


def test_health():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_validate_endpoint_reports_errors():
    response = client.post(
        "/targets/validate",
        json={"targets": "10.0.0.1\n# comment\nbad_domain!!\n10.0.0.2,10.0.0.3"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["valid"] is False
    assert len(body["errors"]) == 1
    assert body["errors"][0]["line"] == 3
    assert body["errors"][0]["target"] == "bad_domain!!"
    assert body["message"].startswith("line 3 'bad_domain!!': ")


def test_validate_endpoint_clean_input():
    response = client.post("/targets/validate", json={"targets": "example.com; 10.0.0.0/8"})

    assert response.json() == {"valid": True, "errors": [], "message": ""}


def test_validate_endpoint_requires_targets():
    response = client.post("/targets/validate", json={})

    assert response.status_code == 422


def test_classify_endpoint():
    response = client.post(
        "/targets/classify",
        json={"targets": "[2001:db8::1]:443\n10.0/24"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body[0]["kind"] == "ipv6"
    assert body[0]["host"] == "2001:db8::1"
    assert body[0]["port"] == 443
    assert body[1]["line"] == 2
    assert body[1]["kind"] == "invalid"
    assert body[1]["error_kind"] == "malformed_cidr"
    assert body[1]["suggestion"] == "10.0.0.0/24"


def test_create_task_accepts_clean_targets():
    response = client.post(
        "/tasks",
        json={"name": "weekly", "targets": "10.0.0.1-10.0.0.5\nexample.com"},
    )

    assert response.status_code == 201
    assert response.json() == {
        "name": "weekly",
        "targets": ["10.0.0.1-10.0.0.5", "example.com"],
        "total_targets": 2,
    }


def test_create_task_rejects_invalid_targets():
    response = client.post(
        "/tasks",
        json={"name": "weekly", "targets": "10.0.0.1\nbad..com\na.1"},
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("found 2 invalid targets:\n")


def test_create_task_rejects_empty_targets():
    response = client.post("/tasks", json={"name": "weekly", "targets": "# nothing\n"})

    assert response.status_code == 400
