import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from quiz_backend.presentation.app_factory import create_app
from quiz_backend.presentation.dependencies import validate_reset_request

from conftest import RESET_SECRET

HEADERS = {"x-reset-secret": RESET_SECRET}


def _reject_code(settings, provided):
    with pytest.raises(HTTPException) as exc:
        validate_reset_request(settings, provided)
    return exc.value.status_code


def test_valid_request_passes(settings):
    validate_reset_request(settings, RESET_SECRET)


def test_disabled_endpoint_is_403_even_with_secret(settings):
    settings = settings.model_copy(update={"enable_test_endpoint": False})
    assert _reject_code(settings, RESET_SECRET) == 403


def test_unconfigured_secret_is_500(settings):
    settings = settings.model_copy(update={"test_reset_secret": None})
    assert _reject_code(settings, "anything") == 500


@pytest.mark.parametrize("provided", [None, "", "wrong"])
def test_bad_secret_is_403(settings, provided):
    assert _reject_code(settings, provided) == 403


def test_non_test_database_is_403(settings):
    settings = settings.model_copy(update={"database_name": "quiz_dev"})
    assert _reject_code(settings, RESET_SECRET) == 403


def test_database_name_taken_from_url(settings):
    settings = settings.model_copy(
        update={"database_name": None, "database_url": "mysql+pymysql://u:p@localhost/quiz_test"}
    )
    validate_reset_request(settings, RESET_SECRET)


def test_reset_reseeds_fixed_dataset(client, make_question):
    make_question("Leftover", [("a", True), ("b", False)])

    res = client.post("/api/test/reset", headers=HEADERS)

    assert res.status_code == 200
    assert res.json() == {"ok": True}
    stems = {q["stem"] for q in client.get("/api/questions", params={"limit": 50}).json()}
    assert "Leftover" not in stems
    assert "Hello World - 基础题" in stems
    assert "HTTP 状态码 200 表示什么？" in stems
    assert len(stems) == 4


def test_reset_twice_gives_same_count(client):
    client.post("/api/test/reset", headers=HEADERS)
    first = len(client.get("/api/questions", params={"limit": 50}).json())
    client.post("/api/test/reset", headers=HEADERS)
    second = len(client.get("/api/questions", params={"limit": 50}).json())
    assert first == second == 4


def test_seeded_question_is_answerable(client):
    client.post("/api/test/reset", headers=HEADERS)
    question = next(
        q for q in client.get("/api/questions", params={"limit": 50}).json()
        if q["stem"] == "HTTP 状态码 200 表示什么？"
    )
    success = next(o for o in question["options"] if o["text"] == "成功")

    res = client.post(
        "/api/answers", json={"questionId": question["id"], "selectedOptionId": success["id"]}
    )

    assert res.json()["correct"] is True
    assert res.json()["correctOptionId"] == success["id"]


def test_reset_without_header_is_403(client):
    assert client.post("/api/test/reset").status_code == 403


def test_reset_with_wrong_secret_is_403(client):
    assert client.post("/api/test/reset", headers={"x-reset-secret": "nope"}).status_code == 403


@pytest.mark.parametrize(
    "update, expected",
    [
        ({"enable_test_endpoint": False}, 403),
        ({"test_reset_secret": None}, 500),
        ({"database_name": "quiz_dev"}, 403),
    ],
)
def test_reset_guard_over_http(settings, engine, update, expected):
    settings = settings.model_copy(update=update)
    with TestClient(create_app(settings, engine=engine)) as c:
        assert c.post("/api/test/reset", headers=HEADERS).status_code == expected


def test_reset_refuses_production(settings, engine):
    settings = settings.model_copy(update={"env": "production"})
    with TestClient(create_app(settings, engine=engine)) as c:
        res = c.post("/api/test/reset", headers=HEADERS)
    assert res.status_code == 403
