from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def _play(user_id, answers):
    for answer in answers:
        sid = client.post("/api/math-problem", json={"action": "generate"}).json()["sessionId"]
        client.post(
            "/api/math-problem",
            json={"action": "submit", "sessionId": sid, "userAnswer": answer, "userId": user_id},
        )


def test_start_session_issues_user_id():
    r = client.post("/progress/session")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["userId"].startswith("user_")
    assert body["session"]["session_id"] == body["userId"]


def test_progress_after_five_perfect_answers(generator, user_id):
    _play(user_id, [28] * 5)

    r = client.get(f"/progress/{user_id}")
    assert r.status_code == 200
    body = r.json()
    assert body["stats"] == {"correct": 5, "total": 5, "streak": 5}
    unlocked = {a["id"] for a in body["achievements"] if a["unlocked"]}
    assert unlocked == {
        "first-problem",
        "quick-learner",
        "hot-streak",
        "perfect-score",
        "hint-master",
        "speed-demon",
    }
    titles = {a["id"]: a["title"] for a in body["achievements"]}
    assert titles["math-master"] == "Math Master"


def test_progress_survives_a_miss_and_reset_clears_it(generator, user_id):
    _play(user_id, [28, 28, 28, 0])
    body = client.get(f"/progress/{user_id}").json()
    assert body["stats"] == {"correct": 3, "total": 4, "streak": 0}
    hot = next(a for a in body["achievements"] if a["id"] == "hot-streak")
    assert hot["unlocked"] is True and hot["unlocked_at"]

    assert client.delete(f"/progress/{user_id}").json() == {"ok": True}
    body = client.get(f"/progress/{user_id}").json()
    assert body["stats"] == {"correct": 0, "total": 0, "streak": 0}
    assert not any(a["unlocked"] for a in body["achievements"])


def test_progress_touches_session(user_id):
    first = client.get(f"/progress/{user_id}").json()["session"]
    second = client.get(f"/progress/{user_id}").json()["session"]
    assert first["created_at"] == second["created_at"]
    assert second["last_active_at"] >= first["last_active_at"]
