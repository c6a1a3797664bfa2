from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.middleware import request_limiter
from app.models.score import Score
from app.services.score_service import score_service_obj


def make_score(**overrides):
    score = {
        "name": "alice",
        "time": 120,
        "moves": 63,
        "date": datetime.now(timezone.utc).isoformat(),
    }
    score.update(overrides)
    return score


class TestScoresAPI:

    def test_submit_score(self, client, db_session):
        response = client.post("/api/scores", json=make_score())
        assert response.status_code == 200
        data = response.json()
        assert "id" in data

        stored = db_session.query(Score).filter(Score.id == data["id"]).one()
        assert stored.name == "alice"
        assert stored.moves == 63
        assert stored.ip_address == "testclient"

    def test_submitted_name_is_trimmed(self, client, db_session):
        response = client.post("/api/scores", json=make_score(name="  bob  "))
        assert response.status_code == 200
        stored = db_session.query(Score).filter(Score.id == response.json()["id"]).one()
        assert stored.name == "bob"

    def test_date_returned_as_utc(self, client):
        response = client.post("/api/scores", json=make_score(date="2020-01-01T05:00:00+02:00"))
        assert response.status_code == 200

        entry = client.get("/api/scores").json()[0]
        assert entry["date"] == "2020-01-01T03:00:00Z"
        parsed = datetime.fromisoformat(entry["date"].replace("Z", "+00:00"))
        assert parsed == datetime(2020, 1, 1, 3, 0, tzinfo=timezone.utc)

    def test_get_scores_empty(self, client):
        response = client.get("/api/scores")
        assert response.status_code == 200
        assert response.json() == []

    def test_get_scores_ordering(self, client, add_scores):
        add_scores((10, 50), (10, 30), (5, 900), (70, 1))
        response = client.get("/api/scores")
        assert response.status_code == 200
        data = response.json()
        assert [(s["moves"], s["time"]) for s in data] == [(5, 900), (10, 30), (10, 50), (70, 1)]

    def test_get_scores_limited_to_ten(self, client, add_scores):
        add_scores(*[(63 + i, 100) for i in range(15)])
        data = client.get("/api/scores").json()
        assert len(data) == 10
        assert data[0]["moves"] == 63
        assert data[-1]["moves"] == 72

    def test_get_scores_hides_ip_address(self, client, add_scores):
        add_scores((63, 10))
        entry = client.get("/api/scores").json()[0]
        assert set(entry) == {"id", "name", "time", "moves", "date"}

    def test_moves_below_minimum_rejected(self, client):
        response = client.post("/api/scores", json=make_score(moves=62))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid number of moves"

    def test_empty_name_rejected(self, client):
        response = client.post("/api/scores", json=make_score(name="   "))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid name"
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_name_too_long_rejected(self, client):
        response = client.post("/api/scores", json=make_score(name="x" * 51))
        assert response.status_code == 400
        assert response.json()["error"] == "Name too long"

    def test_time_out_of_range_rejected(self, client):
        response = client.post("/api/scores", json=make_score(time=3601))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid time"

    def test_string_time_rejected(self, client):
        response = client.post("/api/scores", json=make_score(time="120"))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid time"

    def test_future_date_rejected(self, client):
        tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
        response = client.post("/api/scores", json=make_score(date=tomorrow))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date"

    def test_unparseable_date_rejected(self, client):
        response = client.post("/api/scores", json=make_score(date="yesterday"))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date"

    def test_first_failing_rule_wins(self, client):
        response = client.post("/api/scores", json={"name": "", "time": -1, "moves": 1, "date": "x"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid name"

    def test_malformed_body_rejected(self, client):
        response = client.post(
            "/api/scores",
            content="{not json",
            headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    def test_sixth_submission_in_an_hour_rejected(self, client):
        for _ in range(5):
            response = client.post("/api/scores", json=make_score())
            assert response.status_code == 200

        response = client.post("/api/scores", json=make_score())
        assert response.status_code == 400
        assert response.json()["error"] == "Too many submissions from this IP"
        assert response.json()["error_code"] == "SUBMISSION_LIMIT"

    def test_other_origins_do_not_count_towards_limit(self, client, add_scores):
        add_scores(*[(63, 100)] * 5, ip_address="10.0.0.9")
        response = client.post("/api/scores", json=make_score())
        assert response.status_code == 200

    def test_capacity_eviction_on_insert(self, client, db_session, add_scores):
        rows = [(100, 100)] * 99 + [(200, 500)]
        add_scores(*rows)
        worst_id = db_session.query(Score).filter(Score.moves == 200).one().id

        response = client.post("/api/scores", json=make_score(moves=150, time=10))
        assert response.status_code == 200

        assert db_session.query(Score).count() == 100
        assert db_session.query(Score).filter(Score.id == worst_id).first() is None
        assert db_session.query(Score).filter(Score.id == response.json()["id"]).first() is not None

    def test_store_failure_returns_500(self, client, monkeypatch):
        def broken(db, limit=None):
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(score_service_obj, "get_top_scores", broken)
        response = client.get("/api/scores")
        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"

    def test_clear_scores_disabled_by_default(self, client, db_session, add_scores):
        add_scores((63, 10))
        response = client.delete("/api/scores")
        assert response.status_code == 403
        assert "error" in response.json()
        assert db_session.query(Score).count() == 1

    def test_clear_scores_when_enabled(self, client, db_session, add_scores, monkeypatch):
        monkeypatch.setattr(settings, "ENABLE_SCORE_CLEAR", True)
        add_scores((63, 10), (64, 20))
        response = client.delete("/api/scores")
        assert response.status_code == 200
        assert response.json()["deleted"] == 2
        assert "message" in response.json()
        assert db_session.query(Score).count() == 0


class TestHardening:

    def test_security_headers_present(self, client):
        response = client.get("/api/scores")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"

    def test_oversized_body_rejected(self, client):
        response = client.post("/api/scores", json=make_score(name="x" * 2000))
        assert response.status_code == 413

    def test_oversized_chunked_body_rejected(self, client):
        def chunks():
            yield b'{"name": "'
            for _ in range(10):
                yield b"x" * 512
            yield b'", "time": 10, "moves": 63}'

        response = client.post(
            "/api/scores",
            content=chunks(),
            headers={"Content-Type": "application/json"}
        )
        assert "content-length" not in response.request.headers
        assert response.status_code == 413
        assert response.json()["error_code"] == "PAYLOAD_TOO_LARGE"

    def test_small_chunked_body_accepted(self, client):
        body = (
            '{"name": "nia", "time": 10, "moves": 63, '
            f'"date": "{datetime.now(timezone.utc).isoformat()}"}}'
        ).encode()

        def chunks():
            yield body[:20]
            yield body[20:]

        response = client.post(
            "/api/scores",
            content=chunks(),
            headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 200
        assert "id" in response.json()

    def test_request_rate_limit(self, client, monkeypatch):
        monkeypatch.setattr(request_limiter, "max_requests", 3)
        for _ in range(3):
            assert client.get("/api/scores").status_code == 200

        response = client.get("/api/scores")
        assert response.status_code == 429
        assert response.json()["error"] == "Too many requests, please try again later."
        assert int(response.headers["Retry-After"]) > 0

    def test_rate_limit_can_be_disabled(self, client, monkeypatch):
        monkeypatch.setattr(request_limiter, "max_requests", 1)
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
        for _ in range(3):
            assert client.get("/api/scores").status_code == 200
