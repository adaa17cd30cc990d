from datetime import timedelta

from fastapi.testclient import TestClient

from pprblog.database import utcnow
from pprblog.main import create_app
from pprblog.seed import seed_demo_data


def test_seed_loads_demo_dataset_once(storage, settings):
    assert seed_demo_data(storage, settings.seed_file, rounds=4) is True
    assert seed_demo_data(storage, settings.seed_file, rounds=4) is False

    counts = storage.analytics_counts()
    assert counts["total_users"] == 4
    assert counts["total_posts"] == 5
    assert counts["total_comments"] == 4

    demo = storage.find_user_by_email("demo@example.com")
    assert demo.role == "admin"


def test_seed_missing_file_is_skipped(storage, tmp_path):
    assert seed_demo_data(storage, tmp_path / "missing.yaml") is False
    assert storage.analytics_counts()["total_users"] == 0


def test_startup_seeds_and_sweeps_expired_sessions(settings, storage):
    user = storage.insert_user(name="Old", email="old@x.com", password_hash="x")
    storage.insert_session("expired-session", user.id, utcnow() - timedelta(days=1))
    storage.insert_session("live-session", user.id, utcnow() + timedelta(days=1))

    app = create_app(settings=settings.model_copy(update={"seed_demo_data": True}), storage=storage)
    with TestClient(app) as client:
        login = client.post(
            "/api/auth/login",
            json={"email": "demo@example.com", "password": "password123"},
        )
        assert login.status_code == 200
        assert login.json()["user"]["role"] == "admin"
        assert client.get("/api/admin/stats").status_code == 200

        assert storage.find_session_by_id("expired-session") is None
        assert storage.find_session_by_id("live-session") is not None
