import psycopg2
import pytest
from ecofreight import wait_for_db

class FakeConnection:
    def close(self):
        pass

def test_wait_retries_until_database_answers(monkeypatch):
    attempts = []

    def fake_connect(**kwargs):
        attempts.append(kwargs)
        if len(attempts) < 3:
            raise psycopg2.OperationalError("connection refused")
        return FakeConnection()

    monkeypatch.setattr(wait_for_db.psycopg2, "connect", fake_connect)
    assert wait_for_db.wait(max_attempts=5, delay=0) is True
    assert len(attempts) == 3
    assert attempts[0]["dbname"] == "ecofreight"

def test_wait_gives_up(monkeypatch):
    def refuse(**kwargs):
        raise psycopg2.OperationalError("connection refused")

    monkeypatch.setattr(wait_for_db.psycopg2, "connect", refuse)
    with pytest.raises(SystemExit):
        wait_for_db.wait(max_attempts=2, delay=0)
