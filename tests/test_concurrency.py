# tests/test_concurrency.py
import threading
import time

from app import database


def test_parallel_first_use_opens_one_engine(fresh_db, monkeypatch):
    real_create_engine = database.create_engine
    calls = []

    def slow_create_engine(*args, **kwargs):
        calls.append(args)
        time.sleep(0.05)  # widen the race window
        return real_create_engine(*args, **kwargs)

    monkeypatch.setattr(database, "create_engine", slow_create_engine)

    start = threading.Barrier(8)
    engines = []

    def worker():
        start.wait()
        engines.append(database.get_engine())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(engines) == 8
    assert all(e is engines[0] for e in engines)


def test_engine_is_reused_across_requests(client):
    client.get("/products")
    engine = database.get_engine()
    client.post("/products", json={"name": "A", "price": 1, "image": "i"})
    assert database.get_engine() is engine
