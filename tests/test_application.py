import threading

import pytest

from mvstools.application import Application, ObjectContext


def test_contents_is_a_usable_collection():
    app = Application()
    app.contents.add("value", "name")
    assert app.contents.item("name") == "value"
    assert len(app.static_objects) == 0


def test_lock_is_reentrant_and_balanced():
    app = Application()
    app.lock()
    app.lock()
    app.unlock()
    app.unlock()
    with pytest.raises(RuntimeError):
        app.unlock()


def test_context_manager_serialises_updates():
    app = Application()
    app.contents.add(0, "count")
    rounds = 200

    def bump():
        for _ in range(rounds):
            with app:
                app.contents.add_update(app.contents.item("count") + 1, "count")

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert app.contents.item("count") == rounds * len(threads)


def test_context_manager_returns_application():
    app = Application()
    with app as entered:
        assert entered is app
    with pytest.raises(RuntimeError):
        app.unlock()


def test_object_context_outcomes():
    ctx = ObjectContext()
    assert ctx.outcome is None
    ctx.set_complete()
    assert ctx.outcome == "complete"
    ctx.set_abort()
    assert ctx.outcome == "abort"