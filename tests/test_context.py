import threading

from cellevac.context import EvacuationContext, new_context


def test_new_context_returns_one_shared_object():
    evacuatable, reporter, notifier = new_context()
    assert evacuatable is reporter is notifier
    assert isinstance(evacuatable, EvacuationContext)


def test_not_evacuating_before_evacuate():
    _, reporter, _ = new_context()
    assert reporter.evacuating() is False


def test_notify_not_set_before_evacuate():
    _, _, notifier = new_context()
    event = notifier.evacuate_notify()
    assert event.wait(0.05) is False


def test_evacuate_makes_reporter_true():
    evacuatable, reporter, _ = new_context()
    evacuatable.evacuate()
    assert reporter.evacuating() is True


def test_evacuate_sets_notify_event():
    evacuatable, _, notifier = new_context()
    event = notifier.evacuate_notify()
    assert event.wait(0.05) is False
    evacuatable.evacuate()
    assert event.wait(1) is True


def test_repeated_concurrent_evacuate_is_safe():
    evacuatable, reporter, notifier = new_context()
    errors = []

    def call():
        try:
            evacuatable.evacuate()
        except Exception as err:  # pragma: no cover - would fail the test
            errors.append(err)

    threads = [threading.Thread(target=call) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert reporter.evacuating() is True
    assert notifier.evacuate_notify().is_set() is True