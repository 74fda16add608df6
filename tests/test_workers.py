import threading

from conftest import run_event_loop
from core.errors import ResolveError
from core.models import LyricPair, PlainText, LyricNone, TrackMeta
from sync.workers import ResolveRequest, ThreadedDispatcher

REQUEST = ResolveRequest(meta=TrackMeta(title="A"), cache_path=None, force_refetch=False, serial=1)


def test_result_delivered_on_gui_thread():
    dispatcher = ThreadedDispatcher()
    results = []
    job_threads = []

    def job(request):
        job_threads.append(threading.current_thread())
        return LyricPair(PlainText("la"), LyricNone())

    dispatcher.resolved.connect(lambda req, pair: results.append((req, pair, threading.current_thread())))
    dispatcher.submit(REQUEST, job)
    dispatcher.wait_all()
    run_event_loop(100)

    assert len(results) == 1
    request, pair, thread = results[0]
    assert request == REQUEST
    assert pair.origin == PlainText("la")
    assert thread is threading.main_thread()
    assert job_threads[0] is not threading.main_thread()
    assert dispatcher.pending() == 0


def test_failure_reported():
    dispatcher = ThreadedDispatcher()
    failures = []

    def job(request):
        raise RuntimeError("no network")

    dispatcher.failed.connect(lambda req, msg: failures.append(msg))
    dispatcher.submit(REQUEST, job)
    dispatcher.wait_all()
    run_event_loop(100)

    assert failures == ["RuntimeError: no network"]


def test_expected_failure_reported_without_type_name():
    dispatcher = ThreadedDispatcher()
    failures = []

    def job(request):
        raise ResolveError("no provider answered for 'A'")

    dispatcher.failed.connect(lambda req, msg: failures.append(msg))
    dispatcher.submit(REQUEST, job)
    dispatcher.wait_all()
    run_event_loop(100)

    assert failures == ["no provider answered for 'A'"]
