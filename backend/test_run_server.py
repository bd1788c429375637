import importlib
import signal


def test_importing_runner_leaves_signal_handlers_alone():
    before = (signal.getsignal(signal.SIGINT), signal.getsignal(signal.SIGTERM))

    runner = importlib.import_module("run_server")

    assert (signal.getsignal(signal.SIGINT), signal.getsignal(signal.SIGTERM)) == before
    assert callable(runner.main)


def test_main_installs_handlers_and_runs_app(monkeypatch):
    runner = importlib.import_module("run_server")
    installed = {}
    runs = []
    monkeypatch.setattr(runner.signal, "signal", lambda sig, handler: installed.setdefault(sig, handler))
    monkeypatch.setattr(runner.uvicorn, "run", lambda app, **kwargs: runs.append((app, kwargs)))

    runner.main()

    assert installed == {signal.SIGINT: runner.handle_signal, signal.SIGTERM: runner.handle_signal}
    assert runs[0][0] == "medrestock.main:app"
