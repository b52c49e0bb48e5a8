import pytest

from exprcalc.calculator import Calculator
from exprcalc.config import Settings
from exprcalc.repl import REPL


@pytest.fixture
def calc():
    return Calculator()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # keep a developer's .env or EXPRCALC_* variables out of settings loaded by tests
    monkeypatch.chdir(tmp_path)
    for name in ("PROMPT", "HISTORY_FILE", "PRECISION", "LOG_LEVEL", "SHOW_TOKENS"):
        monkeypatch.delenv(f"EXPRCALC_{name}", raising=False)


@pytest.fixture
def repl(tmp_path):
    settings = Settings(history_file=str(tmp_path / "history"))
    return REPL(settings)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
