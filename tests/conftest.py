import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def disable_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda *_args, **_kwargs: None)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GIGSIM_DATABASE_URL",
        "GIGSIM_GAME_DATA_URL",
        "GIGSIM_SEED",
        "GIGSIM_HTTP_CIRCUIT_FAILURE_THRESHOLD",
        "GIGSIM_HTTP_CIRCUIT_RESET_SECONDS",
        "GIGSIM_HTTP_TIMEOUT_S",
        "GIGSIM_HTTP_RETRIES",
        "GIGSIM_HTTP_BACKOFF_S",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_http_circuits() -> None:
    from gigsim.infrastructure.resilient_http import reset_circuit_breakers

    reset_circuit_breakers()
    yield
    reset_circuit_breakers()
