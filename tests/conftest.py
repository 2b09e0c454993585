"""Root test configuration for modguard.

Isolates every test from the developer's environment: MODGUARD_* env vars
are cleared, and both the working directory and HOME point at a fresh
temporary directory, so a stray .modguard.yaml or go.mod is never picked up.
"""

import pytest

from modguard.utils.logger import configure_logging


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Clear MODGUARD_* overrides and run each test from an empty directory."""
    monkeypatch.delenv("MODGUARD_CONFIG", raising=False)
    monkeypatch.delenv("MODGUARD_GOMOD", raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_file(tmp_path):
    """Write a text file under tmp_path and return its path as a string."""

    def _write(relative: str, content: str) -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def reset_logging():
    """Rebind structlog to the current stderr before and after every test.

    cli.main() reconfigures logging onto whatever sys.stderr is at the time
    (possibly a capsys buffer that is closed once the test ends).
    """
    configure_logging()
    yield
    configure_logging()
