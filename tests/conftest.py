"""Root test configuration for cagent-security.

Every test starts outside GitHub Actions and without a config file:
GITHUB_OUTPUT, CAGENT_SECURITY_CONFIG and CAGENT_SECURITY_LOG_LEVEL are unset
and the default config search paths are emptied, so a `.cagent/security.yaml`
in the developer's checkout or home directory never leaks into a test.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cagent_security.utils.logger import configure_logging


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GITHUB_OUTPUT",
        "CAGENT_SECURITY_CONFIG",
        "CAGENT_SECURITY_LOG_LEVEL",
        "GITHUB_RUN_ID",
        "GITHUB_JOB",
        "GITHUB_ACTION",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("cagent_security.config.DEFAULT_CONFIG_PATHS", [])


@pytest.fixture(autouse=True)
def reset_logging():
    """Rebind structlog to the session stderr after each test.

    The CLI reconfigures logging with whatever ``sys.stderr`` is current, which
    is capsys's stream inside a capsys test; that stream is closed afterwards.
    """
    yield
    configure_logging()


@pytest.fixture
def github_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A temporary GITHUB_OUTPUT file."""
    path = tmp_path / "github_output"
    path.touch()
    monkeypatch.setenv("GITHUB_OUTPUT", str(path))
    return path
