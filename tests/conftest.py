from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the user's ``~/.nullcommitsrc`` and environment out of the tests.

    The configuration file is redirected into the test's temporary
    directory (it does not exist unless a test writes it) and the
    environment overrides are removed.
    """
    path = tmp_path / ".nullcommitsrc"
    monkeypatch.setattr("nullcommits.config.loader._get_config_path", lambda: path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("NULLCOMMITS_DIFF_BUDGET", raising=False)
    return path
