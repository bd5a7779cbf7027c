from __future__ import annotations

import pytest


@pytest.fixture
def forget_env(monkeypatch):
    """Remove environment variables for the test and drop them again afterwards.

    Covers variables the code under test creates itself (``export`` lines).
    """

    def _forget(*names: str) -> None:
        for name in names:
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)

    return _forget
