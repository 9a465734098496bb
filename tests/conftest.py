import os
import time

import pytest

from refile import reporting

DAY = 24 * 3600


@pytest.fixture(autouse=True)
def isolated_log(tmp_path_factory, monkeypatch):
    # Keep the log and config lookups outside tmp_path, which tests scan.
    log_path = tmp_path_factory.mktemp("logs") / "refile.log"
    monkeypatch.setenv(reporting.LOG_FILE_ENV, str(log_path))
    monkeypatch.delenv("REFILE_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg")))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path_factory.mktemp("state")))
    return log_path


def set_age(path, days: float, now: float | None = None) -> None:
    reference = time.time() if now is None else now
    stamp = reference - days * DAY
    os.utime(path, (stamp, stamp))


def make_file(directory, name: str, days: float = 0, content: str = "data", now: float | None = None):
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    set_age(path, days, now)
    return path
