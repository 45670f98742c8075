import shutil

import pytest
from _pytest.monkeypatch import MonkeyPatch

mpatch = MonkeyPatch()
mpatch.setenv("SENDLATER_ENV", "test")

from .fixtures import *
from .fixtures import LOGS_DIR, TMP_DIR


# --------------------------------------------------
# hooks
# --------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--persist-output",
        action="store_true",
        default=False,
        help="Persist test output data (logs) between tests in the __tmp__ directory",
    )


def pytest_sessionstart(session: pytest.Session) -> None:
    TMP_DIR.mkdir(exist_ok=True)
    LOGS_DIR.mkdir(exist_ok=True)


def pytest_sessionfinish(session: pytest.Session) -> None:
    global mpatch
    mpatch.undo()

    if not session.config.getoption("--persist-output"):
        shutil.rmtree(TMP_DIR, ignore_errors=True)


# --------------------------------------------------
# global fixtures
# --------------------------------------------------


@pytest.fixture(scope="session")
def monkeypatch_session() -> MonkeyPatch:
    """
    Monkeypatch you can use at the session scope!
    """
    mpatch = MonkeyPatch()
    yield mpatch
    mpatch.undo()


@pytest.fixture(autouse=True, scope="session")
def monkeypatch_config(monkeypatch_session: MonkeyPatch) -> None:
    """
    Replace the active config with one for testing:
    an in-memory database, logs in the tmp dir, and messages that are logged rather than sent
    """
    from sendlater import config

    new_config = config.Config(
        env="test",
        paths={"db": "memory", "logs": LOGS_DIR},
        logs={"level_file": "DEBUG", "level_stdout": "DEBUG"},
        mail={"transport": "log"},
        scheduler={"use_queue": False},
    )
    monkeypatch_session.setattr(config.main, "_config", new_config)
