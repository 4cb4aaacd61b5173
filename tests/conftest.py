import os
from pathlib import Path

import pytest

# Directory name -> marker; integration tests are also marked slow unless marked fast
_DIRECTORY_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "bdd": pytest.mark.bdd,
    "integration": pytest.mark.integration,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Protean config overlay to run against (test or production)",
    )


def pytest_sessionstart(session):
    """Select the domain.toml overlay before the ordering domain initializes."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = Path(item.fspath).parts
        for directory, marker in _DIRECTORY_MARKERS.items():
            if directory in parts:
                item.add_marker(marker)
                break

        if "integration" in parts and not any(m.name == "fast" for m in item.iter_markers()):
            item.add_marker(pytest.mark.slow)
