import pytest

from zscheme.compiler import parse_all

# Every test runs with the built-in defaults; tests that exercise the
# environment set the ZSCHEME_* variables themselves via monkeypatch.
ENV_VARS = (
    "ZSCHEME_MAX_DEPTH",
    "ZSCHEME_MAX_EXPANSIONS",
    "ZSCHEME_UNBOUND_POLICY",
    "ZSCHEME_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def datum():
    """Parse a single datum from source text."""

    def _datum(text):
        data = parse_all(text)
        assert len(data) == 1, data
        return data[0]

    return _datum
