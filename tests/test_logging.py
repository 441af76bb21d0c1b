"""Tests for the PprintLogger and setup_logging functionality.

This module verifies:
- Strings pass through untouched, including %-style arguments
- Pydantic models are rendered with model_dump_json()
- Other objects are pretty-printed unless pprint=False
- setup_logging attaches a single handler and honours GAZETTEER_LOG_LEVEL
"""

import logging
from io import StringIO

import pytest

from gazetteer.logging import LOG_LEVEL_ENV_VAR, PprintLogger, setup_logging
from gazetteer.occurrence import LocationOccurrence


@pytest.fixture
def captured():
    logger = logging.getLogger("test_gazetteer_logging")
    logger.setLevel(logging.DEBUG)
    handler = logging.StreamHandler(StringIO())
    handler.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    yield PprintLogger(logger), handler.stream
    logger.removeHandler(handler)


class TestPprintLogger:
    """Tests for PprintLogger formatting and delegation."""

    def test_string_with_args(self, captured):
        """Test that string messages are formatted with %-style args."""
        logger, stream = captured

        logger.info("Resolved %r to %d matches", "Boston", 2)

        assert "Resolved 'Boston' to 2 matches" in stream.getvalue()

    def test_pydantic_model_dumped_as_json(self, captured):
        """Test that pydantic models are logged as indented JSON."""
        logger, stream = captured

        logger.debug(LocationOccurrence(text="Boston", position=12))

        output = stream.getvalue()
        assert '"text": "Boston"' in output
        assert '"position": 12' in output

    def test_dict_pretty_printed(self, captured):
        """Test that other objects are pretty-printed."""
        logger, stream = captured

        logger.warning({"query": "boston", "hits": [1, 2]})

        assert "{'hits': [1, 2], 'query': 'boston'}" in stream.getvalue()

    def test_pprint_false_uses_raw_object(self, captured):
        """Test that pprint=False logs the object unformatted."""
        logger, stream = captured

        logger.error(LocationOccurrence(text="Boston"), pprint=False)

        assert "text='Boston'" in stream.getvalue()

    def test_delegates_to_underlying_logger(self, captured):
        """Test that unknown attributes come from the wrapped logger."""
        logger, _ = captured

        assert logger.name == "test_gazetteer_logging"
        assert logger.isEnabledFor(logging.DEBUG)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_single_handler(self):
        """Test that repeated setup attaches only one handler."""
        setup_logging("test_gazetteer_setup")
        setup_logging("test_gazetteer_setup")

        assert len(logging.getLogger("test_gazetteer_setup").handlers) == 1

    def test_explicit_level(self):
        """Test that an explicit level is applied."""
        logger = setup_logging("test_gazetteer_level", level=logging.DEBUG)

        assert logger.level == logging.DEBUG

    @pytest.mark.parametrize("value, expected", [("debug", logging.DEBUG), ("20", logging.INFO), ("bogus", logging.WARNING)])
    def test_level_from_env(self, monkeypatch, value, expected):
        """Test that GAZETTEER_LOG_LEVEL sets the level."""
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, value)

        logger = setup_logging(f"test_gazetteer_env_{value}")

        assert logger.level == expected
