import logging

from sheetimport.logger import DEFAULT_FORMAT, ROOT_LOGGER_NAME, get_logger, set_level


def _package_stream_handlers(logger):
    # pytest's logging plugin attaches its own capture handlers next to ours.
    return [
        h for h in logger.handlers
        if type(h) is logging.StreamHandler
        and h.formatter is not None
        and h.formatter._fmt == DEFAULT_FORMAT
    ]


def test_package_logger_has_single_stdout_handler():
    get_logger("sheetimport.pipeline")
    get_logger("sheetimport.mapping.countries")

    root = logging.getLogger(ROOT_LOGGER_NAME)
    assert len(_package_stream_handlers(root)) == 1
    assert root.propagate is False


def test_repeated_get_logger_adds_no_handlers():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    get_logger("sheetimport.pipeline")
    before = len(_package_stream_handlers(root))

    get_logger("sheetimport.pipeline")
    get_logger("sheetimport.template.writer")

    assert len(_package_stream_handlers(root)) == before == 1


def test_set_level_updates_handlers():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    previous = root.level
    try:
        set_level(logging.DEBUG)
        assert root.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in _package_stream_handlers(root))
    finally:
        set_level(previous)
