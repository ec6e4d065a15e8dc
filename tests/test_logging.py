import logging

from abigen.core import get_logger, is_debug, set_debug


def test_set_debug():
    logger = get_logger("abigen.tests.debug")
    fixed = get_logger("abigen.tests.fixed", override_level=logging.ERROR)
    assert logger.level == logging.WARNING
    assert not is_debug()

    try:
        set_debug(True)
        assert is_debug()
        assert logger.level == logging.DEBUG
        assert fixed.level == logging.ERROR
    finally:
        set_debug(False)
    assert logger.level == logging.WARNING
