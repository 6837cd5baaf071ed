import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_fuzzpatch_logging():
    yield
    log = logging.getLogger("fuzzpatch")
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.setLevel(logging.NOTSET)
    log.propagate = True
