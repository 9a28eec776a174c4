import logging
import uuid

import pytest


@pytest.fixture
def logger_name():
    """Unique slow log channel prefix so tests never share logger levels."""
    name = f"test.slowlog.{uuid.uuid4().hex[:8]}"
    yield name
    for suffix in ("index", "delete"):
        logging.getLogger(f"{name}.{suffix}").setLevel(logging.NOTSET)
