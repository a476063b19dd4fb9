import pytest

import kestrel_ioc.api as api


@pytest.fixture(autouse=True)
def clean_state():
    api.reset()
    yield
    api.reset()
