import pytest

from injectinator._injector import _reset_global_injector


@pytest.fixture(autouse=True)
def fresh_global_injector():
    _reset_global_injector()
    yield
    _reset_global_injector()
