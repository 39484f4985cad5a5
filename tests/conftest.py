import matplotlib
import pytest

matplotlib.use('Agg')

from graphcalc import create_default_context  # noqa: E402


@pytest.fixture
def ctx():
    return create_default_context()
