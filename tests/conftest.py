import pytest

from fieldguard.errors import new_error
from fieldguard.validation import BACKGROUND, by

ERR_ABC = new_error("err_abc", "error abc")
ERR_XYZ = new_error("err_xyz", "error xyz")


def contains(fragment: str, err):
    """Rule factory: value (a str) must contain ``fragment``."""
    return by(lambda ctx, value: None if fragment in value else err)


@pytest.fixture
def abc_rule():
    return contains("abc", ERR_ABC)


@pytest.fixture
def xyz_rule():
    return contains("xyz", ERR_XYZ)


@pytest.fixture
def recorder():
    """Rule that records every value it sees and never fails."""
    seen = []

    def _record(ctx, value):
        seen.append(value)
        return None

    return by(_record), seen


@pytest.fixture
def ctx():
    return BACKGROUND
