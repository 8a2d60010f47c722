import pytest

from tests.factories import ALPHA, BETA, GAMMA, make_match


@pytest.fixture
def season_log():
    """
    Final table: Alpha 8 pts (5-2), Gamma 6 pts (6-3), Beta 1 pt (3-9).
    """
    return [
        make_match(101, 0, ALPHA, BETA, 2, 0),
        make_match(102, 1, GAMMA, ALPHA, 1, 1),
        make_match(103, 2, BETA, GAMMA, 0, 3),
        make_match(104, 3, BETA, ALPHA, 1, 2),
        make_match(105, 4, ALPHA, GAMMA, 0, 0),
        make_match(106, 5, GAMMA, BETA, 2, 2),
    ]
