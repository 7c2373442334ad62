import matplotlib

matplotlib.use("Agg")

import pytest

from genogram_viz.builder import build_graph
from genogram_viz.model import Family, Marriage, Person


def make_person(key, sex="M", **kwargs):
    kwargs.setdefault("name", f"Person {key}")
    return Person(key=key, sex=sex, **kwargs)


@pytest.fixture
def person():
    return make_person


@pytest.fixture
def couple_with_child():
    """A(M, 1) and B(F, 2) married with one child C(3)."""
    return Family(
        people=[make_person(1, "M"), make_person(2, "F"), make_person(3, "M")],
        marriages=[Marriage(1, 2, [3])],
    )


@pytest.fixture
def two_spouses():
    """A(M, 1) married to B(F, 2) and D(F, 4); B descends from two older generations."""
    return Family(
        people=[
            make_person(1, "M"),
            make_person(2, "F"),
            make_person(4, "F"),
            make_person(10, "M"),
            make_person(11, "F"),
            make_person(20, "M"),
            make_person(21, "F"),
            make_person(5, "F"),
            make_person(6, "M"),
        ],
        marriages=[
            Marriage(20, 21, [10]),
            Marriage(10, 11, [2]),
            Marriage(1, 2, [5]),
            Marriage(1, 4, [6]),
        ],
    )


@pytest.fixture
def three_generations():
    """Two families whose children marry, with grandchildren; nobody married twice."""
    return Family(
        people=[
            make_person(1, "M"),
            make_person(2, "F"),
            make_person(3, "M"),
            make_person(4, "F"),
            make_person(5, "M"),
            make_person(6, "F"),
            make_person(7, "F"),
            make_person(8, "M"),
            make_person(9, "F"),
            make_person(12, "M"),
            make_person(13, "F"),
        ],
        marriages=[
            Marriage(1, 2, [5, 7]),
            Marriage(3, 4, [6, 8]),
            Marriage(5, 6, [9, 12]),
            Marriage(8, 13, []),
        ],
    )


@pytest.fixture
def graph_of():
    return build_graph
