from chesscore.search import RootMove, SearchLimits
from chesscore.types import VALUE_INFINITE, Color, make_move


def _root(move, score, previous=-VALUE_INFINITE):
    rm = RootMove(move)
    rm.score = score
    rm.previous_score = previous
    return rm


def test_root_move_equals_its_first_move():
    m = make_move(12, 28)
    rm = RootMove(m)
    assert rm == m
    assert not rm == make_move(11, 27)
    assert rm.pv == [m]
    assert rm.score == -VALUE_INFINITE


def test_root_moves_can_be_found_by_move():
    moves = [make_move(12, 28), make_move(11, 27), make_move(6, 21)]
    roots = [RootMove(m) for m in moves]
    assert roots.index(moves[2]) == 2
    assert moves[1] in roots


def test_sorting_is_descending_by_score():
    roots = [_root(make_move(1, 2), 10), _root(make_move(3, 4), 50), _root(make_move(5, 6), -5)]
    ordered = sorted(roots)
    assert [rm.score for rm in ordered] == [50, 10, -5]


def test_ties_broken_by_previous_score():
    low = _root(make_move(1, 2), 20, previous=1)
    high = _root(make_move(3, 4), 20, previous=9)
    assert high < low
    assert sorted([low, high])[0] is high


def test_sort_is_stable_for_equal_moves():
    roots = [_root(make_move(s, s + 8), -VALUE_INFINITE) for s in range(8)]
    roots[5].score = 100
    ordered = sorted(roots)
    assert ordered[0] is roots[5]
    assert ordered[1:] == [rm for i, rm in enumerate(roots) if i != 5]


def test_time_management_depends_on_clock():
    limits = SearchLimits()
    assert not limits.use_time_management()
    limits.time[Color.BLACK] = 1000
    assert limits.use_time_management()
    assert SearchLimits(depth=5).depth == 5