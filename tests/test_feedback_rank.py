import pytest

from mastermind import (
    Feedback,
    InfeasibleFeedbackError,
    feedback_from_rank,
    feedback_rank,
    max_partitions,
    solved_feedback,
    triangular,
)


def _feasible(length):
    return [Feedback(c, e) for e in range(length + 1) for c in range(length - e + 1)]


def test_triangular_and_max_partitions():
    assert [triangular(i) for i in range(5)] == [1, 3, 6, 10, 15]
    assert max_partitions(3) == 10
    assert max_partitions(4) == 15
    assert max_partitions(6) == 28


@pytest.mark.parametrize("length", range(1, 8))
def test_rank_is_a_bijection(length):
    feedbacks = _feasible(length)
    assert len(feedbacks) == max_partitions(length)
    ranks = sorted(feedback_rank(f, length) for f in feedbacks)
    assert ranks == list(range(max_partitions(length)))


@pytest.mark.parametrize("length", range(1, 8))
def test_solved_feedback_ranks_last(length):
    assert feedback_rank(solved_feedback(length), length) == max_partitions(length) - 1
    assert feedback_rank(Feedback(0, 0), length) == 0


def test_rank_layout_for_three_positions():
    assert feedback_rank(Feedback(color_only=1, exact=0), 3) == 1
    assert feedback_rank(Feedback(color_only=3, exact=0), 3) == 3
    assert feedback_rank(Feedback(color_only=0, exact=1), 3) == 4
    assert feedback_rank(Feedback(color_only=2, exact=1), 3) == 6
    assert feedback_rank(Feedback(color_only=1, exact=2), 3) == 8
    assert feedback_rank(Feedback(color_only=0, exact=3), 3) == 9


@pytest.mark.parametrize("feedback", [Feedback(2, 3), Feedback(0, 5), Feedback(-1, 0), Feedback(0, -1)])
def test_infeasible_feedback_raises(feedback):
    with pytest.raises(InfeasibleFeedbackError):
        feedback_rank(feedback, 4)
    assert issubclass(InfeasibleFeedbackError, ValueError)


@pytest.mark.parametrize("length", range(1, 7))
def test_feedback_from_rank_inverts_rank(length):
    for index in range(max_partitions(length)):
        assert feedback_rank(feedback_from_rank(index, length), length) == index


def test_feedback_from_rank_out_of_range():
    with pytest.raises(ValueError):
        feedback_from_rank(10, 3)
    with pytest.raises(ValueError):
        feedback_from_rank(-1, 3)
