import pytest

from mastermind import (
    ContradictoryHistoryError,
    DummyGuesser,
    Feedback,
    GameConfig,
    HistoryEntry,
    InfeasibleFeedbackError,
    MastermindSolver,
    Strategy,
    entropy_from_counts,
    evaluate,
    make_solver,
    max_partitions,
    partition_counts,
    valid_codes,
)
from mastermind_tester import simulate_game

SMALL = GameConfig(length=3, colors=4)


def test_dummy_guesser_ignores_history():
    config = GameConfig(length=4, colors=8)
    dummy = DummyGuesser(config)
    assert dummy.guess([]) == ((0, 0, 0, 0), 0.0)
    history = [
        HistoryEntry((1, 2, 3, 4), Feedback(1, 2)),
        HistoryEntry((7, 6, 5, 4), Feedback(0, 0)),
        HistoryEntry((0, 0, 0, 0), Feedback(4, 0)),
    ]
    assert dummy.guess(history)[0] == (0, 0, 0, 0)


def test_make_solver():
    assert isinstance(make_solver(SMALL, "dummy"), DummyGuesser)
    solver = make_solver(SMALL, "entropy", guess_space="all")
    assert isinstance(solver, MastermindSolver)
    assert solver.strategy is Strategy.ENTROPY
    with pytest.raises(ValueError):
        make_solver(SMALL, "random")


@pytest.mark.parametrize("kwargs", [{"guess_space": "some"}, {"scoring": "fuzzy"}, {"workers": 0}])
def test_solver_rejects_bad_options(kwargs):
    with pytest.raises(ValueError):
        MastermindSolver(SMALL, **kwargs)


def test_partition_counts_cover_consistent_set():
    codes = list(valid_codes(3, 4))
    counts = partition_counts((0, 1, 2), codes, 3)
    assert len(counts) == max_partitions(3)
    assert sum(counts) == len(codes)
    assert counts[-1] == 1


def test_entropy_from_counts():
    assert entropy_from_counts([0, 4, 0], 4) == 0.0
    assert entropy_from_counts([1, 1], 2) == pytest.approx(1.0)
    assert entropy_from_counts([1, 1, 1, 1], 4) == pytest.approx(2.0)
    assert entropy_from_counts([], 0) == 0.0


@pytest.mark.parametrize("strategy", list(Strategy))
def test_first_guess_is_first_code(strategy):
    # with no history every distinct-color code splits the codes the same way
    solver = MastermindSolver(SMALL, strategy=strategy, guess_space="codes")
    guess, _score = solver.guess([])
    assert guess == (2, 1, 0)


@pytest.mark.parametrize("strategy", list(Strategy))
@pytest.mark.parametrize("guess_space", ["all", "codes", "candidates"])
def test_solves_every_secret(strategy, guess_space):
    solver = MastermindSolver(SMALL, strategy=strategy, guess_space=guess_space)
    for secret in valid_codes(3, 4):
        result = simulate_game(secret=secret, solver=solver, config=SMALL, max_turns=24)
        assert result.solved, secret


def test_solves_with_multiset_scoring():
    solver = MastermindSolver(SMALL, strategy=Strategy.ENTROPY, guess_space="all", scoring="multiset")
    for secret in valid_codes(3, 4):
        result = simulate_game(secret=secret, solver=solver, config=SMALL, scoring="multiset", max_turns=24)
        assert result.solved, secret


def test_single_candidate_is_played():
    history = [HistoryEntry((2, 1, 0), Feedback(0, 3))]
    assert MastermindSolver(SMALL, Strategy.MINIMAX).guess(history) == ((2, 1, 0), 1.0)
    guess, score = MastermindSolver(SMALL, Strategy.ENTROPY, guess_space="all").guess(history)
    assert guess == (2, 1, 0)
    assert score == pytest.approx(max_partitions(3) - 1)


def test_minimax_commits_to_a_candidate_when_buckets_are_singletons():
    solver = MastermindSolver(GameConfig(length=3, colors=5), Strategy.MINIMAX, guess_space="all")
    for secret in [(0, 1, 2), (4, 3, 2), (1, 4, 0)]:
        history = []
        for _ in range(12):
            guess, score = solver.guess(history)
            if score == 1.0:
                assert guess in solver.candidates(history)
            if guess == secret:
                break
            history.append(HistoryEntry(guess, evaluate(secret, guess)))
        assert guess == secret


def test_guess_has_no_hidden_state():
    solver = MastermindSolver(SMALL, Strategy.ENTROPY)
    history = [HistoryEntry((2, 1, 0), evaluate((3, 0, 2), (2, 1, 0)))]
    snapshot = list(history)
    assert solver.guess(history) == solver.guess(history)
    assert history == snapshot


def test_contradictory_history_raises():
    history = [
        HistoryEntry((0, 1, 2), Feedback(0, 3)),
        HistoryEntry((0, 1, 2), Feedback(3, 0)),
    ]
    for strategy in Strategy:
        with pytest.raises(ContradictoryHistoryError):
            MastermindSolver(SMALL, strategy).guess(history)


def test_malformed_history_raises():
    solver = MastermindSolver(SMALL)
    with pytest.raises(InfeasibleFeedbackError):
        solver.guess([HistoryEntry((0, 1, 2), Feedback(2, 2))])
    with pytest.raises(ValueError):
        solver.guess([HistoryEntry((0, 1), Feedback(0, 0))])
    with pytest.raises(ValueError):
        solver.guess([HistoryEntry((0, 1, 9), Feedback(0, 0))])


@pytest.mark.parametrize("strategy", list(Strategy))
def test_parallel_scoring_matches_sequential(strategy):
    config = GameConfig(length=3, colors=5)
    secret = (4, 0, 3)
    sequential = MastermindSolver(config, strategy, guess_space="all")
    parallel = MastermindSolver(config, strategy, guess_space="all", workers=2)
    history = []
    for _ in range(2):
        expected = sequential.guess(history)
        assert parallel.guess(history) == expected
        history.append(HistoryEntry(expected[0], evaluate(secret, expected[0])))


def test_log_callback_receives_diagnostics():
    messages = []
    MastermindSolver(SMALL, log=messages.append).guess([])
    assert messages[0] == "solver: 24 consistent code(s)"
    assert messages[1].startswith("solver: minimax picked (2, 1, 0)")
