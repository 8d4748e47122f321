#!/usr/bin/env python3
"""
mastermind.py

A Mastermind code breaker that picks guesses by partitioning the codes still
consistent with the feedback so far, either minimizing the worst-case bucket
(minimax) or maximizing expected information gain (entropy).
You hold the secret (or play a board elsewhere); after each guess you type
the two feedback counts here.

Feedback format:
- first the number of colors that are right but misplaced (white pegs)
- then the number of exact matches (red pegs)

The secret is N colors out of a palette of K, all distinct.

Usage:
  python3 mastermind.py --length 4 --colors 6 --strategy minimax
  python3 mastermind.py --length 4 --colors 8 --strategy entropy --guess-space all --workers 8
"""

from __future__ import annotations

import argparse
import enum
import math
import sys
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Protocol, Sequence, Tuple

import tqdm


Guess = Tuple[int, ...]  # each int in [0, colors)
Code = Guess  # a guess whose symbols are pairwise distinct

LogFn = Callable[[str], None]
Scorer = Callable[[Code, Guess], "Feedback"]

DEFAULT_LENGTH = 4
DEFAULT_COLORS = 6

COLOR_NAMES = ("red", "green", "yellow", "blue", "orange", "pink", "white", "grey")

GUESS_SPACES = ("all", "codes", "candidates")


class InfeasibleFeedbackError(ValueError):
    """Raised for a feedback pair no code of the given length can produce."""


class ContradictoryHistoryError(ValueError):
    """Raised when no code agrees with every recorded feedback."""


class Feedback(NamedTuple):
    color_only: int
    exact: int


class HistoryEntry(NamedTuple):
    guess: Guess
    feedback: Feedback


@dataclass(frozen=True)
class GameConfig:
    length: int = DEFAULT_LENGTH
    colors: int = DEFAULT_COLORS

    def __post_init__(self) -> None:
        if self.length < 1:
            raise ValueError(f"Code length must be at least 1, got {self.length}.")
        if self.colors < self.length:
            raise ValueError(
                f"Need at least as many colors as positions for distinct codes "
                f"(length={self.length}, colors={self.colors})."
            )

    @property
    def max_partitions(self) -> int:
        return max_partitions(self.length)


# ---------------------------------------------------------------------------
# enumeration
# ---------------------------------------------------------------------------

# sequence_space yields every length-N sequence over `colors` symbols,
# counting with position 0 as the fastest digit: 000, 100, 200, ..., 010, ...
def sequence_space(length: int, colors: int, skip: int = 0) -> Iterator[Guess]:
    if length < 1 or colors < 1:
        raise ValueError(f"length and colors must be positive, got {length} and {colors}.")
    digits = [0] * length
    while True:
        if skip:
            skip -= 1
        else:
            yield tuple(digits)
        # increment with carry; falling off the last digit means we wrapped around
        for i in range(length):
            digits[i] += 1
            if digits[i] < colors:
                break
            digits[i] = 0
        else:
            return


def sequence_count(length: int, colors: int) -> int:
    return colors ** length


# is_valid_code checks that no color shows up twice, using a bitmask of seen colors
def is_valid_code(seq: Guess) -> bool:
    seen = 0
    for color in seq:
        bit = 1 << color
        if seen & bit:
            return False
        seen |= bit
    return True


def valid_codes(length: int, colors: int) -> Iterator[Code]:
    """Lazily yield the sequences with pairwise-distinct symbols, in sequence_space order."""
    # the all-zero seed always repeats a color unless there is a single position
    seed_skip = 1 if length > 1 else 0
    return (seq for seq in sequence_space(length, colors, skip=seed_skip) if is_valid_code(seq))


def code_count(length: int, colors: int) -> int:
    return math.perm(colors, length)


# ---------------------------------------------------------------------------
# scoring
# ---------------------------------------------------------------------------

def evaluate(code: Code, guess: Guess) -> Feedback:
    """
    Score a guess against a code: (colors present but misplaced, exact matches).

    The code must have distinct symbols; that is not re-checked here.
    color_only only asks whether a guessed color is present in the code, not how
    many copies are left, so a guess that repeats a color can be credited for it
    more than once: code (1,2,3,4) vs guess (1,3,3,5) gives color_only=1, exact=2.
    Use evaluate_multiset for the usual board-game counting.
    """
    present = 0
    for color in code:
        present |= 1 << color

    exact = 0
    color_only = 0
    for c, g in zip(code, guess):
        if c == g:
            exact += 1
        elif present & (1 << g):
            color_only += 1
    return Feedback(color_only, exact)


# evaluate_multiset counts each color at most as often as it occurs in both
# sequences, so it is also correct for codes with repeated colors
def evaluate_multiset(code: Code, guess: Guess) -> Feedback:
    exact = 0
    code_counts: Dict[int, int] = {}
    guess_counts: Dict[int, int] = {}
    for c, g in zip(code, guess):
        if c == g:
            exact += 1
        code_counts[c] = code_counts.get(c, 0) + 1
        guess_counts[g] = guess_counts.get(g, 0) + 1
    common = sum(min(n, guess_counts.get(color, 0)) for color, n in code_counts.items())
    return Feedback(common - exact, exact)


SCORERS: Dict[str, Scorer] = {
    "presence": evaluate,
    "multiset": evaluate_multiset,
}


# ---------------------------------------------------------------------------
# feedback ranking
# ---------------------------------------------------------------------------
# Feedbacks are laid out in blocks by exact count, each block ordered by
# color_only. For length 3:
#   exact=0: (0,0) (1,0) (2,0) (3,0) -> 0..3
#   exact=1: (0,1) (1,1) (2,1)       -> 4..6
#   exact=2: (0,2) (1,2)             -> 7..8
#   exact=3: (0,3)                   -> 9
# so the solved feedback is always the last index.

def triangular(i: int) -> int:
    return (i + 2) * (i + 1) // 2


def max_partitions(length: int) -> int:
    return triangular(length)


def is_feasible(feedback: Feedback, length: int) -> bool:
    color_only, exact = feedback
    return 0 <= exact <= length and color_only >= 0 and exact + color_only <= length


def feedback_rank(feedback: Feedback, length: int) -> int:
    if not is_feasible(feedback, length):
        raise InfeasibleFeedbackError(
            f"Feedback {tuple(feedback)} is impossible for length {length} "
            f"(need exact + color_only <= {length})."
        )
    return triangular(length) - triangular(length - feedback.exact) + feedback.color_only


def feedback_from_rank(index: int, length: int) -> Feedback:
    if not 0 <= index < max_partitions(length):
        raise ValueError(f"Rank {index} out of range for length {length}.")
    exact = 0
    while index > length - exact:
        index -= length - exact + 1
        exact += 1
    return Feedback(index, exact)


def solved_feedback(length: int) -> Feedback:
    return Feedback(0, length)


# ---------------------------------------------------------------------------
# consistency filtering
# ---------------------------------------------------------------------------

def is_consistent(code: Code, history: Sequence[HistoryEntry], scorer: Scorer = evaluate) -> bool:
    for entry in history:
        if scorer(code, entry.guess) != entry.feedback:
            return False
    return True


# consistent_codes keeps every code of the universe that would have produced
# exactly the recorded feedback for every past guess
def consistent_codes(
    history: Sequence[HistoryEntry],
    universe: Iterable[Code],
    scorer: Scorer = evaluate,
) -> List[Code]:
    return [code for code in universe if is_consistent(code, history, scorer)]


def validate_history(history: Sequence[HistoryEntry], config: GameConfig) -> None:
    for turn, entry in enumerate(history, start=1):
        if len(entry.guess) != config.length:
            raise ValueError(
                f"Turn {turn}: guess {entry.guess} has {len(entry.guess)} positions, expected {config.length}."
            )
        if any(not 0 <= color < config.colors for color in entry.guess):
            raise ValueError(f"Turn {turn}: guess {entry.guess} uses a color outside 0..{config.colors - 1}.")
        if not is_feasible(entry.feedback, config.length):
            raise InfeasibleFeedbackError(
                f"Turn {turn}: feedback {tuple(entry.feedback)} is impossible for length {config.length}."
            )


# ---------------------------------------------------------------------------
# guess ranking
# ---------------------------------------------------------------------------

class Strategy(enum.Enum):
    MINIMAX = "minimax"
    ENTROPY = "entropy"


# partition_counts buckets the consistent codes by the feedback `guess` would get;
# each call owns its count list
def partition_counts(guess: Guess, codes: Sequence[Code], length: int, scorer: Scorer = evaluate) -> List[int]:
    counts = [0] * max_partitions(length)
    for code in codes:
        counts[feedback_rank(scorer(code, guess), length)] += 1
    return counts


# compute Shannon entropy from counts
# H(X) = - sum(p(x) * log2(p(x))) over all feedbacks x
# the counts are how many consistent codes yield each feedback for one guess,
# so H is the expected information we get back from playing that guess
def entropy_from_counts(counts: Iterable[int], total: int) -> float:
    """Shannon entropy in bits, from bucket counts"""
    if total <= 0:
        return 0.0
    h = 0.0
    for c in counts:
        if c:
            p = c / total
            h -= p * math.log2(p)
    return h


def minimax_score(counts: Sequence[int]) -> int:
    return max(counts)


def entropy_score(counts: Sequence[int], total: int, length: int) -> float:
    h = entropy_from_counts(counts, total)
    # a guess that is the last remaining code beats any amount of entropy
    if total == 1 and counts[feedback_rank(solved_feedback(length), length)] == 1:
        h += max_partitions(length) - 1
    return h


def score_guess(
    guess: Guess,
    codes: Sequence[Code],
    length: int,
    strategy: Strategy,
    scorer: Scorer = evaluate,
) -> float:
    counts = partition_counts(guess, codes, length, scorer)
    if strategy is Strategy.MINIMAX:
        return float(minimax_score(counts))
    return entropy_score(counts, len(codes), length)


# worker-side state for parallel scoring, installed once per process by _init_worker
_worker_codes: List[Code] = []
_worker_length = 0
_worker_strategy = Strategy.MINIMAX
_worker_scorer: Scorer = evaluate


def _init_worker(codes: List[Code], length: int, strategy: Strategy, scoring: str) -> None:
    global _worker_codes, _worker_length, _worker_strategy, _worker_scorer
    _worker_codes = codes
    _worker_length = length
    _worker_strategy = strategy
    _worker_scorer = SCORERS[scoring]


def _score_in_worker(guess: Guess) -> float:
    return score_guess(guess, _worker_codes, _worker_length, _worker_strategy, _worker_scorer)


class Solver(Protocol):
    def guess(self, history: Sequence[HistoryEntry]) -> Tuple[Guess, float]:
        ...


class DummyGuesser:
    """Always guesses color 0 everywhere. Only useful for exercising a harness."""

    def __init__(self, config: GameConfig):
        self.config = config

    def guess(self, history: Sequence[HistoryEntry]) -> Tuple[Guess, float]:
        return (0,) * self.config.length, 0.0


# solver class for Mastermind, ranking guesses by minimax or entropy
class MastermindSolver:
    def __init__(
        self,
        config: GameConfig,
        strategy: Strategy = Strategy.MINIMAX,
        guess_space: str = "codes",
        scoring: str = "presence",
        workers: int = 1,
        show_progress: bool = False,
        log: Optional[LogFn] = None,
    ):
        """
        guess_space: "all" (every sequence, repeats allowed), "codes" (distinct
            colors only) or "candidates" (only codes still consistent).
        scoring: "presence" or "multiset", see evaluate / evaluate_multiset.
            The oracle must score the same way or the history stops making sense.
        workers: number of processes used to score candidate guesses.
        """
        if guess_space not in GUESS_SPACES:
            raise ValueError(f"guess_space must be one of {', '.join(GUESS_SPACES)}, got {guess_space!r}.")
        if scoring not in SCORERS:
            raise ValueError(f"scoring must be one of {', '.join(SCORERS)}, got {scoring!r}.")
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}.")
        self.config = config
        self.strategy = strategy
        self.guess_space = guess_space
        self.scoring = scoring
        self.scorer = SCORERS[scoring]
        self.workers = workers
        self.show_progress = show_progress
        self.log = log

    def _log(self, msg: str) -> None:
        if self.log is not None:
            self.log(msg)

    # codes still possible given the history, rebuilt from scratch every call
    def candidates(self, history: Sequence[HistoryEntry]) -> List[Code]:
        validate_history(history, self.config)
        universe = valid_codes(self.config.length, self.config.colors)
        return consistent_codes(history, universe, self.scorer)

    def _guess_pool(self, codes: List[Code]) -> Tuple[Iterable[Guess], int]:
        length, colors = self.config.length, self.config.colors
        if self.guess_space == "all":
            return sequence_space(length, colors), sequence_count(length, colors)
        if self.guess_space == "codes":
            return valid_codes(length, colors), code_count(length, colors)
        return codes, len(codes)

    def _score_pool(self, pool: Iterable[Guess], size: int, codes: List[Code]) -> Iterator[Tuple[Guess, float]]:
        if self.workers == 1:
            iterator = tqdm.tqdm(pool, total=size, desc="Scoring guesses", unit="guess") if self.show_progress else pool
            for g in iterator:
                yield g, score_guess(g, codes, self.config.length, self.strategy, self.scorer)
            return

        guesses = list(pool)
        chunksize = max(1, len(guesses) // (self.workers * 4))
        with ProcessPoolExecutor(
            max_workers=self.workers,
            initializer=_init_worker,
            initargs=(codes, self.config.length, self.strategy, self.scoring),
        ) as executor:
            scores: Iterable[float] = executor.map(_score_in_worker, guesses, chunksize=chunksize)
            if self.show_progress:
                scores = tqdm.tqdm(scores, total=len(guesses), desc="Scoring guesses", unit="guess")
            # map preserves submission order, so the fold below matches the sequential one
            yield from zip(guesses, scores)

    def guess(self, history: Sequence[HistoryEntry]) -> Tuple[Guess, float]:
        codes = self.candidates(history)
        if not codes:
            raise ContradictoryHistoryError(
                f"No code is consistent with the {len(history)} recorded feedback(s); "
                "one of them was probably mistyped."
            )
        self._log(f"solver: {len(codes)} consistent code(s)")

        pool, size = self._guess_pool(codes)
        scored = self._score_pool(pool, size, codes)
        if self.strategy is Strategy.MINIMAX:
            best_guess, best_score = min(scored, key=lambda x: x[1])
            if best_score == 1:
                # every bucket is a singleton: just play a code that can win right now
                best_guess = codes[0]
        else:
            best_guess, best_score = max(scored, key=lambda x: x[1])

        self._log(f"solver: {self.strategy.value} picked {best_guess} with score {best_score:.4f}")
        return best_guess, best_score


# make_solver builds a solver from the name used on the command line;
# the dummy guesser takes no options, so solver kwargs are ignored for it
def make_solver(config: GameConfig, strategy: str = "minimax", **kwargs) -> Solver:
    if strategy == "dummy":
        return DummyGuesser(config)
    return MastermindSolver(config, strategy=Strategy(strategy), **kwargs)


# ---------------------------------------------------------------------------
# console front end
# ---------------------------------------------------------------------------

def parse_palette(s: Optional[str]) -> Tuple[str, ...]:
    if s is None:
        return COLOR_NAMES
    return tuple(name.strip().lower() for name in s.split(",") if name.strip())


def validate_palette(palette: Sequence[str], colors: int) -> None:
    if len(palette) < colors:
        raise ValueError(f"Palette has {len(palette)} color name(s) but the game uses {colors} colors.")
    if len(set(palette[:colors])) != colors:
        raise ValueError("Palette color names must be unique.")


def format_guess(guess: Guess, palette: Sequence[str]) -> str:
    names = []
    for color in guess:
        if not 0 <= color < len(palette):
            raise ValueError(f"Color {color} has no name in a palette of {len(palette)}.")
        names.append(palette[color])
    return ", ".join(names)


# parse_guess accepts color names or digits, separated by commas and/or spaces,
# e.g. "red, blue, green, pink" or "0 3 1 5"
def parse_guess(s: str, palette: Sequence[str], config: GameConfig) -> Guess:
    tokens = [t for t in s.replace(",", " ").lower().split() if t]
    if len(tokens) != config.length:
        raise ValueError(f"Guess must have exactly {config.length} colors, got {len(tokens)}.")
    lookup = {name: i for i, name in enumerate(palette[: config.colors])}
    out = []
    for t in tokens:
        if t.isdigit() and int(t) < config.colors:
            out.append(int(t))
        elif t in lookup:
            out.append(lookup[t])
        else:
            raise ValueError(f"Unknown color {t!r}. Use one of: {', '.join(lookup)} (or 0..{config.colors - 1}).")
    return tuple(out)


def parse_count(s: str) -> int:
    s = s.strip()
    if not s.isdigit():
        raise ValueError(f"Expected a non-negative whole number, got {s!r}.")
    return int(s)


def _prompt(message: str) -> Optional[str]:
    try:
        answer = input(message).strip().lower()
    except EOFError:
        return None
    return None if answer == "quit" else answer


# read the two counts, asking again until they are numbers and possible together
def read_feedback(length: int) -> Optional[Feedback]:
    while True:
        colors_s = _prompt("Input correct colors (white): ")
        if colors_s is None:
            return None
        exact_s = _prompt("Input exact matches (red): ")
        if exact_s is None:
            return None
        try:
            feedback = Feedback(parse_count(colors_s), parse_count(exact_s))
        except ValueError as e:
            print(f"{e}\n")
            continue
        if not is_feasible(feedback, length):
            print(f"white + red can be at most {length}. Try again.\n")
            continue
        return feedback


def cli(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Mastermind code breaker (interactive CLI).")
    ap.add_argument("--length", type=int, default=DEFAULT_LENGTH, help="Number of positions in the code.")
    ap.add_argument("--colors", type=int, default=DEFAULT_COLORS, help="Number of colors in the palette.")
    ap.add_argument("--strategy", choices=["minimax", "entropy", "dummy"], default="minimax",
                    help="Guess ranking: smallest worst-case bucket or highest expected information.")
    ap.add_argument("--guess-space", choices=list(GUESS_SPACES), default="codes",
                    help="Score all sequences, only distinct-color codes, or only remaining candidates.")
    ap.add_argument("--scoring", choices=list(SCORERS), default="presence",
                    help="How misplaced colors are counted when a guess repeats a color.")
    ap.add_argument("--workers", type=int, default=1, help="Processes used to score guesses.")
    ap.add_argument("--palette", type=str, default=None,
                    help="Comma-separated color names, indexed by color number.")
    ap.add_argument("--no-progress", action="store_true", help="Disable progress bars.")
    ap.add_argument("--verbose", action="store_true", help="Print solver diagnostics.")
    ap.add_argument("--debug", action="store_true", help="Very verbose logs (history and candidates).")
    args = ap.parse_args(argv)

    verbose = bool(args.verbose or args.debug)
    debug = bool(args.debug)

    start_t = time.time()

    def log(msg: str) -> None:
        if not verbose:
            return
        dt = time.time() - start_t
        print(f"[{dt:7.2f}s] {msg}")

    def log_debug(msg: str) -> None:
        if not debug:
            return
        dt = time.time() - start_t
        print(f"[{dt:7.2f}s] DEBUG {msg}")

    try:
        config = GameConfig(length=args.length, colors=args.colors)
        palette = parse_palette(args.palette)
        validate_palette(palette, config.colors)
        solver = make_solver(
            config,
            strategy=args.strategy,
            guess_space=args.guess_space,
            scoring=args.scoring,
            workers=args.workers,
            show_progress=not args.no_progress,
            log=log,
        )
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    print("\n=== Mastermind Solver ===")
    print(f"Positions: {config.length} | Colors: {', '.join(palette[: config.colors])}")
    print(f"Possible codes: {code_count(config.length, config.colors)}")
    print("Feedback input: white pegs first, then red pegs. Type 'quit' to exit.\n")

    history: List[HistoryEntry] = []
    turn = 1
    while True:
        try:
            best_guess, score = solver.guess(history)
        except ContradictoryHistoryError as e:
            print(f"No codes left: {e}", file=sys.stderr)
            return 1

        log_debug(f"history: {[(e.guess, tuple(e.feedback)) for e in history]}")
        print(f"Turn {turn} | I'm guessing: {format_guess(best_guess, palette)}  (score {score:.4f})")

        while True:
            answer = _prompt("Enter the guess you used (or press Enter to use mine): ")
            if answer is None:
                return 0
            if not answer:
                break
            try:
                best_guess = parse_guess(answer, palette, config)
                break
            except ValueError as e:
                print(f"{e}\n")

        feedback = read_feedback(config.length)
        if feedback is None:
            return 0

        if feedback == solved_feedback(config.length):
            print(f"Solved in {turn} turns: {format_guess(best_guess, palette)}\n")
            return 0

        history.append(HistoryEntry(best_guess, feedback))
        print("")
        turn += 1


if __name__ == "__main__":
    raise SystemExit(cli())
