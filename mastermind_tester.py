#!/usr/bin/env python3
"""mastermind_tester.py

Runs automated games using the solver in mastermind.py against known secrets
and prints summary statistics.
Optionally writes a matplotlib graph to disk.

Examples:
  python3 mastermind_tester.py --length 4 --colors 6 --strategy minimax
  python3 mastermind_tester.py --strategy entropy --guess-space candidates --limit 100 --seed 7 --plot results.png

Notes:
- Every distinct-color code is played as the secret unless --limit is given.
- Use --plot to require matplotlib.
"""

from __future__ import annotations

import argparse
import random
import statistics
import sys
import time
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional

import tqdm

import mastermind


@dataclass(frozen=True)
class GameResult:
    secret: mastermind.Code
    solved: bool
    turns: int
    final_candidates: int
    first_guess: Optional[mastermind.Guess]


def _iter_progress(iterable, *, enabled: bool, desc: str, unit: str, total: Optional[int] = None):
    if enabled:
        return tqdm.tqdm(iterable, desc=desc, unit=unit, total=total)
    return iterable


# simulate_game plays one game: the solver guesses, the secret answers through
# the solver's own scoring rule, until the guess equals the secret
def simulate_game(
    *,
    secret: mastermind.Code,
    solver: mastermind.Solver,
    config: mastermind.GameConfig,
    scoring: str = "presence",
    max_turns: int = 10,
) -> GameResult:
    oracle = mastermind.SCORERS[scoring]
    history: List[mastermind.HistoryEntry] = []

    first_guess: Optional[mastermind.Guess] = None
    for turn in range(1, max_turns + 1):
        try:
            guess, _score = solver.guess(history)
        except mastermind.ContradictoryHistoryError:
            return GameResult(
                secret=secret,
                solved=False,
                turns=turn,
                final_candidates=0,
                first_guess=first_guess,
            )

        if turn == 1:
            first_guess = guess

        feedback = oracle(secret, guess)
        if guess == secret:
            return GameResult(
                secret=secret,
                solved=True,
                turns=turn,
                final_candidates=1,
                first_guess=first_guess,
            )

        history.append(mastermind.HistoryEntry(guess, feedback))

    remaining = mastermind.consistent_codes(
        history, mastermind.valid_codes(config.length, config.colors), oracle
    )
    return GameResult(
        secret=secret,
        solved=False,
        turns=max_turns,
        final_candidates=len(remaining),
        first_guess=first_guess,
    )


def pick_secrets(config: mastermind.GameConfig, limit: int = 0, seed: Optional[int] = None) -> List[mastermind.Code]:
    secrets = list(mastermind.valid_codes(config.length, config.colors))
    if limit and 0 < limit < len(secrets):
        secrets = random.Random(seed).sample(secrets, limit)
    return secrets


def summarize(results: Iterable[GameResult]) -> str:
    results = list(results)
    if not results:
        return "No results."

    solved = [r for r in results if r.solved]
    failed = [r for r in results if not r.solved]

    dist = Counter(r.turns for r in solved)
    first_guess_counts = Counter(r.first_guess for r in results if r.first_guess is not None)

    lines: List[str] = []
    lines.append(f"Games: {len(results)}")
    lines.append(f"Solved: {len(solved)} ({len(solved) / len(results) * 100:.2f}%)")
    lines.append(f"Failed: {len(failed)} ({len(failed) / len(results) * 100:.2f}%)")

    if solved:
        turns_list = [r.turns for r in solved]
        lines.append(f"Avg turns (solved): {statistics.mean(turns_list):.3f}")
        lines.append(f"Median turns (solved): {statistics.median(turns_list):.1f}")
        lines.append(f"Worst case (solved): {max(turns_list)}")
        lines.append("Turn distribution (solved): " + ", ".join(f"{t}:{dist[t]}" for t in sorted(dist)))

    if first_guess_counts:
        (top_guess, top_count) = first_guess_counts.most_common(1)[0]
        lines.append(f"Most common first guess: {top_guess} ({top_count} / {len(results)})")

    if failed:
        examples = ", ".join(str(r.secret) for r in failed[:10])
        lines.append(f"Failed examples (up to 10): {examples}")

    return "\n".join(lines)


def plot_results(*, results: List[GameResult], max_turns: int, out_path: str, title: str = "Mastermind solver results") -> None:
    # Import matplotlib only if plotting is requested.
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt  # noqa: E402

    total = len(results)
    solved = [r for r in results if r.solved]
    failed = [r for r in results if not r.solved]

    solved_counts = Counter(r.turns for r in solved)

    xs = list(range(1, max_turns + 1))
    ys = [solved_counts.get(t, 0) for t in xs]

    fail_x = max_turns + 1
    fail_y = len(failed)

    fig, ax = plt.subplots(figsize=(10, 4.5))
    ax.bar(xs, ys, label="Solved", color="C0")
    ax.bar([fail_x], [fail_y], label="Failed", color="C3")

    ax.set_title(title)
    ax.set_xlabel("Turns to solve")
    ax.set_ylabel("# games")
    ax.set_xticks(xs + [fail_x])
    ax.set_xticklabels([str(t) for t in xs] + ["fail"])

    solved_pct = (len(solved) / total * 100.0) if total else 0.0
    ax.text(
        0.99,
        0.95,
        f"Solved: {len(solved)}/{total} ({solved_pct:.1f}%)",
        transform=ax.transAxes,
        ha="right",
        va="top",
    )

    ax.legend(loc="upper left")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run Mastermind solver simulations and print statistics.")
    ap.add_argument("--length", type=int, default=mastermind.DEFAULT_LENGTH, help="Number of positions in the code.")
    ap.add_argument("--colors", type=int, default=mastermind.DEFAULT_COLORS, help="Number of colors in the palette.")
    ap.add_argument("--strategy", choices=["minimax", "entropy", "dummy"], default="minimax")
    ap.add_argument(
        "--guess-space",
        choices=list(mastermind.GUESS_SPACES),
        default="codes",
        help="Score all sequences, only distinct-color codes, or only remaining candidates.",
    )
    ap.add_argument("--scoring", choices=list(mastermind.SCORERS), default="presence",
                    help="Scoring rule shared by the oracle and the solver.")
    ap.add_argument("--workers", type=int, default=1, help="Processes used to score guesses each turn.")
    ap.add_argument("--limit", type=int, default=0, help="Play a random sample of this many secrets (0 = all).")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for --limit sampling.")
    ap.add_argument("--max-turns", type=int, default=10, help="Max turns per game.")
    ap.add_argument("--no-progress", action="store_true", help="Disable progress bars.")
    ap.add_argument("--verbose", action="store_true", help="Print per-game results.")
    ap.add_argument("--plot", type=str, default=None, help="Write a matplotlib graph to this path (e.g. results.png).")
    args = ap.parse_args(argv)

    start_t = time.time()

    def log(msg: str) -> None:
        if not args.verbose:
            return
        dt = time.time() - start_t
        print(f"[{dt:7.2f}s] {msg}")

    try:
        config = mastermind.GameConfig(length=args.length, colors=args.colors)
        solver = mastermind.make_solver(
            config,
            strategy=args.strategy,
            guess_space=args.guess_space,
            scoring=args.scoring,
            workers=args.workers,
        )
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    secrets = pick_secrets(config, limit=args.limit, seed=args.seed)

    results: List[GameResult] = []
    for secret in _iter_progress(secrets, enabled=(not args.no_progress), desc="Simulating", unit="game"):
        result = simulate_game(
            secret=secret,
            solver=solver,
            config=config,
            scoring=args.scoring,
            max_turns=args.max_turns,
        )
        log(f"{secret}: {'solved' if result.solved else 'failed'} in {result.turns} turn(s)")
        results.append(result)

    print(summarize(results))

    if args.plot:
        try:
            plot_results(
                results=results,
                max_turns=args.max_turns,
                out_path=args.plot,
                title=f"Mastermind {args.strategy} ({config.length} of {config.colors} colors)",
            )
            print(f"Wrote plot: {args.plot}")
        except ModuleNotFoundError as e:
            print(f"Plot requested but missing dependency: {e}. Install matplotlib to use --plot.", file=sys.stderr)
            return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
