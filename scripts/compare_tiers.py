"""Compare pilots for the human seat against the tiered AI opponent.

Plays many headless matches with a RandomAgent pilot and with a
TieredHeuristicAgent pilot, prints summary statistics and saves a chart.

Usage:
    python scripts/compare_tiers.py [--runs N] [--seed S] [--parallel]
"""

from __future__ import annotations

import argparse
import time

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from magical_vortex.engine.play_agents.heuristic_agent import TieredHeuristicAgent
from magical_vortex.engine.play_agents.random_agent import RandomAgent
from magical_vortex.engine.runner import BatchRunner


def run_comparison(n_runs: int = 200, base_seed: int = 0, parallel: bool = False) -> None:
    results = {}
    for label, pilot_class in [("RandomAgent", RandomAgent), ("TieredHeuristicAgent", TieredHeuristicAgent)]:
        print(f"\nRunning {n_runs} matches with a {label} pilot...")
        runner = BatchRunner(player_class=pilot_class, ai_class=TieredHeuristicAgent)
        t0 = time.time()
        telemetry = runner.run_batch(n_runs, base_seed=base_seed, parallel=parallel)
        elapsed = time.time() - t0

        wins = sum(1 for m in telemetry if m.final_result == "win")
        rounds_reached = [m.rounds_reached for m in telemetry]
        damage_to_ai = [r.damage_to_ai for m in telemetry for r in m.rounds]
        damage_to_player = [r.damage_to_player for m in telemetry for r in m.rounds]
        turns = [r.turns for m in telemetry for r in m.rounds]

        results[label] = {
            "wins": wins,
            "win_rate": wins / n_runs * 100,
            "rounds_reached": rounds_reached,
            "damage_to_ai": damage_to_ai,
            "damage_to_player": damage_to_player,
            "turns": turns,
            "elapsed": elapsed,
        }

        print(f"  Time: {elapsed:.1f}s ({elapsed/n_runs*1000:.0f}ms/match)")
        print(f"  Win rate: {wins}/{n_runs} ({wins/n_runs*100:.1f}%)")
        print(f"  Avg rounds reached: {np.mean(rounds_reached):.2f}")
        print(f"  Avg turns per round: {np.mean(turns):.1f} (median {np.median(turns):.0f})")
        print(f"  Avg damage dealt per round: {np.mean(damage_to_ai):.1f}")
        print(f"  Avg damage taken per round: {np.mean(damage_to_player):.1f}")

    generate_charts(results, n_runs)


def generate_charts(results: dict, n_runs: int) -> None:
    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    fig.suptitle(f"Pilots vs tiered AI, {n_runs} matches each", fontsize=16, fontweight="bold")

    colors = {"RandomAgent": "#e74c3c", "TieredHeuristicAgent": "#2ecc71"}
    labels = list(results.keys())

    # --- Chart 1: Win Rate ---
    ax = axes[0]
    win_rates = [results[l]["win_rate"] for l in labels]
    bars = ax.bar(labels, win_rates, color=[colors[l] for l in labels], edgecolor="black", linewidth=0.5)
    for bar, rate, r in zip(bars, win_rates, [results[l] for l in labels]):
        ax.text(bar.get_x() + bar.get_width()/2, bar.get_height() + 0.5,
                f'{rate:.1f}%\n({r["wins"]}/{n_runs})',
                ha='center', va='bottom', fontsize=11, fontweight='bold')
    ax.set_ylabel("Win Rate (%)")
    ax.set_title("Match Win Rate")
    ax.set_ylim(0, max(win_rates) * 1.4 + 5)

    # --- Chart 2: Rounds Reached ---
    ax = axes[1]
    bins = np.arange(0.5, 4.5, 1)
    for label in labels:
        reached = results[label]["rounds_reached"]
        ax.hist(reached, bins=bins, alpha=0.6, label=f'{label} (avg={np.mean(reached):.2f})',
                color=colors[label], edgecolor="black", linewidth=0.3)
    ax.set_xlabel("Rounds Reached")
    ax.set_ylabel("Count")
    ax.set_title("Rounds Reached Distribution")
    ax.legend()

    # --- Chart 3: Damage per Round ---
    ax = axes[2]
    x = np.arange(len(labels))
    dealt = [np.mean(results[l]["damage_to_ai"]) for l in labels]
    taken = [np.mean(results[l]["damage_to_player"]) for l in labels]
    ax.bar(x - 0.2, dealt, width=0.4, label="Dealt", color="#3498db", edgecolor="black", linewidth=0.5)
    ax.bar(x + 0.2, taken, width=0.4, label="Taken", color="#95a5a6", edgecolor="black", linewidth=0.5)
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel("Life per Round")
    ax.set_title("Average Damage per Round")
    ax.legend()

    plt.tight_layout()
    out_path = "tier_comparison.png"
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    print(f"\nChart saved to {out_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--runs", type=int, default=200, help="Number of matches per pilot")
    parser.add_argument("--seed", type=int, default=0, help="Base seed")
    parser.add_argument("--parallel", action="store_true", help="Use multiprocessing")
    args = parser.parse_args()
    run_comparison(args.runs, args.seed, args.parallel)
