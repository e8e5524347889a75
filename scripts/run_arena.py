"""
RUN_ARENA.py - headless arena runner
- Plays N games back to back with the same orchestrator the web server uses, without Flask.
- Models/labels/delays come from settings.yml / env; CLI flags override them.
- Prints each finished game and the final win tally.
Usage: python -u scripts/run_arena.py --games 3 --white random --black random --move-delay 0
"""
import argparse
import dataclasses
import logging

from llmchess_live.config import SETTINGS
from llmchess_live.supervisor import build_orchestrator


def _parse_log_level(name: str | None) -> int:
    name = (name or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--games", type=int, default=1, help="Number of games (cycles) to run")
    ap.add_argument("--white", default=None, help="White model (gateway model name or 'random')")
    ap.add_argument("--black", default=None, help="Black model (gateway model name or 'random')")
    ap.add_argument("--move-delay", type=float, default=None, help="Seconds between moves")
    ap.add_argument("--game-delay", type=float, default=None, help="Seconds between games")
    ap.add_argument("--seed", type=int, default=None, help="Seed for fallback/random agents")
    ap.add_argument("--start-fen", default=None, help="Start every game from this FEN")
    ap.add_argument("--log-level", default="INFO", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    logging.basicConfig(level=_parse_log_level(args.log_level), format="%(asctime)s %(levelname)s %(message)s")

    overrides = {
        "white_model": args.white,
        "black_model": args.black,
        "move_delay_s": args.move_delay,
        "game_delay_s": args.game_delay,
        "seed": args.seed,
        "start_fen": args.start_fen,
    }
    settings = dataclasses.replace(SETTINGS, **{k: v for k, v in overrides.items() if v is not None})

    orch = build_orchestrator(settings, max_sessions=max(1, args.games))
    try:
        orch.run_forever()
    except KeyboardInterrupt:
        print("Interrupted")
    finally:
        orch.stop()

    snap = orch.store.snapshot()
    print("\n=== Arena summary ===")
    print(f"Games started: {orch.loop.games_started}  (faults: {orch.faults})")
    print(f"Last status: {snap.status}")
    for side in ("white", "black"):
        print(f"{snap.players[side]} ({side}): {snap.wins[side]} wins")


if __name__ == "__main__":
    main()
