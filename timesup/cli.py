"""
Timesup CLI - Command-line interface for the engine.

Usage:
    timesup categories                 List built-in categories
    timesup simulate [options]         Play a seeded game with simulated teams
    timesup serve [--host] [--port]    Run the REST API (needs uvicorn)
"""

import argparse
import json
import logging
import os
import random
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Timesup - Party Game Turn Engine",
        prog="timesup",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("categories", help="List built-in categories")

    sim_parser = subparsers.add_parser("simulate", help="Play a seeded game with simulated teams")
    sim_parser.add_argument("--teams", nargs="+", default=["Red", "Blue"], help="Team names")
    sim_parser.add_argument("--categories", nargs="*", default=[], help="Category ids (default: all)")
    sim_parser.add_argument("--words", type=int, default=20, help="Number of terms in the pool")
    sim_parser.add_argument("--seed", type=int, default=0, help="Random seed")
    sim_parser.add_argument(
        "--mode", choices=["classic", "with_drawing", "random_order"], default="classic",
    )
    sim_parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="easy")
    sim_parser.add_argument("--turn-time", type=float, default=30.0, help="Seconds per turn")
    sim_parser.add_argument("--hit-rate", type=float, default=0.6, help="Chance a guess is right")
    sim_parser.add_argument("--snapshot", help="Write the final snapshot JSON to this file")

    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "categories":
        cmd_categories(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def configure_logging(verbose: bool = False):
    level = "DEBUG" if verbose else os.getenv("TIMESUP_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_categories(args):
    """List built-in categories."""
    from .content import default_categories

    for category in default_categories():
        print(f"{category.category_id:<10} {category.name:<15} {category.term_count} terms")


def cmd_simulate(args):
    """Play a full game with randomly guessing teams."""
    from .content import select_categories, default_categories
    from .engine_core import GameSettings, TeamConfig, GameMode, Difficulty
    from .session import SessionManager, LoopState
    from .api.schemas import GameSnapshot

    try:
        ids = args.categories or [c.category_id for c in default_categories()]
        categories = select_categories(ids)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    settings = GameSettings(
        teams=[TeamConfig(name=name) for name in args.teams],
        selected_categories=categories,
        turn_time_limit=args.turn_time,
        game_mode=GameMode(args.mode),
        difficulty=Difficulty(args.difficulty),
        word_count=args.words,
        random_seed=args.seed,
    )
    if not settings.is_valid:
        print("Invalid setup:")
        for error in settings.validation_errors():
            print(f"  - {error}")
        sys.exit(1)

    manager = SessionManager()
    session = manager.create_session(settings)
    manager.start_game()
    loop = session.loop
    rng = random.Random(args.seed)

    print(f"Game {session.session_id}: {', '.join(args.teams)} - "
          f"{settings.game_mode.value}, {settings.difficulty.value}, {args.words} terms")

    steps = 0
    max_steps = 100_000
    while loop.state != LoopState.GAME_OVER and steps < max_steps:
        steps += 1
        if loop.state == LoopState.WAITING_TURN:
            loop.start_turn()
        elif loop.state == LoopState.DRAWING_READY:
            loop.start_drawing_timer()
        elif loop.state == LoopState.TURN_RUNNING:
            _simulate_guess(loop, rng, args.hit_rate)
        elif loop.state == LoopState.SLOT_REWARD:
            result = loop.spin_slot()
            if result.success:
                print(f"  {'; '.join(result.changes)}")
            else:
                loop.finish_slot_reward()
        elif loop.state == LoopState.ROUND_END:
            state = loop.game_state
            print(f"\n{state.current_round.title} ({state.current_round.description}) complete")
            for name, score in loop.standings():
                print(f"  {name:<15} {score}")
            loop.next_round()
        else:
            break

    if loop.state != LoopState.GAME_OVER:
        print(f"Error: game did not finish after {max_steps} steps")
        sys.exit(1)

    reveal = loop.game_state.metadata.get("score_reveal")
    if reveal:
        print("\nPending penalties revealed:")
        for team_id, (before, penalty, after) in reveal.items():
            name = loop.game_state.get_team(team_id).name
            print(f"  {name:<15} {before} - {penalty} = {after}")

    print("\nFinal standings:")
    for name, score in loop.standings():
        print(f"  {name:<15} {score}")
    print(f"Winner(s): {', '.join(loop.winners())}")

    if args.snapshot:
        snapshot = GameSnapshot.from_state(loop.game_state)
        with open(args.snapshot, "w", encoding="utf-8") as f:
            json.dump(snapshot.model_dump(mode="json"), f, indent=2)
        print(f"Snapshot written to {args.snapshot}")


def _simulate_guess(loop, rng: random.Random, hit_rate: float):
    """One guess attempt taking a few seconds of the clock."""
    state = loop.game_state
    roll = rng.random()
    if roll < hit_rate:
        loop.correct()
    elif state.current_round.can_skip:
        if state.settings.difficulty.value == "hard" and rng.random() < 0.3:
            loop.wrong()
        else:
            loop.skip()
    loop.tick(rng.choice([2.0, 3.0, 5.0]))


def cmd_serve(args):
    """Run the REST API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install timesup-engine[server]")
        sys.exit(1)

    from .api.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
