"""
Dream Helper CLI - Command-line interface for the advisor.

Usage:
    dreamhelper catalog [--search TEXT]     List or search lotuses
    dreamhelper validate [CATALOG_JSON]     Validate a catalog
    dreamhelper recommend <state_json>      Rank lotuses for a saved vision (and weights)
    dreamhelper serve                       Run the HTTP API
"""

import argparse
import logging
import os
import random
import sys

from pydantic import ValidationError

from . import __version__
from .advisor import DEFAULT_TOP_N, DEFAULT_TRIALS, LotusRanker, LotusScorer, UserWeights, explain
from .catalog import LOTUSES, get_lotus, load_catalog, search_lotuses
from .engine_core.state import BubbleIdFactory
from .lotus_schema import BubbleType, CatalogValidationError, validate_catalog


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Dream Helper - Lotus recommendations",
        prog="dreamhelper",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Catalog command
    catalog_parser = subparsers.add_parser("catalog", help="List or search lotuses")
    catalog_parser.add_argument("--search", "-s", help="Case-insensitive description search")
    catalog_parser.add_argument("--limit", type=int, default=10, help="Maximum search results")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a lotus catalog")
    validate_parser.add_argument("catalog_file", nargs="?", help="JSON catalog (built-in if omitted)")

    # Recommend command
    recommend_parser = subparsers.add_parser("recommend", help="Rank lotuses for a vision")
    recommend_parser.add_argument(
        "state_file", help="JSON vision state (bubbles, visionCapacity, optional weights)"
    )
    recommend_parser.add_argument(
        "--lotus", "-l", action="append", default=[], dest="lotus_ids",
        help="Lotus id on offer (repeatable; whole catalog if omitted)",
    )
    recommend_parser.add_argument("--top", type=int, default=DEFAULT_TOP_N, help="Number of results")
    recommend_parser.add_argument("--monte-carlo", action="store_true", help="Stochastic scoring")
    recommend_parser.add_argument("--trials", type=int, default=DEFAULT_TRIALS, help="Monte Carlo trials")
    recommend_parser.add_argument("--lookahead", action="store_true", help="Add follow-up value")
    recommend_parser.add_argument("--depth", type=int, default=2, help="Lookahead depth")
    recommend_parser.add_argument(
        "--goal", choices=[t.value for t in BubbleType], help="Bubble type to bias toward"
    )
    recommend_parser.add_argument("--seed", type=int, help="Random seed")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else os.getenv("DREAMHELPER_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "catalog":
        cmd_catalog(args)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "recommend":
        cmd_recommend(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_catalog(args):
    """List or search lotuses."""
    if args.search:
        lotuses = search_lotuses(args.search, limit=args.limit)
    else:
        lotuses = LOTUSES

    for lotus in lotuses:
        marker = "*" if lotus.is_fundamental else " "
        print(f"{marker} {lotus.id}")
        print(f"    {lotus.description}")
    print(f"\n{len(lotuses)} lotus(es)")


def cmd_validate(args):
    """Validate a lotus catalog."""
    if args.catalog_file:
        print(f"Validating: {args.catalog_file}")
        try:
            lotuses = load_catalog(args.catalog_file)
        except FileNotFoundError:
            print(f"Error: File not found: {args.catalog_file}")
            sys.exit(1)
        except CatalogValidationError as e:
            print("Errors:")
            for error in e.errors:
                print(f"  - {error}")
            sys.exit(1)
    else:
        lotuses = LOTUSES

    result = validate_catalog(lotuses)
    print(f"Lotuses: {len(lotuses)}")
    print(f"Fundamentals: {sum(1 for lotus in lotuses if lotus.is_fundamental)}")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("\nCatalog is valid")


def cmd_recommend(args):
    """Rank lotuses for a vision read from a JSON file."""
    from .api.schemas import SavedVisionModel

    try:
        with open(args.state_file, "r", encoding="utf-8") as f:
            vision = SavedVisionModel.model_validate_json(f.read())
    except FileNotFoundError:
        print(f"Error: File not found: {args.state_file}")
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Invalid vision state:\n{e}")
        sys.exit(1)

    if args.lotus_ids:
        lotuses = []
        for lotus_id in args.lotus_ids:
            lotus = get_lotus(lotus_id)
            if lotus is None:
                print(f"Error: Unknown lotus: {lotus_id}")
                sys.exit(1)
            lotuses.append(lotus)
    else:
        lotuses = LOTUSES

    id_factory = BubbleIdFactory(prefix="sim")
    state = vision.to_state(id_factory)
    goal_type = BubbleType(args.goal) if args.goal else None

    weights = vision.weights.to_weights() if vision.weights else UserWeights()

    ranker = LotusRanker(
        scorer=LotusScorer(rng=random.Random(args.seed), id_factory=id_factory),
        trials=args.trials,
    )
    if args.lookahead:
        ranked = ranker.rank_with_lookahead(
            state, lotuses, weights, top_n=args.top, depth=args.depth,
            stochastic=args.monte_carlo, goal_type=goal_type,
        )
    else:
        ranked = ranker.rank(
            state, lotuses, weights, top_n=args.top,
            stochastic=args.monte_carlo, goal_type=goal_type,
        )

    for rank, choice in enumerate(ranked, start=1):
        score = f"{choice.score:+.2f}"
        if choice.lookahead_score is not None:
            score += f" (lookahead {choice.lookahead_score:+.2f})"
        print(f"{rank}. {choice.lotus.name}  {score}")
        for reason in explain(state, choice.lotus, choice.simulated_state, goal_type=goal_type):
            print(f"     - {reason.message}")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "dreamhelper.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=os.getenv("DREAMHELPER_LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
