"""Main CLI interface for FTC alliance power ratings."""

import argparse
import logging
import sys

from .data.loader import DataLoader
from .linalg.kernel import SingularSystemError
from .pipeline.rankings import RankingConfig, RankingPipeline, aggregate_rankings
from .ratings.regularization import LambdaStrategy

STRATEGY_CHOICES = [s.value for s in LambdaStrategy]


def build_config(args) -> RankingConfig:
    """Translate CLI arguments into a ranking configuration."""
    return RankingConfig.from_env(
        lambda_strategy=LambdaStrategy(args.strategy) if args.strategy else None,
        ridge_lambda=args.ridge_lambda,
        parallel=True if getattr(args, "parallel", False) else None,
        fallback_on_singular=False if getattr(args, "no_fallback", False) else None,
    )


def _load_events(args):
    print(f"Loading matches from {args.input}...")
    try:
        events = DataLoader.load_matches(args.input, strict=getattr(args, "strict", False))
    except (OSError, ValueError) as e:
        print(f"Error loading data: {e}")
        return None
    total = sum(len(m) for m in events.values())
    print(f"Loaded {total} matches across {len(events)} event(s)")
    return events


def rate_matches(args):
    """Compute team rankings for every event in the input file."""
    events = _load_events(args)
    if events is None:
        return 1

    config = build_config(args)
    pipeline = RankingPipeline(config)

    try:
        event_results = [pipeline.rank_event(matches, code) for code, matches in events.items()]
    except (SingularSystemError, ValueError) as e:
        print(f"Error computing rankings: {e}")
        return 1

    report = {"events": [event.to_dict() for event in event_results]}
    if len(event_results) > 1:
        report["season"] = [r.to_dict() for r in aggregate_rankings(event_results)]

    for event in event_results:
        label = event.event_code or "(all matches)"
        print(f"\n{'='*60}")
        print(f"EVENT {label} - {event.num_matches} matches, lambda={event.ridge_lambda:g}")
        print(f"{'='*60}")
        if event.singular_fallback:
            print("  ! unregularized system was singular; regularized fallback used")
        if not event.lambda_converged:
            print("  ! lambda auto-tuning did not reach the target condition number")
        for ranking in event.rankings[: args.top]:
            print(
                f"  {ranking.team_id:>6}  OPR {ranking.opr:7.2f}  npOPR {ranking.np_opr:7.2f}  "
                f"CCWM {ranking.ccwm:7.2f}  DPR {ranking.dpr:7.2f}  npAVG {ranking.np_avg:7.2f}"
            )

    print(f"\nSaving rankings to {args.output}...")
    DataLoader.save_rankings_to_json(report, args.output)
    print("✓ Done!")
    return 0


def show_lambda(args):
    """Print the lambda each event would use."""
    events = _load_events(args)
    if events is None:
        return 1

    pipeline = RankingPipeline(build_config(args))
    for code, matches in events.items():
        try:
            choice = pipeline.choose_lambda(matches)
        except ValueError as e:
            print(f"{code or '(all matches)'}: cannot choose lambda: {e}")
            continue
        cond = "n/a" if choice.condition_number is None else f"{choice.condition_number:.3g}"
        status = "" if choice.converged else " (ill-conditioned)"
        print(f"{code or '(all matches)'}: lambda={choice.value:g} strategy={choice.strategy.value} "
              f"condition={cond} iterations={choice.iterations}{status}")
    return 0


def create_sample(args):
    """Create sample data file."""
    print(f"Creating sample data at {args.output}...")
    DataLoader.create_sample_data(args.output)
    print("✓ Sample data created!")
    print(f"\nYou can now compute rankings with:")
    print(f"  python -m ftc_ratings.main rate --input {args.output} --output rankings.json")
    return 0


def _add_common_arguments(parser):
    parser.add_argument("--input", "-i", required=True, help="Match results (CSV or JSON)")
    parser.add_argument(
        "--strategy",
        choices=STRATEGY_CHOICES,
        default=None,
        help="Lambda selection strategy (default: fixed_band)",
    )
    parser.add_argument(
        "--lambda",
        dest="ridge_lambda",
        type=float,
        default=None,
        help="Fixed ridge lambda; 0 solves without regularization",
    )
    parser.add_argument("--strict", action="store_true", help="Reject JSON input with any schema error")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="FTC power ratings - OPR, DPR and CCWM from alliance match results"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Rate command
    rate_parser = subparsers.add_parser("rate", help="Compute team rankings")
    _add_common_arguments(rate_parser)
    rate_parser.add_argument(
        "--output", "-o",
        default="rankings.json",
        help="Output JSON file for rankings (default: rankings.json)"
    )
    rate_parser.add_argument("--top", type=int, default=10, help="Teams to print per event (default: 10)")
    rate_parser.add_argument("--parallel", action="store_true", help="Solve the five metrics concurrently")
    rate_parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Fail instead of regularizing when the unregularized system is singular",
    )

    # Lambda command
    lambda_parser = subparsers.add_parser("lambda", help="Show the chosen ridge lambda per event")
    _add_common_arguments(lambda_parser)

    # Sample command
    sample_parser = subparsers.add_parser("sample", help="Create sample match data")
    sample_parser.add_argument(
        "--output", "-o",
        default="sample_matches.json",
        help="Output file for sample data (default: sample_matches.json)"
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "rate":
        return rate_matches(args)
    elif args.command == "lambda":
        return show_lambda(args)
    elif args.command == "sample":
        return create_sample(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
