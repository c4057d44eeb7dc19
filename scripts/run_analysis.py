"""Run one focus analysis from the command line."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from balance.config import get_settings
from balance.dependencies import Services, build_services
from balance.exceptions import BalanceError, ValidationFailed
from balance.logging_config import configure_logging
from balance.models.schemas import UserInput
from balance.services.health_source import MockHealthDataSource, MockScenario


logger = logging.getLogger("scripts.run_analysis")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Analyze focus cues with the configured LLM provider",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a study session against the well-rested mock scenario
  python scripts/run_analysis.py --activity Studying --duration 1.5 --stress 3 --focus 7

  # Use a different scenario
  python scripts/run_analysis.py --scenario stressed --activity Coding --duration 2

  # Only check that the provider is reachable
  python scripts/run_analysis.py --check-connection
        """
    )
    parser.add_argument("--activity", type=str, default="Studying", help="What you were doing")
    parser.add_argument("--duration", type=float, default=1.0, help="Duration in hours")
    parser.add_argument("--stress", type=int, default=5, help="Self-reported stress level (1-10)")
    parser.add_argument("--focus", type=int, default=5, help="Self-reported focus level (1-10)")
    parser.add_argument(
        "--scenario",
        type=str,
        choices=[s.value for s in MockScenario],
        help="Mock health data scenario. Defaults to the configured source.",
    )
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="Probe the LLM provider and exit",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, services: Services) -> int:
    if args.check_connection:
        result = await services.llm_client.check_connection(services.analyzer.provider_config)
        print(("OK: " if result.ok else "FAILED: ") + result.message)
        return 0 if result.ok else 1

    source = MockHealthDataSource(scenario=args.scenario) if args.scenario else services.health_source
    health_data = await source.fetch_health_data()
    user_input = UserInput(
        activity=args.activity,
        duration_hours=args.duration,
        stress_level=args.stress,
        focus_level=args.focus,
    )

    try:
        analysis = await services.analyzer.analyze(health_data, user_input)
    except ValidationFailed as exc:
        print("Validation failed:")
        for message in exc.messages:
            print(f"  - {message}")
        return 2
    except BalanceError as exc:
        print(f"Analysis failed: {exc}")
        return 1

    print(f"Focus score: {analysis.focus_score:.0f}/100")
    print("Recommendations:")
    for index, recommendation in enumerate(analysis.recommendations, start=1):
        print(f"  {index}. {recommendation}")
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = parse_args(argv)
    services = build_services(get_settings())
    return asyncio.run(run(args, services))


if __name__ == "__main__":
    sys.exit(main())
