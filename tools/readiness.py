"""
Readiness CLI: evaluate (batch readiness verdicts) and promote (admin maturity promotion).
Usage: python tools/readiness.py evaluate [--dry-run] [--output-dir DIR]
        python tools/readiness.py promote INTEGRATION_KEY [--actor NAME]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent / "backend"
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))


def _cmd_evaluate(args: argparse.Namespace) -> int:
    from core.config import get_settings
    from core.database import dispose_database, get_database_manager, init_database
    from core.logging import setup_logging
    from runner.readiness_runner import run_readiness_evaluation

    async def _run() -> int:
        settings = get_settings()
        setup_logging(settings)
        await init_database(settings.database_url, create_tables=True)
        try:
            async with get_database_manager().session() as session:
                result = await run_readiness_evaluation(
                    session,
                    settings=settings,
                    dry_run=args.dry_run,
                    reports_dir=args.output_dir,
                    session_factory=get_database_manager().session,
                )
        finally:
            await dispose_database()

        for row in result["results"]:
            print(f"{row['integration_key']},{row['eligible']},{row['reason']}")
        print(f"evaluated={result['evaluated']}", file=sys.stderr)
        return 0

    return asyncio.run(_run())


def _cmd_promote(args: argparse.Namespace) -> int:
    from core.config import get_settings
    from core.database import dispose_database, get_database_manager, init_database
    from core.logging import setup_logging
    from readiness.promotion import promote_integration

    async def _run() -> int:
        settings = get_settings()
        setup_logging(settings)
        await init_database(settings.database_url, create_tables=True)
        try:
            async with get_database_manager().session() as session:
                result = await promote_integration(session, args.integration_key, actor=args.actor)
        finally:
            await dispose_database()

        print(json.dumps(result.to_dict(), indent=2, default=str))
        return 0 if result.success else 1

    return asyncio.run(_run())


def main() -> int:
    parser = argparse.ArgumentParser(prog="readiness", description="Readiness: evaluate, promote")
    sub = parser.add_subparsers(dest="command", required=True)

    evaluate = sub.add_parser("evaluate", help="Evaluate every integration and append one readiness verdict each.")
    evaluate.add_argument("--dry-run", action="store_true", help="Do not persist verdicts")
    evaluate.add_argument("--output-dir", default=None, help="Write readiness_result.json to this directory")
    evaluate.set_defaults(func=_cmd_evaluate)

    promote = sub.add_parser("promote", help="Promote one integration from connected to observing (admin).")
    promote.add_argument("integration_key", help="Integration key, e.g. slack")
    promote.add_argument("--actor", default="cli", help="Recorded as the promoting actor")
    promote.set_defaults(func=_cmd_promote)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
