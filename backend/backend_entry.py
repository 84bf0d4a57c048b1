"""
Server entrypoint: starts uvicorn with the FastAPI app, or runs one ops mode and exits.

Run from backend dir: python backend_entry.py [--host 127.0.0.1] [--port 8000]
  python backend_entry.py --ops readiness-eval   -> evaluate readiness once, write report, exit (no uvicorn)
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

_backend_dir = Path(__file__).resolve().parent
if str(_backend_dir) not in sys.path:
    sys.path.insert(0, str(_backend_dir))


def _run_ops_readiness_eval() -> int:
    """Evaluate every integration once; write readiness_result.json under REPORTS_DIR (default reports)."""
    reports_dir = os.environ.get("REPORTS_DIR", "reports")

    async def _run() -> int:
        from core.config import get_settings
        from core.database import dispose_database, get_database_manager, init_database
        from core.logging import setup_logging
        from runner.readiness_runner import run_readiness_evaluation

        settings = get_settings()
        setup_logging(settings)
        await init_database(settings.database_url, create_tables=True)
        try:
            async with get_database_manager().session() as session:
                result = await run_readiness_evaluation(
                    session,
                    settings=settings,
                    reports_dir=reports_dir,
                    session_factory=get_database_manager().session,
                )
        finally:
            await dispose_database()
        print(f"{result['evaluated']},{result.get('json_path', '')}")
        return 0

    return asyncio.run(_run())


def main() -> int:
    parser = argparse.ArgumentParser(description="Backend entry: server or ops subcommand")
    parser.add_argument("--ops", choices=["readiness-eval"], help="Run ops and exit (no server)")
    parser.add_argument("--host", default=os.environ.get("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")))
    args, _ = parser.parse_known_args()

    if args.ops == "readiness-eval":
        return _run_ops_readiness_eval()

    from main import app
    import uvicorn

    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
