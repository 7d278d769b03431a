"""
Configure index settings and seed the demo records into the hosted indices.
"""

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from agri_intel.infra.config import get_config
from agri_intel.infra.errors import AgriIntelError
from agri_intel.infra.index_admin import IndexAdmin
from agri_intel.infra.search_client import AlgoliaSearchClient
from agri_intel.observability.logging_utils import init_logging


async def _run(settings_only: bool) -> dict:
    cfg = get_config()
    client = AlgoliaSearchClient(
        cfg.algolia_app_id,
        cfg.algolia_write_key,
        timeout=cfg.algolia_timeout_seconds,
    )
    admin = IndexAdmin(client)
    try:
        if settings_only:
            await admin.configure_indices()
            return {}
        return await admin.initialize()
    finally:
        await client.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip())
    parser.add_argument(
        "--settings-only",
        action="store_true",
        help="Apply index settings without seeding records.",
    )
    args = parser.parse_args()

    cfg = get_config()
    init_logging(log_path=cfg.log_path, level=cfg.log_level)
    if not cfg.search_configured:
        print("Missing credentials: set ALGOLIA_APP_ID and ALGOLIA_WRITE_KEY.")
        return 1

    try:
        counts = asyncio.run(_run(args.settings_only))
    except AgriIntelError as exc:
        print(f"Initialization failed: {exc}")
        return 1

    print(f"Index settings applied for app {cfg.masked_app_id}.")
    for index, count in counts.items():
        print(f"  {index}: {count} records")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
