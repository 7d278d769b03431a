#!/usr/bin/env python
"""
Start the AgriIntel FastAPI application.
"""

import argparse
import logging
import os
import sys

import uvicorn

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from agri_intel.infra.config import get_config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    cfg = get_config()
    parser = argparse.ArgumentParser(
        description="Start the AgriIntel orchestration API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
    python run_web.py                    # default settings
    python run_web.py --port 8080        # listen on 8080
    python run_web.py --reload           # auto reload (development)
        """
    )
    parser.add_argument(
        '--host',
        type=str,
        default='0.0.0.0',
        help='bind address (default: 0.0.0.0)'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=cfg.fastapi_port,
        help=f'port (default: {cfg.fastapi_port})'
    )
    parser.add_argument(
        '--reload',
        action='store_true',
        help='enable auto reload'
    )
    args = parser.parse_args()

    shown_host = args.host if args.host != '0.0.0.0' else 'localhost'
    logger.info(f"Starting API server: http://{shown_host}:{args.port}")
    logger.info(f"Search configured: {cfg.search_configured}")
    logger.info(f"Live orchestration: {cfg.agent_studio_configured}")
    logger.info(f"API docs: http://{shown_host}:{args.port}/docs")

    uvicorn.run(
        "agri_intel.api.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info"
    )


if __name__ == '__main__':
    main()
