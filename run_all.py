#!/usr/bin/env python
"""
Run the orchestration API and the Chainlit chat UI side by side.

The UI is pointed at the API through BACKEND_URL, so both ports can be
changed from the command line.
"""

import argparse
import os
import signal
import subprocess
import sys
from typing import Dict, List, Tuple

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from agri_intel.infra.config import get_config

Service = Tuple[str, List[str]]


def build_services(args: argparse.Namespace) -> List[Service]:
    python = sys.executable
    api = [
        python, "-m", "uvicorn", "agri_intel.api.server:app",
        "--host", args.host, "--port", str(args.port),
    ]
    if not args.no_reload:
        api.append("--reload")
    services: List[Service] = [("api", api)]
    if not args.api_only:
        ui = [python, "-m", "chainlit", "run", "chainlit_app.py", "--port", str(args.ui_port)]
        if not args.no_reload:
            ui.append("--watch")
        services.append(("ui", ui))
    return services


def service_env(args: argparse.Namespace) -> Dict[str, str]:
    env = dict(os.environ)
    env.setdefault("BACKEND_URL", f"http://localhost:{args.port}")
    return env


def stop_all(processes: Dict[str, subprocess.Popen]) -> None:
    running = [proc for proc in processes.values() if proc.poll() is None]
    for proc in running:
        proc.terminate()
    for proc in running:
        try:
            proc.wait(timeout=10)
        except subprocess.TimeoutExpired:
            proc.kill()


def parse_args() -> argparse.Namespace:
    cfg = get_config()
    parser = argparse.ArgumentParser(description="Start the AgriIntel API and chat UI")
    parser.add_argument("--host", default="127.0.0.1", help="API bind address")
    parser.add_argument(
        "--port", type=int, default=cfg.fastapi_port,
        help=f"API port (default: {cfg.fastapi_port})",
    )
    parser.add_argument("--ui-port", type=int, default=8001, help="Chainlit port")
    parser.add_argument("--api-only", action="store_true", help="skip the chat UI")
    parser.add_argument("--no-reload", action="store_true", help="disable auto reload")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    processes: Dict[str, subprocess.Popen] = {}

    def handle_signal(signum, frame):
        stop_all(processes)
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_signal)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, handle_signal)

    env = service_env(args)
    for name, cmd in build_services(args):
        print(f"[{name}] {' '.join(cmd)}")
        processes[name] = subprocess.Popen(cmd, env=env)

    # The first service to exit takes the others down with it.
    exit_code = 0
    try:
        while processes:
            for name, proc in list(processes.items()):
                try:
                    code = proc.wait(timeout=0.5)
                except subprocess.TimeoutExpired:
                    continue
                print(f"[{name}] exited with {code}")
                processes.pop(name)
                exit_code = code or exit_code
                stop_all(processes)
                processes.clear()
                break
    except KeyboardInterrupt:
        print("Interrupted, stopping services")
    finally:
        stop_all(processes)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
