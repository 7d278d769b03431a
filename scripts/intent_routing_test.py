import argparse
import asyncio
import json
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from agri_intel.agent.orchestrator import Orchestrator
from agri_intel.infra.context import AppContext
from agri_intel.infra.response_cache import NoopResponseCache


def _load_cases(path: Path) -> list[dict]:
    if not path.exists():
        raise FileNotFoundError(f"cases file not found: {path}")
    if path.suffix == ".jsonl":
        return [
            json.loads(line)
            for line in path.read_text(encoding="utf-8").splitlines()
            if line.strip()
        ]
    if path.suffix == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError("JSON cases must be a list")
        return payload
    raise ValueError("cases file must be .jsonl or .json")


async def _evaluate_case(orchestrator: Orchestrator, case: dict) -> dict:
    prompt = case.get("prompt", "")
    expected = case.get("expect", {})
    started = time.time()
    result = await orchestrator.run(prompt)
    elapsed = time.time() - started

    actual_mode = "broad_search" if result.metadata.broad_search else "tools"
    actual_tools = [call.tool for call in result.tool_calls]
    expected_mode = expected.get("mode")
    expected_tools = expected.get("tools", [])
    counts = {
        key: len(records or [])
        for key, records in result.data.model_dump().items()
    }

    return {
        "id": case.get("id", ""),
        "prompt": prompt,
        "expected_mode": expected_mode,
        "expected_tools": expected_tools,
        "actual_mode": actual_mode,
        "actual_tools": actual_tools,
        "source": result.metadata.source,
        "counts": counts,
        "ok": actual_mode == expected_mode and actual_tools == expected_tools,
        "latency_sec": round(elapsed, 3),
    }


async def _run(cases: list[dict]) -> list[dict]:
    async with AppContext() as ctx:
        orchestrator = Orchestrator(
            store=ctx.store,
            cache=NoopResponseCache(),
            completions=ctx.completions,
            fallback_store=ctx.fallback_store,
            agent_id=ctx.config.agent_id,
        )
        results = []
        for case in cases:
            results.append(await _evaluate_case(orchestrator, case))
        return results


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Replay routing cases against the orchestrator."
    )
    parser.add_argument(
        "--cases",
        default=str(ROOT / "tests" / "intent_routing_cases.jsonl"),
        help="Path to .jsonl/.json test cases.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero if any case fails.",
    )
    args = parser.parse_args()

    cases = _load_cases(Path(args.cases))
    if not cases:
        print("No cases found.")
        return 1

    results = asyncio.run(_run(cases))
    passed = sum(1 for r in results if r["ok"])
    failed = len(results) - passed

    for result in results:
        status = "PASS" if result["ok"] else "FAIL"
        print(
            f"[{status}] {result['id']} "
            f"expected={result['expected_mode']}/{','.join(result['expected_tools'])} "
            f"actual={result['actual_mode']}/{','.join(result['actual_tools'])} "
            f"source={result['source']} counts={result['counts']} "
            f"latency={result['latency_sec']}"
        )

    print(f"\nTotal: {len(results)}  Passed: {passed}  Failed: {failed}")
    if args.strict and failed:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
