"""Fixed wording for composed chat messages.

The clause text is part of the observable contract: clients and tests look
for phrases such as "market prices", "agronomy rules", "logistics chain" and
"broad search".
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from ..schemas import (
    BenchmarkRecord,
    CropRotationRecord,
    LogisticsRecord,
    MarketPriceRecord,
    OrchestrationData,
)


TOOL_CLAUSES: Dict[str, str] = {
    "getMarketPulse": "Fetching live market prices from Algolia... ",
    "suggestRotation": "Analyzing agronomy rules for crop rotation... ",
    "optimizeLogistics": "Optimizing logistics chain and buyer matching... ",
    "getBenchmarks": "Retrieving regional performance benchmarks... ",
}

BROAD_SEARCH_MESSAGE = (
    "I am orchestrating a broad search across all AgriIntel knowledge bases "
    "via Algolia Agent Studio."
)

ATTRIBUTION = (
    "\n\nQuery orchestrated via **Algolia Agent Studio** using real-time indices."
)

# Market, logistics and benchmark sections are capped. Rotation always lists
# every matched rule.
FINDINGS_LIMIT = 3


def _market_line(record: MarketPriceRecord) -> str:
    return (
        f"- {record.crop} ({record.region}): {record.price:.2f} {record.unit}, "
        f"demand {record.demand_index}/100"
    )


def _rotation_line(record: CropRotationRecord) -> str:
    return (
        f"- {record.previous_crop} → {record.next_crop}: {record.compatibility} "
        f"compatibility, risk {record.risk_score}/100 "
        f"({record.soil_type} soil, zone {record.climate_zone})"
    )


def _logistics_line(record: LogisticsRecord) -> str:
    return (
        f"- {record.buyer} via {record.carrier}: {record.origin_region} → "
        f"{record.destination_market}, ${record.cost_per_ton:.0f}/ton, "
        f"{record.transit_days} day(s)"
    )


def _benchmark_line(record: BenchmarkRecord) -> str:
    crops = ", ".join(record.crop_mix)
    return (
        f"- {record.region} ({crops}): margin {record.margin}, "
        f"yield {record.yield_}; {record.practices}"
    )


def _section(title: str, lines: List[str]) -> str:
    return f"**{title}**\n" + "\n".join(lines)


def format_findings(data: OrchestrationData, limit: int = FINDINGS_LIMIT) -> str:
    sections: List[str] = []
    if data.market:
        sections.append(
            _section("Market prices", [_market_line(r) for r in data.market[:limit]])
        )
    if data.rotation:
        sections.append(
            _section(
                "Crop rotation", [_rotation_line(r) for r in data.rotation]
            )
        )
    if data.logistics:
        sections.append(
            _section(
                "Logistics & buyers",
                [_logistics_line(r) for r in data.logistics[:limit]],
            )
        )
    if data.benchmarks:
        sections.append(
            _section(
                "Regional benchmarks",
                [_benchmark_line(r) for r in data.benchmarks[:limit]],
            )
        )
    return "\n\n".join(sections)


def compose_message(
    tool_names: Sequence[str],
    *,
    broad_search: bool,
    data: Optional[OrchestrationData] = None,
) -> str:
    if broad_search:
        message = BROAD_SEARCH_MESSAGE
    else:
        message = "".join(TOOL_CLAUSES.get(name, "") for name in tool_names)
    findings = format_findings(data) if data is not None else ""
    if findings:
        message = f"{message.rstrip()}\n\n{findings}"
    return message + ATTRIBUTION
