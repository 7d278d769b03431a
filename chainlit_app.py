import os
from typing import Any, Dict, List

import chainlit as cl
import httpx

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")

WELCOME = (
    "🌾 Welcome to AgriIntel. Ask about crop prices, what to plant next, "
    "buyers and shipping, or regional benchmarks."
)


def _market_card(rows: List[Dict[str, Any]]) -> str:
    lines = ["| Region | Crop | Price | Demand |", "| --- | --- | --- | --- |"]
    for row in rows:
        lines.append(
            f"| {row['region']} | {row['crop']} | {row['price']} {row['unit']} "
            f"| {row['demand_index']}/100 |"
        )
    return "\n".join(lines)


def _rotation_card(rows: List[Dict[str, Any]]) -> str:
    lines = ["| Previous | Next | Soil | Compatibility | Risk |", "| --- | --- | --- | --- | --- |"]
    for row in rows:
        lines.append(
            f"| {row['previous_crop']} | {row['next_crop']} | {row['soil_type']} "
            f"| {row['compatibility']} | {row['risk_score']} |"
        )
    return "\n".join(lines)


def _logistics_card(rows: List[Dict[str, Any]]) -> str:
    lines = ["| Buyer | Route | Carrier | Cost/ton | Days |", "| --- | --- | --- | --- | --- |"]
    for row in rows:
        lines.append(
            f"| {row['buyer']} | {row['origin_region']} → {row['destination_market']} "
            f"| {row['carrier']} | ${row['cost_per_ton']} | {row['transit_days']} |"
        )
    return "\n".join(lines)


def _benchmark_card(rows: List[Dict[str, Any]]) -> str:
    lines = ["| Region | Crop mix | Margin | Yield |", "| --- | --- | --- | --- |"]
    for row in rows:
        lines.append(
            f"| {row['region']} | {', '.join(row['crop_mix'])} | {row['margin']} "
            f"| {row['yield']} |"
        )
    return "\n".join(lines)


CARDS = (
    ("market", "📈 Market Pulse", _market_card),
    ("rotation", "🔄 Crop Rotation", _rotation_card),
    ("logistics", "🚚 Logistics & Buyers", _logistics_card),
    ("benchmarks", "📊 Regional Benchmarks", _benchmark_card),
)


@cl.on_chat_start
async def start():
    await cl.Message(content=WELCOME).send()


@cl.on_message
async def on_message(message: cl.Message):
    prompt = message.content.strip()
    if not prompt:
        await cl.Message(content="Please enter a question.").send()
        return

    try:
        async with httpx.AsyncClient(base_url=BACKEND_URL, timeout=30) as client:
            response = await client.post("/api/v1/chat", json={"message": prompt})
            response.raise_for_status()
            result = response.json()
    except httpx.HTTPError as exc:
        await cl.Message(content=f"Request failed: {exc}").send()
        return

    await cl.Message(content=result.get("message") or "No answer was produced.").send()

    data = result.get("data") or {}
    for key, title, render in CARDS:
        rows = data.get(key)
        if rows:
            await cl.Message(content=f"**{title}**\n\n{render(rows)}").send()

    metadata = result.get("metadata") or {}
    tools = ", ".join(call["tool"] for call in result.get("tool_calls", []))
    debug = f"source: {metadata.get('source')}\ntools: {tools or 'none'}"
    await cl.Message(content=debug, author="debug").send()
