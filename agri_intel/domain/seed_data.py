"""Canonical demo records.

Used both to seed the hosted indices and as the local fallback dataset when
the search service is not configured.
"""

from __future__ import annotations

from typing import Dict, List

from .indices import RecordType


SEED_DATE = "2024-01-09"

MARKET_PRICES: List[Dict[str, object]] = [
    {"region": "California", "crop": "Almonds", "price": 4.50, "unit": "USD/lb", "demand_index": 85},
    {"region": "California", "crop": "Grapes", "price": 800, "unit": "USD/ton", "demand_index": 70},
    {"region": "California", "crop": "Walnuts", "price": 3.20, "unit": "USD/lb", "demand_index": 72},
    {"region": "California", "crop": "Lettuce", "price": 22, "unit": "USD/crate", "demand_index": 65},
    {"region": "California", "crop": "Tomatoes", "price": 35, "unit": "USD/box", "demand_index": 78},
    {"region": "Midwest", "crop": "Corn", "price": 4.80, "unit": "USD/bu", "demand_index": 60},
    {"region": "Midwest", "crop": "Soybeans", "price": 13.20, "unit": "USD/bu", "demand_index": 75},
    {"region": "Midwest", "crop": "Wheat", "price": 6.50, "unit": "USD/bu", "demand_index": 55},
    {"region": "Pacific NW", "crop": "Apples", "price": 0.45, "unit": "USD/lb", "demand_index": 65},
    {"region": "Pacific NW", "crop": "Cherries", "price": 3.80, "unit": "USD/lb", "demand_index": 82},
    {"region": "Pacific NW", "crop": "Potatoes", "price": 8.50, "unit": "USD/cwt", "demand_index": 58},
    {"region": "Southeast", "crop": "Peaches", "price": 1.20, "unit": "USD/lb", "demand_index": 68},
    {"region": "Southeast", "crop": "Cotton", "price": 0.85, "unit": "USD/lb", "demand_index": 52},
    {"region": "Texas", "crop": "Cotton", "price": 0.82, "unit": "USD/lb", "demand_index": 54},
    {"region": "Texas", "crop": "Sorghum", "price": 5.20, "unit": "USD/bu", "demand_index": 48},
]
for _row in MARKET_PRICES:
    _row["date"] = SEED_DATE

CROP_ROTATION: List[Dict[str, object]] = [
    {"soil_type": "Loam", "climate_zone": "9", "previous_crop": "Corn", "next_crop": "Soybeans", "risk_score": 10, "compatibility": "High"},
    {"soil_type": "Loam", "climate_zone": "9", "previous_crop": "Soybeans", "next_crop": "Corn", "risk_score": 10, "compatibility": "High"},
    {"soil_type": "Loam", "climate_zone": "9", "previous_crop": "Wheat", "next_crop": "Soybeans", "risk_score": 15, "compatibility": "High"},
    {"soil_type": "Clay", "climate_zone": "5", "previous_crop": "Wheat", "next_crop": "Canola", "risk_score": 20, "compatibility": "Medium"},
    {"soil_type": "Clay", "climate_zone": "5", "previous_crop": "Canola", "next_crop": "Wheat", "risk_score": 25, "compatibility": "Medium"},
    {"soil_type": "Sandy", "climate_zone": "10", "previous_crop": "Tomato", "next_crop": "Pepper", "risk_score": 90, "compatibility": "Low (Disease Risk)"},
    {"soil_type": "Sandy", "climate_zone": "10", "previous_crop": "Lettuce", "next_crop": "Broccoli", "risk_score": 30, "compatibility": "Medium"},
    {"soil_type": "Loam", "climate_zone": "7", "previous_crop": "Cotton", "next_crop": "Peanuts", "risk_score": 20, "compatibility": "High"},
    {"soil_type": "Loam", "climate_zone": "7", "previous_crop": "Peanuts", "next_crop": "Cotton", "risk_score": 15, "compatibility": "High"},
]

LOGISTICS: List[Dict[str, object]] = [
    {"origin_region": "California", "destination_market": "New York", "buyer": "Whole Foods", "carrier": "CoolTrans", "cost_per_ton": 150, "transit_days": 4},
    {"origin_region": "California", "destination_market": "Chicago", "buyer": "Costco", "carrier": "FreshFreight", "cost_per_ton": 120, "transit_days": 3},
    {"origin_region": "California", "destination_market": "Los Angeles", "buyer": "Ralphs", "carrier": "LocalHaul", "cost_per_ton": 40, "transit_days": 1},
    {"origin_region": "Midwest", "destination_market": "Chicago", "buyer": "ADM", "carrier": "RailFreight", "cost_per_ton": 25, "transit_days": 1},
    {"origin_region": "Midwest", "destination_market": "New Orleans", "buyer": "Cargill", "carrier": "BargeLogistics", "cost_per_ton": 18, "transit_days": 5},
    {"origin_region": "Pacific NW", "destination_market": "Los Angeles", "buyer": "Ralphs", "carrier": "WestCoast Trucking", "cost_per_ton": 80, "transit_days": 2},
    {"origin_region": "Pacific NW", "destination_market": "Seattle", "buyer": "Safeway", "carrier": "NW Express", "cost_per_ton": 30, "transit_days": 1},
    {"origin_region": "Southeast", "destination_market": "Atlanta", "buyer": "Publix", "carrier": "SE Logistics", "cost_per_ton": 35, "transit_days": 1},
    {"origin_region": "Texas", "destination_market": "Houston", "buyer": "HEB", "carrier": "TX Freight", "cost_per_ton": 28, "transit_days": 1},
]

BENCHMARKS: List[Dict[str, object]] = [
    {"region": "California", "crop_mix": ["Almonds", "Grapes"], "margin": "15%", "yield": "High", "practices": "Drip Irrigation, Cover Crops"},
    {"region": "California", "crop_mix": ["Tomatoes", "Lettuce"], "margin": "12%", "yield": "Medium", "practices": "Greenhouse, Hydroponics"},
    {"region": "Midwest", "crop_mix": ["Corn", "Soybeans"], "margin": "8%", "yield": "Medium", "practices": "No-Till, Precision Ag"},
    {"region": "Midwest", "crop_mix": ["Wheat", "Corn"], "margin": "7%", "yield": "Medium", "practices": "Cover Crops, GPS Guidance"},
    {"region": "Pacific NW", "crop_mix": ["Apples", "Cherries"], "margin": "18%", "yield": "High", "practices": "Integrated Pest Management"},
    {"region": "Southeast", "crop_mix": ["Cotton", "Peanuts"], "margin": "10%", "yield": "Medium", "practices": "Crop Rotation, Conservation Tillage"},
]

SEED_RECORDS: Dict[RecordType, List[Dict[str, object]]] = {
    RecordType.MARKET_PRICE: MARKET_PRICES,
    RecordType.CROP_ROTATION: CROP_ROTATION,
    RecordType.LOGISTICS: LOGISTICS,
    RecordType.BENCHMARK: BENCHMARKS,
}


def seed_records(record_type: RecordType) -> List[Dict[str, object]]:
    """Return a fresh copy of the demo rows for one record type."""
    return [dict(row) for row in SEED_RECORDS[record_type]]
