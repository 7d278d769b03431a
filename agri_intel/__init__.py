"""
AgriIntel: multi-index agricultural query orchestration.
"""

__version__ = "1.0.0"
