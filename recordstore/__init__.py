"""
recordstore

Typed value normalization and persistence for loosely typed records.
Every record is normalized into a canonical tree before it reaches the JSON
codec, so dates, binary blobs and enums survive a strict JSON round trip.
"""

__version__ = "0.1.0"
