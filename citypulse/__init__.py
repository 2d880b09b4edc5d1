"""
CityPulse - signal extraction for citizen incident reports.
"""

__version__ = "0.1.0"
