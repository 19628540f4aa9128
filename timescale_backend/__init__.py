"""
Timescale Backend
Ingestion and query service for semicolon-delimited time-series CSV files.
"""

__version__ = "0.1.0"
