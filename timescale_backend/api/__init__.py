"""
Timescale API
FastAPI application for uploading and querying time-series CSV results.
"""
