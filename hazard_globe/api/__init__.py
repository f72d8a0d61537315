"""
Hazard Globe API Module

Network-facing feeds (storms, earthquakes, weather), the aggregation service
and the FastAPI app that serves them.
"""
