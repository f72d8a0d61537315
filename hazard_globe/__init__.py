"""
Hazard Globe

Backend for the typhoon / earthquake / low-pressure globe viewer.
"""

__version__ = "0.3.0"
