"""
Utility modules: logging setup and performance telemetry.
"""
