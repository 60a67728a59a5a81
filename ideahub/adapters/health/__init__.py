"""Health endpoint adapters.

Provides HTTP liveness and readiness endpoints for process supervisors.
"""
