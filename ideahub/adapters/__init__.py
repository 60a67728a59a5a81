"""External adapters for the IdeaHub review-access system.

This package contains all external dependencies (SQLite, blob storage,
HTTP servers, etc.) and provides implementations of the core port interfaces.

Adapter Organization:

- store/: Adapters for ideas, reviewers, grants and attachment metadata (SQLite)
- blob/: Adapters for attachment bodies (local filesystem, HTTP blob service)
- cli/: Command-line interface and management commands
- health/: HTTP liveness and readiness endpoints
"""
