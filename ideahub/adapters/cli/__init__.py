"""Command-line interface adapters.

Provides CLI commands for operating the IdeaHub system:
- can-edit / submitted: Evaluate review-access rules for an idea
- entitlements / grant / revoke: Manage access-level grants
- files: List idea attachments
- health: Report liveness and readiness
"""
