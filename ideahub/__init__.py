"""IdeaHub review-access system.

Decides who may edit and review ideas, manages access-level
entitlements and stores idea attachments.
"""
