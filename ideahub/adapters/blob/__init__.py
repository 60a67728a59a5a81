"""Blob storage adapters for attachment bodies.

Implementations support multiple backends:
- Local filesystem directory
- HTTP blob service addressed by container URL and SAS token
"""
