"""Test suite for the IdeaHub review-access system.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Integration tests for adapter implementations
   - Temporary SQLite databases, local directories, mocked HTTP transports
   - Validates adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory implementations of the store and blob ports
   - Used by core unit tests
"""
