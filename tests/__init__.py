"""
Test suite for the signaling relay.

This package contains tests organized by type:
- Unit tests for individual components
- Integration tests over a real WebSocket server
- Test fixtures and utilities
"""
