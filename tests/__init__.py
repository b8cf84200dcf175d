"""
Libraria Test Suite

Tests are organized into:
- unit/: Unit tests for security primitives, the authorization gate and services
- integration/: Integration tests for the HTTP API
"""
