"""
Unit tests package.

Isolated tests for entities, services, DTOs and error mapping that run
against mocks instead of a database or HTTP server.
"""
