"""
Tests for the directory_auth service.

Handler tests run the FastAPI application against ``SqlUserDirectory`` on an
in-memory SQLite database. The REST directory client is exercised through
``httpx.MockTransport`` with PostgREST-shaped responses.
"""
