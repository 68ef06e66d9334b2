"""Unit tests for Converslation.

This package contains test modules for all components of the Converslation application.
Tests use pytest with asyncio support and replace HTTP calls and translation engines via monkeypatch.
"""
