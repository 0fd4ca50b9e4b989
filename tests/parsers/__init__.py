"""Tests for package access and XML helpers."""
