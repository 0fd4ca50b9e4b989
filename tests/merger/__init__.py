"""Tests for the merge components."""
