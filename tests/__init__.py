"""
Test suite for docx_merger project.

This module contains all unit tests for the docx_merger package.
"""
