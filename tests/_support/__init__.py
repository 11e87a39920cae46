"""
Test support utilities for cosmos-deploy tests.

Helpers that don't fit as pytest fixtures but are shared across test files.
"""
