"""Tests for termenv."""
