"""Sandbox learning sessions backend for local play and end-to-end tests."""
