"""Interfaces (HTTP) for the mixtape service."""
