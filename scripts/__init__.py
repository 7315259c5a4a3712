"""Operational scripts for the token store."""
