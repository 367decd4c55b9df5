"""Caller verification and role checks for the user admin functions."""
