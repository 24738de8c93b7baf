"""Customers package - profiles and stored payment tokens."""
