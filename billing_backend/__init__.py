"""Billing analytics backend package."""
