"""Offer tracker API."""
