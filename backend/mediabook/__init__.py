"""Listing media booking backend."""
