"""Clients for external services used after a booking is committed."""
