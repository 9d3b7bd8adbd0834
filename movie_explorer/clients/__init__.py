"""Clients for the external movie-metadata and AI providers."""
