"""Test suite for the Movie Explorer backend."""
