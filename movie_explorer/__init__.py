"""Movie Explorer: movie search with per-user favorites."""
