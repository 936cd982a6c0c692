"""NeuroCare booking API."""
