"""Hazard zones derived from marine conditions, plus a seeded demo generator."""
