"""Dormancy pipeline stages: activity, enrichment, classification."""
