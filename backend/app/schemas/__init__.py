"""Pydantic response models and envelopes."""
