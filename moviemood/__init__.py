"""Mood-based movie recommendations backed by a hosted language model."""
