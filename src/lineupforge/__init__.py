"""Randomized-greedy fantasy lineup generation."""
