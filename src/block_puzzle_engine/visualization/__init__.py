"""Pygame front end for the block puzzle engine."""
