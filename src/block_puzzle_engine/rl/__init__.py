"""Agents and training scripts for the block puzzle environment."""
