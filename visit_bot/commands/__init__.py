"""Slash command registration for the visit board bot."""
