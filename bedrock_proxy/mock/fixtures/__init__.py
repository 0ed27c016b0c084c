"""Fixture data for the scripted transport."""
