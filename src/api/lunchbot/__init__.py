"""Forkable lunch API."""
