"""Publish the publishable subset of an Obsidian vault into Quartz content."""

__version__ = "0.3.0"
