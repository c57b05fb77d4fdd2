"""Marketdesk -- interest threads and account moderation for the marketplace admin."""

__version__ = "0.1.0"
