"""Staff accounts, API keys and the moderation role check."""
