"""Account moderation -- suspend and reinstate users across auth and profile stores."""
