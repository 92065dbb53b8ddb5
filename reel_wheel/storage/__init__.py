"""Local persistence: settings, tokens and the response cache."""
