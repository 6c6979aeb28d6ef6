"""Social client with scheduled auto-refresh for feed, messages, notifications and profile views."""
