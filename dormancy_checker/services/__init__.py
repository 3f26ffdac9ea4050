"""External service clients: Unit API, employer mapping, Slack."""
