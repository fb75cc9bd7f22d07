"""Command-line interface for agentbridge."""
