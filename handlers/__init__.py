"""Handler modules loaded by name from the bot configuration."""
