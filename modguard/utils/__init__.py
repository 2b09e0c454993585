"""modguard utilities — structlog logging setup."""
