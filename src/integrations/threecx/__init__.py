"""3CX phone system integration."""
