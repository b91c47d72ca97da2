"""Microsoft Teams voice directory integration."""
