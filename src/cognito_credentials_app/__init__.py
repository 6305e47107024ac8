"""Command-line application for cognito credentials."""
