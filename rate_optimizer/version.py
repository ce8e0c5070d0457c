"""Version stamp for the rate optimizer."""

VERSION = "2025.08.1"
