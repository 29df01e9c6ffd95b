"""Runtime wiring helpers for the HTTP app."""
