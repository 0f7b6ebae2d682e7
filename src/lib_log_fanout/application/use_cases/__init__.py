"""Use cases orchestrating record delivery."""
