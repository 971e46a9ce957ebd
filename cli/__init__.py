"""Terminal front-end for the discipline engine."""
