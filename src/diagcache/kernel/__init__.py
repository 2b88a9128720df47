"""Diagram source abstraction and staleness detection kernel."""
