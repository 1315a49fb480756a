"""Routing — an ordered, immutable route table with first-match-wins lookup.

Entries are declared once at startup as a plain list and scanned in
registration order for every request.
"""
