"""Routing: compiled route table.

Routes are registered during setup and compiled into an immutable
lookup table when the app freezes. The same table feeds the route
listing on the inspection page and ``stackpeek routes``.
"""
