"""Routing — compiled route table with trie-based matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes.
"""

from perch.routing.group import RouteGroup
from perch.routing.route import Route, RouteMatch
from perch.routing.router import Router

__all__ = ["Route", "RouteGroup", "RouteMatch", "Router"]
