"""Routing — route templates, route middleware, and the middleware chain."""

from wren.routing.pattern import Literal, RouteTemplate, Variable, compile_pattern
from wren.routing.route import RouteMiddleware
from wren.routing.router import DispatchState, Router

__all__ = [
    "DispatchState",
    "Literal",
    "RouteMiddleware",
    "RouteTemplate",
    "Router",
    "Variable",
    "compile_pattern",
]
