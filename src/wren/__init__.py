"""Wren — a small async JSON API framework.

Requests flow through an ordered chain of middleware; each one answers
through a response sink or defers to the next. Routes are just
middleware gated on method and path template.

Basic usage::

    from wren import App

    app = App()

    @app.router.get("/hello/{name}")
    async def hello(request, sink, scope, next):
        await sink.send_json({"hello": request.path_params["name"]})

    app.run()

Serverless usage::

    from wren import InvocationHandler

    handler = InvocationHandler(app.router, app)
    result = await handler.handle(event)
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BackgroundTaskScheduler",
    "Cache",
    "ConfigurationError",
    "Dependencies",
    "HTTPError",
    "HttpMethod",
    "InvocationHandler",
    "MemoryCache",
    "Metrics",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "ResponseSink",
    "Router",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "HttpMethod":
        from wren.http.method import HttpMethod

        return HttpMethod

    if name == "Router":
        from wren.routing.router import Router

        return Router

    if name == "Dependencies":
        from wren.dependencies import Dependencies

        return Dependencies

    if name == "ResponseSink":
        from wren.server.sink import ResponseSink

        return ResponseSink

    if name == "InvocationHandler":
        from wren.server.invocation import InvocationHandler

        return InvocationHandler

    if name == "BackgroundTaskScheduler":
        from wren.tasks.scheduler import BackgroundTaskScheduler

        return BackgroundTaskScheduler

    if name in ("Cache", "MemoryCache"):
        from wren import cache as _cache

        return getattr(_cache, name)

    if name == "Metrics":
        from wren.metrics import Metrics

        return Metrics

    if name in ("Middleware", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("WrenError", "ConfigurationError", "HTTPError", "NotFound"):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
