#!/usr/bin/env python3
"""
Mock server for testing uptime monitoring.

This server exposes endpoints that cover every verdict the probe can produce:
- /ok: 200 OK with a healthy body
- /error: 500 Internal Server Error
- /content-ok: 200 OK whose body contains "SYSTEM OK"
- /content-error: 200 OK whose body contains "ERROR"
- /slow: 200 OK after a delay of SLOW_RESPONSE_S seconds
- /flap: alternates between 200 and 503 every FLAP_PERIOD requests
"""

import asyncio
import random

from aiohttp import web

# Constants
PORT = 8080
HOST = "localhost"
SLOW_RESPONSE_S = 35
FLAP_PERIOD = 3
FAST_RESPONSE_MIN_MS = 5
FAST_RESPONSE_MAX_MS = 200

_flap_counter = 0


async def _jitter() -> None:
    await asyncio.sleep(random.uniform(FAST_RESPONSE_MIN_MS, FAST_RESPONSE_MAX_MS) / 1000)


async def handle_ok(request: web.Request) -> web.Response:
    await _jitter()
    return web.Response(text="healthy")


async def handle_error(request: web.Request) -> web.Response:
    await _jitter()
    return web.Response(status=500, text="Internal Server Error")


async def handle_content_ok(request: web.Request) -> web.Response:
    await _jitter()
    return web.Response(text="status: SYSTEM OK")


async def handle_content_error(request: web.Request) -> web.Response:
    await _jitter()
    return web.Response(text="status: ERROR")


async def handle_slow(request: web.Request) -> web.Response:
    """Responds after the default probe timeout has expired."""
    await asyncio.sleep(SLOW_RESPONSE_S)
    return web.Response(text="finally")


async def handle_flap(request: web.Request) -> web.Response:
    """
    Alternates between healthy and unavailable.

    Every FLAP_PERIOD requests the endpoint switches state, which exercises the
    down and recovery alerts.
    """
    global _flap_counter
    _flap_counter += 1
    if (_flap_counter // FLAP_PERIOD) % 2 == 0:
        return web.Response(text="healthy")
    return web.Response(status=503, text="Service Unavailable")


async def init_app() -> web.Application:
    """
    Initialize the web application.

    Returns:
        Configured aiohttp web Application
    """
    app = web.Application()
    app.add_routes(
        [
            web.get("/ok", handle_ok),
            web.get("/error", handle_error),
            web.get("/content-ok", handle_content_ok),
            web.get("/content-error", handle_content_error),
            web.get("/slow", handle_slow),
            web.get("/flap", handle_flap),
        ]
    )
    return app


def run_server() -> None:
    """Run the mock server on HOST:PORT."""
    web.run_app(init_app(), host=HOST, port=PORT)


if __name__ == "__main__":
    print(f"Starting mock server at http://{HOST}:{PORT}")
    print("- endpoints: /ok /error /content-ok /content-error /slow /flap")
    run_server()
