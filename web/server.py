"""
HTTP listener for responder events.
Uses aiohttp for async web serving.
"""
import json
import logging
from urllib.parse import urlparse

from aiohttp import ClientSession, web

logger = logging.getLogger('hearhear.web')


def _is_http_url(value):
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


class WebServer:
    """
    Web server that feeds posted events to a Listener.

    An event's response_url makes the server POST replies to that URL, so
    any client that can reach /events can aim those requests. Bind to a
    trusted interface (the default is 127.0.0.1); only http and https URLs
    are accepted.
    """

    def __init__(self, listener, host='127.0.0.1', port=8080):
        """
        Initialize web server.

        Args:
            listener: Listener that accepted events are handed to
            host: Host to bind to
            port: Port to listen on
        """
        self.listener = listener
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner = None
        self.session = None

        self._setup_routes()
        self.app.on_cleanup.append(self._close_session)

    def _setup_routes(self):
        """Set up all web routes."""
        self.app.router.add_post('/events', self.handle_event)
        self.app.router.add_get('/health', self.handle_health)
        self.app.router.add_get('/usage', self.handle_usage)

    async def handle_event(self, request):
        """Accept one event; processing continues after the response is sent."""
        try:
            event = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return web.json_response({'error': 'body must be JSON'}, status=400)
        if not isinstance(event, dict):
            return web.json_response({'error': 'event must be a JSON object'}, status=400)

        event.pop('reply', None)
        response_url = event.get('response_url')
        if response_url is not None and not _is_http_url(response_url):
            return web.json_response({'error': 'response_url must be an http(s) URL'}, status=400)
        if response_url:
            event['reply'] = self._make_reply(response_url)

        task = self.listener.listen(event)
        return web.json_response({'accepted': task is not None}, status=202)

    async def handle_health(self, request):
        return web.json_response({
            'status': 'ok',
            'responders': len(self.listener.registry),
            'in_flight': self.listener.in_flight,
        })

    async def handle_usage(self, request):
        return web.json_response({'usage': self.listener.registry.usage()})

    def _make_reply(self, url):
        async def reply(text):
            if self.session is None:
                self.session = ClientSession()
            async with self.session.post(url, json={'text': text}) as resp:
                if resp.status >= 400:
                    logger.warning("Reply to %s failed with HTTP %s", url, resp.status)

        return reply

    async def _close_session(self, app):
        await self.listener.drain()
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def start(self):
        """Start the web server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"Listening for events at http://{self.host}:{self.port}/events")

    async def stop(self):
        """Stop the web server."""
        if self.runner:
            await self.runner.cleanup()
            logger.info("Web listener stopped")


async def run_web_server(listener, host='127.0.0.1', port=8080):
    """
    Run the web server.

    Args:
        listener: Listener that accepted events are handed to
        host: Host to bind to
        port: Port to listen on
    """
    server = WebServer(listener, host, port)
    await server.start()
    return server
