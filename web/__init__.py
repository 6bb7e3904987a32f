"""
Web package - HTTP listener module.

Events posted to /events are handed to the responder Listener.
"""

from web.server import WebServer, run_web_server

__all__ = ['WebServer', 'run_web_server']
