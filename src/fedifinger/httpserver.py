"""
Embeds a WebFingerServer into the standard library's threading HTTP server. Good enough
for tests and small deployments; larger applications call WebFingerServer.endpoint()
from their own web framework instead.
"""

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import ssl
from threading import Thread
from typing import Any, Generic, Tuple
from urllib.parse import urlsplit

from fedifinger.reporting import info, trace
from fedifinger.server import C, WebFingerResponse, WebFingerServer

WEBFINGER_PATH = '/.well-known/webfinger'


class WebFingerWebsite(Generic[C]):
    """
    Serves /.well-known/webfinger from the WebFingerServer, and 404 for everything else.
    """
    def __init__(self, webfinger_server: WebFingerServer[C], context: C):
        self._webfinger_server = webfinger_server
        self._context = context


    def do_GET(self, handler: BaseHTTPRequestHandler) -> None:
        split = urlsplit(handler.path)
        if split.path != WEBFINGER_PATH:
            self.fallback(handler)
            return
        self.send(handler, self._webfinger_server.endpoint(split.query, self._context))


    def fallback(self, handler: BaseHTTPRequestHandler) -> None:
        handler.send_response(404)
        handler.send_header('Content-Type', 'text/plain')
        handler.end_headers()
        handler.wfile.write(b'404 Not Found')


    def send(self, handler: BaseHTTPRequestHandler, response: WebFingerResponse) -> None:
        handler.send_response(response.http_status)
        for key, value in response.headers.items():
            handler.send_header(key, value)
        handler.send_header('Content-Length', str(len(response.payload)))
        handler.end_headers()
        handler.wfile.write(response.payload)


class WebFingerHttpHandler(BaseHTTPRequestHandler):
    server: '_HttpServer'

    def do_GET(self):
        self.server.website.do_GET(self)


    def log_message(self, format: str, *args: Any) -> None: # pylint: disable=redefined-builtin
        trace(f'{ self.address_string() } { format % args }')


class _HttpServer(ThreadingHTTPServer):
    def __init__(self, hostport: Tuple[str,int], website: WebFingerWebsite):
        super().__init__(hostport, WebFingerHttpHandler)
        self.website = website


class WebFingerHttpServer(Thread):
    """
    Runs the HTTP server in its own thread, between start() and stop().
    Serves HTTPS if a certfile is given.
    """
    def __init__(
        self,
        webfinger_server: WebFingerServer,
        context: Any = None,
        hostport: Tuple[str,int] = ('', 80),
        certfile: str | None = None,
        keyfile: str | None = None
    ):
        super().__init__(daemon=True)
        self._httpd = _HttpServer(hostport, WebFingerWebsite(webfinger_server, context))
        if certfile:
            ssl_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            ssl_context.load_cert_chain(certfile, keyfile)
            self._httpd.socket = ssl_context.wrap_socket(self._httpd.socket, server_side=True)


    @property
    def server_port(self) -> int:
        return self._httpd.server_address[1]


    def stop(self):
        self._httpd.shutdown() # This blocks until the server is shut down
        self._httpd.server_close()


    def run(self):
        info(f'Starting WebFinger HttpServer on port { self.server_port }')
        self._httpd.serve_forever(0.5) # check for shutdown every half second
        info('Stopping WebFinger HttpServer')
