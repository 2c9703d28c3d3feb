"""
The HTTP client abstraction the WebFinger resolver talks through. Applications may
inject any implementation; fedifinger.web.httpxclient has the default ones.
"""

from abc import ABC, abstractmethod

import msgspec

from fedifinger.utils import FEDIFINGER_VERSION, ParsedUri
from .traffic import HttpRequest, HttpRequestResponsePair


class WebClientConfiguration(msgspec.Struct, frozen=True):
    """
    Settings for the default HTTP clients. The resolver itself has no timeouts
    or retries of its own beyond the HTTPS to HTTP fallback; they are all here.
    """
    timeout: float = 10.0
    verify: bool = True
    follow_redirects: bool = True
    max_redirects: int = 10
    trust_env: bool = True
    """
    Take proxy settings and the like from the environment.
    """
    user_agent: str = f'fedifinger/{ FEDIFINGER_VERSION }'


class _WebClientErrors:
    """
    Errors shared by the synchronous and asynchronous web clients.
    """
    class HttpUnsuccessfulError(RuntimeError):
        """
        Thrown to indicate an unsuccessful HTTP request because DNS could not be resolved, the
        connection was refused, the request timed out etc. No HTTP response was obtained.
        """
        def __init__(self, request: HttpRequest, msg: str | None = None):
            super().__init__(msg)
            self.request = request
            self.msg = msg


        def __str__(self):
            ret = f'Unsuccessful HTTP request: { self.request.parsed_uri.uri }'
            if self.msg:
                ret += f' ({ self.msg })'
            return ret


    class TlsError(HttpUnsuccessfulError):
        """
        Raised when the TLS handshake failed, e.g. because the certificate was invalid.
        """
        def __str__(self):
            return f'TLS failure: { self.request.parsed_uri.uri }' + (f' ({ self.msg })' if self.msg else '')


    class TooManyRedirectsError(RuntimeError):
        """
        Thrown to indicate that the client has lost patience with the redirects of the server
        it is talking to. Unlike HttpUnsuccessfulError, the server did respond.
        """
        def __init__(self, request: HttpRequest):
            super().__init__()
            self.request = request


        def __str__(self):
            return f'Too many redirects: { self.request.parsed_uri.uri }'


    class UndecodableResponseError(RuntimeError):
        """
        The server responded, but its body could not be decoded according to its own
        Content-Encoding header.
        """
        def __init__(self, request: HttpRequest, msg: str | None = None):
            super().__init__(msg)
            self.request = request
            self.msg = msg


        def __str__(self):
            ret = f'Undecodable response: { self.request.parsed_uri.uri }'
            if self.msg:
                ret += f' ({ self.msg })'
            return ret


    @staticmethod
    def _get_request(uri: str, accept_header: str | None) -> HttpRequest:
        parsed = ParsedUri.parse(uri)
        if not parsed:
            raise ValueError(f'Invalid URI: { uri }')
        return HttpRequest(parsed, 'GET', accept_header)


class WebClient(_WebClientErrors, ABC):
    """
    Performs HTTP requests synchronously.
    """
    @abstractmethod
    def http(self, request: HttpRequest) -> HttpRequestResponsePair:
        """
        Perform the HTTP request. Any HTTP status, including 4xx and 5xx, is returned as a
        response. Raises HttpUnsuccessfulError if no response could be obtained.
        """
        ...


    def http_get(self, uri: str, accept_header: str | None = None) -> HttpRequestResponsePair:
        """
        Convenience function to perform an HTTP GET request.
        """
        return self.http(self._get_request(uri, accept_header))


class AsyncWebClient(_WebClientErrors, ABC):
    """
    Performs HTTP requests in an asynchronous embedding.
    """
    @abstractmethod
    async def http(self, request: HttpRequest) -> HttpRequestResponsePair:
        """
        Same contract as WebClient.http.
        """
        ...


    async def http_get(self, uri: str, accept_header: str | None = None) -> HttpRequestResponsePair:
        return await self.http(self._get_request(uri, accept_header))
