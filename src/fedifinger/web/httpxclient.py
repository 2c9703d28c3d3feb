"""
WebClient implementations on top of httpx.
"""

import ssl

import httpx
from multidict import MultiDict

from fedifinger.reporting import trace
from . import AsyncWebClient, WebClient, WebClientConfiguration
from .traffic import HttpRequest, HttpRequestResponsePair, HttpResponse


def _headers(config: WebClientConfiguration, request: HttpRequest) -> dict[str,str]:
    ret = { 'User-Agent': config.user_agent }
    if request.accept_header:
        ret['Accept'] = request.accept_header
    return ret


def _client_args(config: WebClientConfiguration) -> dict:
    return {
        'verify'           : config.verify,
        'follow_redirects' : config.follow_redirects,
        'max_redirects'    : config.max_redirects,
        'timeout'          : config.timeout,
        'trust_env'        : config.trust_env
    }


def _to_pair(request: HttpRequest, httpx_response: httpx.Response) -> HttpRequestResponsePair:
    response_headers : MultiDict = MultiDict()
    for key, value in httpx_response.headers.multi_items():
        response_headers.add(key.lower(), value)
    ret = HttpRequestResponsePair(request, HttpResponse(httpx_response.status_code, response_headers, httpx_response.content))
    trace( f'HTTP { request.method } { request.parsed_uri.uri } returns { httpx_response.status_code }')
    return ret


def _translate(request: HttpRequest, exc: Exception) -> Exception:
    """
    Map an httpx exception to the corresponding WebClient error.
    """
    if isinstance(exc, httpx.TooManyRedirects):
        return WebClient.TooManyRedirectsError(request)

    if isinstance(exc, httpx.DecodingError):
        return WebClient.UndecodableResponseError(request, str(exc))

    if isinstance(exc, httpx.ConnectError):
        # httpx wraps httpcore's exception, which wraps the one from ssl
        cause = exc.__cause__ or exc.__context__
        while cause is not None:
            if isinstance(cause, ssl.SSLError):
                return WebClient.TlsError(request, str(exc))
            cause = cause.__cause__ or cause.__context__
    return WebClient.HttpUnsuccessfulError(request, f'{ type(exc).__name__ }: { exc }')


class HttpxWebClient(WebClient):
    """
    Synchronous WebClient. A new httpx.Client is used for each request; pass a transport
    to substitute the network, e.g. httpx.MockTransport in tests.
    """
    def __init__(self, config: WebClientConfiguration | None = None, transport: httpx.BaseTransport | None = None):
        self._config = config or WebClientConfiguration()
        self._transport = transport


    # Python 3.12 @override
    def http(self, request: HttpRequest) -> HttpRequestResponsePair:
        trace( f'Performing HTTP { request.method } on { request.parsed_uri.uri }')
        try:
            with httpx.Client(transport=self._transport, **_client_args(self._config)) as httpx_client:
                httpx_request = httpx_client.build_request(
                        request.method,
                        request.parsed_uri.uri,
                        headers=_headers(self._config, request))
                httpx_response = httpx_client.send(httpx_request)
                httpx_response.read()
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise _translate(request, exc) from exc

        return _to_pair(request, httpx_response)


class HttpxAsyncWebClient(AsyncWebClient):
    """
    Asynchronous WebClient, same conventions as HttpxWebClient.
    """
    def __init__(self, config: WebClientConfiguration | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config or WebClientConfiguration()
        self._transport = transport


    # Python 3.12 @override
    async def http(self, request: HttpRequest) -> HttpRequestResponsePair:
        trace( f'Performing async HTTP { request.method } on { request.parsed_uri.uri }')
        try:
            async with httpx.AsyncClient(transport=self._transport, **_client_args(self._config)) as httpx_client:
                httpx_request = httpx_client.build_request(
                        request.method,
                        request.parsed_uri.uri,
                        headers=_headers(self._config, request))
                httpx_response = await httpx_client.send(httpx_request)
                await httpx_response.aread()
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise _translate(request, exc) from exc

        return _to_pair(request, httpx_response)
