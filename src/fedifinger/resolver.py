"""
The client side of WebFinger: find the JRD for a resource on the resource's host.
"""

from urllib.parse import quote

from fedifinger.errors import ResolverError
from fedifinger.identifier import normalize_resource, parse
from fedifinger.jrd import JRD_CONTENT_TYPE, Webfinger
from fedifinger.reporting import info, trace
from fedifinger.web import AsyncWebClient, WebClient
from fedifinger.web.httpxclient import HttpxAsyncWebClient, HttpxWebClient
from fedifinger.web.traffic import HttpRequestResponsePair

ACCEPT_HEADER = f'{ JRD_CONTENT_TYPE }, application/json'
ACCEPTED_MEDIA_TYPES = ( JRD_CONTENT_TYPE, 'application/json' )

NOT_FOUND_HTTP_STATUSES = ( 404, 410 )
"""
Statuses that mean the resource does not exist. Every other non-2xx status is an HTTP error.
"""


def webfinger_uri_for(resource: str, rels: list[str] | None = None, scheme: str = 'https') -> str:
    """
    Construct the WebFinger query URI for a resource, such as
    https://example.org/.well-known/webfinger?resource=acct%3Aalice%40example.org
    Raises ResolverError of kind WEBFINGER if the resource has no host.
    """
    identifier = parse(resource)
    uri = f'{ scheme }://{ identifier.host }/.well-known/webfinger?resource={ quote(resource, safe="") }'
    if rels:
        for rel in rels:
            uri += f'&rel={ quote(rel, safe="") }'
    return uri


def _candidate_uris(resource: str, rels: list[str] | None, with_fallback: bool) -> list[str]:
    ret = [ webfinger_uri_for(resource, rels, 'https') ]
    if with_fallback:
        ret.append(webfinger_uri_for(resource, rels, 'http'))
    return ret


def _interpret_response(pair: HttpRequestResponsePair, strict: bool) -> Webfinger:
    """
    Turn the HTTP response into a Webfinger, or raise the right kind of ResolverError.
    """
    response = pair.response
    uri = pair.request.parsed_uri.uri

    if response.http_status in NOT_FOUND_HTTP_STATUSES:
        raise ResolverError.not_found(f'No such resource at { uri }', response.http_status)
    if not response.is_success():
        raise ResolverError.http(f'Unexpected HTTP status from { uri }', response.http_status)

    media_type = response.media_type()
    if media_type not in ACCEPTED_MEDIA_TYPES:
        # Plenty of servers get this wrong, so only make a note of it
        trace(f'Unexpected content type "{ response.content_type() }" from { uri }')

    if not response.payload:
        raise ResolverError.webfinger(f'Empty response from { uri }')

    payload : bytes | str = response.payload
    charset = response.payload_charset()
    if charset and charset.lower() not in ('utf-8', 'utf8'):
        try:
            payload = response.payload.decode(charset)
        except (LookupError, UnicodeDecodeError) as exc:
            raise ResolverError.webfinger(f'Cannot decode response from { uri } as { charset }') from exc

    jrd = Webfinger.from_json(payload)
    if strict:
        try:
            jrd.validate()
        except Webfinger.JrdError as exc:
            raise ResolverError.webfinger(f'Invalid JRD from { uri }: { exc }') from exc
        except ExceptionGroup as exc:
            msgs = '; '.join(str(e) for e in exc.exceptions)
            raise ResolverError.webfinger(f'Invalid JRD from { uri }: { msgs }') from exc
    return jrd


def _fallback_or_raise(uri: str, exc: Exception, is_last: bool) -> None:
    if is_last:
        raise ResolverError.http(str(exc)) from exc
    info(f'WebFinger query on { uri } failed, falling back to HTTP: { exc }')


class WebFingerResolver:
    """
    Resolves WebFinger resources through the provided WebClient.
    Holds no state other than the WebClient, so one instance may be shared.
    """
    def __init__(self, web_client: WebClient | None = None):
        self._web_client = web_client or HttpxWebClient()


    def resolve(
        self,
        resource: str,
        with_fallback: bool = False,
        rels: list[str] | None = None,
        strict: bool = False
    ) -> Webfinger:
        """
        Fetch and parse the JRD for the resource, e.g. 'acct:alice@example.org'. A resource
        without a scheme is taken to be an acct: URI.

        with_fallback: if the HTTPS request fails without obtaining an HTTP response, try once more over HTTP
        rels: only ask for links with these rels; the server may or may not honor this
        strict: also validate the JRD against RFC 7033, not just its structure
        return: the Webfinger. Its subject is whatever the server says it is.
        """
        resource = normalize_resource(resource)
        uris = _candidate_uris(resource, rels, with_fallback)

        for i, uri in enumerate(uris):
            try:
                pair = self._web_client.http_get(uri, ACCEPT_HEADER)

            except WebClient.TooManyRedirectsError as exc:
                raise ResolverError.http(str(exc)) from exc
            except WebClient.UndecodableResponseError as exc:
                raise ResolverError.webfinger(str(exc)) from exc
            except WebClient.HttpUnsuccessfulError as exc:
                _fallback_or_raise(uri, exc, i == len(uris) - 1)
                continue
            except ValueError as exc:
                raise ResolverError.http(f'Cannot request { uri }: { exc }') from exc

            return _interpret_response(pair, strict)

        raise ResolverError.http(f'No WebFinger query performed for { resource }') # not reached


class AsyncWebFingerResolver:
    """
    The asynchronous version of WebFingerResolver.
    """
    def __init__(self, web_client: AsyncWebClient | None = None):
        self._web_client = web_client or HttpxAsyncWebClient()


    async def resolve(
        self,
        resource: str,
        with_fallback: bool = False,
        rels: list[str] | None = None,
        strict: bool = False
    ) -> Webfinger:
        """
        See WebFingerResolver.resolve.
        """
        resource = normalize_resource(resource)
        uris = _candidate_uris(resource, rels, with_fallback)

        for i, uri in enumerate(uris):
            try:
                pair = await self._web_client.http_get(uri, ACCEPT_HEADER)

            except AsyncWebClient.TooManyRedirectsError as exc:
                raise ResolverError.http(str(exc)) from exc
            except AsyncWebClient.UndecodableResponseError as exc:
                raise ResolverError.webfinger(str(exc)) from exc
            except AsyncWebClient.HttpUnsuccessfulError as exc:
                _fallback_or_raise(uri, exc, i == len(uris) - 1)
                continue
            except ValueError as exc:
                raise ResolverError.http(f'Cannot request { uri }: { exc }') from exc

            return _interpret_response(pair, strict)

        raise ResolverError.http(f'No WebFinger query performed for { resource }') # not reached


def resolve(
    resource: str,
    with_fallback: bool = False,
    rels: list[str] | None = None,
    strict: bool = False,
    web_client: WebClient | None = None
) -> Webfinger:
    """
    Fetch a WebFinger resource. Convenience wrapper around WebFingerResolver.
    """
    return WebFingerResolver(web_client).resolve(resource, with_fallback, rels, strict)


async def resolve_async(
    resource: str,
    with_fallback: bool = False,
    rels: list[str] | None = None,
    strict: bool = False,
    web_client: AsyncWebClient | None = None
) -> Webfinger:
    """
    Fetch a WebFinger resource in an asynchronous embedding.
    """
    return await AsyncWebFingerResolver(web_client).resolve(resource, with_fallback, rels, strict)
