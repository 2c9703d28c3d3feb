"""
The server side of WebFinger. A host application subclasses WebFingerServer (or
AsyncWebFingerServer), implements instance_domain() and find(), and calls endpoint()
from whatever web framework routes /.well-known/webfinger to it.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar
from urllib.parse import parse_qsl

from multidict import MultiDict

from fedifinger.errors import ResolverError, ResolverErrorKind
from fedifinger.identifier import Identifier, Prefix, parse
from fedifinger.jrd import JRD_CONTENT_TYPE, Webfinger
from fedifinger.reporting import trace

C = TypeVar('C')
"""
Whatever the application needs to find accounts, e.g. a database session.
"""

QueryParams = MultiDict | Mapping[str, str | list[str]] | str
"""
The query parameters of the incoming request: a MultiDict, a mapping (including the
multi-dicts of web frameworks that offer getlist()), or the raw query string.
"""

RESOURCE_PAR = 'resource'
REL_PAR = 'rel'

_HTTP_STATUS_FOR_KIND = {
    ResolverErrorKind.NOT_FOUND : 404,
    ResolverErrorKind.WEBFINGER : 400,
    ResolverErrorKind.HTTP      : 500,
}

_REASONS = {
    400 : 'Bad Request',
    404 : 'Not Found',
    500 : 'Internal Server Error',
}


@dataclass
class WebFingerResponse:
    """
    What the embedding web server must send back: status, headers and body.
    """
    http_status: int
    headers: MultiDict
    payload: bytes


    def content_type(self) -> str | None:
        return self.headers.get('Content-Type')


def response_for(outcome: Webfinger | ResolverError) -> WebFingerResponse:
    """
    Render the outcome of a lookup as HTTP response. A NOT_FOUND error, which includes
    queries for resources on other hosts, becomes 404; a malformed resource 400; anything
    else 500. All responses allow cross-origin access, see RFC 7033 section 5.
    """
    headers : MultiDict = MultiDict()
    headers.add('Access-Control-Allow-Origin', '*')

    if isinstance(outcome, Webfinger):
        headers.add('Content-Type', JRD_CONTENT_TYPE)
        return WebFingerResponse(200, headers, outcome.as_json())

    http_status = _HTTP_STATUS_FOR_KIND[outcome.kind]
    headers.add('Content-Type', 'text/plain; charset=utf-8')
    body = f'{ http_status } { _REASONS[http_status] }'
    if outcome.kind == ResolverErrorKind.WEBFINGER and outcome.msg:
        body += f': { outcome.msg }'
    return WebFingerResponse(http_status, headers, body.encode('utf-8'))


def _query_values(query_params: QueryParams, name: str) -> list[str]:
    if isinstance(query_params, str):
        query_params = MultiDict(parse_qsl(query_params.lstrip('?'), keep_blank_values=True))
    if hasattr(query_params, 'getall'):
        return list(query_params.getall(name, []))
    if hasattr(query_params, 'getlist'):
        # werkzeug, Django and Starlette multi-dicts; their get() only returns one value
        return list(query_params.getlist(name))
    value = query_params.get(name)
    if value is None:
        return []
    if isinstance(value, str):
        return [ value ]
    return list(value)


def parse_query(query_params: QueryParams) -> tuple[str, list[str]]:
    """
    Extract the resource and the rels from the query parameters.
    Raises ResolverError of kind WEBFINGER unless there is exactly one non-empty resource.
    """
    resources = _query_values(query_params, RESOURCE_PAR)
    match len(resources):
        case 0:
            raise ResolverError.webfinger('Missing resource parameter')
        case 1:
            resource = resources[0]
        case _:
            raise ResolverError.webfinger(f'Query has { len(resources) } values for resource parameter')
    if not resource:
        raise ResolverError.webfinger('Empty resource parameter')
    return (resource, _query_values(query_params, REL_PAR))


def _split_resource(resource: str, instance_domain: str) -> tuple[Prefix | str, str]:
    """
    Parse the resource and make sure it belongs to this instance.
    return: prefix and account
    """
    identifier : Identifier = parse(resource)
    prefix, account = identifier.split_prefix()
    if identifier.host.lower() != instance_domain.lower():
        trace(f'Not authoritative for { resource }, this is { instance_domain }')
        raise ResolverError.not_found(f'Not on this instance: { identifier.host }')
    return (prefix, account)


class WebFingerServer(ABC, Generic[C]):
    """
    Answers WebFinger queries for the accounts of one domain.
    """
    @abstractmethod
    def instance_domain(self) -> str:
        """
        The domain this server is authoritative for, e.g. 'example.org'. Queries for
        resources on other hosts are answered with 404.
        """
        ...


    @abstractmethod
    def find(self, account: str, context: C, prefix: Prefix | str = Prefix.ACCT, rels: list[str] | None = None) -> Webfinger:
        """
        Find the account and return its Webfinger.

        account: the bare account name, e.g. 'alice' for 'acct:alice@example.org'
        context: what the application passed into endpoint() or lookup()
        prefix: the scheme of the resource, so acct: and group: resources can be told apart
        rels: the requested rels. Links with other rels will be removed afterwards anyway.
        Raise ResolverError.not_found() if there is no such account.
        """
        ...


    def lookup(self, resource: str, context: C, rels: list[str] | None = None) -> Webfinger:
        """
        Return the Webfinger for a full resource such as 'acct:alice@example.org', restricted
        to the requested rels. find() is only invoked for resources on this instance.
        """
        prefix, account = _split_resource(resource, self.instance_domain())
        return self.find(account, context, prefix, rels).with_rels(rels)


    def endpoint(self, query_params: QueryParams, context: C) -> WebFingerResponse:
        """
        Handle one request to /.well-known/webfinger. Exceptions other than ResolverError
        raised by find() are not caught.
        """
        outcome : Webfinger | ResolverError
        try:
            resource, rels = parse_query(query_params)
            outcome = self.lookup(resource, context, rels)
        except ResolverError as exc:
            outcome = exc
        ret = response_for(outcome)
        trace(f'WebFinger endpoint returns { ret.http_status }')
        return ret


class AsyncWebFingerServer(ABC, Generic[C]):
    """
    The asynchronous version of WebFingerServer, for applications whose account lookup
    needs to await.
    """
    @abstractmethod
    async def instance_domain(self) -> str:
        ...


    @abstractmethod
    async def find(self, account: str, context: C, prefix: Prefix | str = Prefix.ACCT, rels: list[str] | None = None) -> Webfinger:
        """
        See WebFingerServer.find.
        """
        ...


    async def lookup(self, resource: str, context: C, rels: list[str] | None = None) -> Webfinger:
        prefix, account = _split_resource(resource, await self.instance_domain())
        jrd = await self.find(account, context, prefix, rels)
        return jrd.with_rels(rels)


    async def endpoint(self, query_params: QueryParams, context: C) -> WebFingerResponse:
        outcome : Webfinger | ResolverError
        try:
            resource, rels = parse_query(query_params)
            outcome = await self.lookup(resource, context, rels)
        except ResolverError as exc:
            outcome = exc
        ret = response_for(outcome)
        trace(f'WebFinger endpoint returns { ret.http_status }')
        return ret
