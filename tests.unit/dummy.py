#
# Dummy classes and data for testing
#

from typing import Callable

import httpx

from fedifinger import Link, Prefix, ResolverError, Webfinger, WebFingerServer, AsyncWebFingerServer
from fedifinger.web import WebClientConfiguration
from fedifinger.web.httpxclient import HttpxAsyncWebClient, HttpxWebClient

INSTANCE = 'instance.tld'

ALICE_JRD_JSON = b"""
{
    "subject": "acct:alice@instance.tld",
    "aliases": [
        "https://instance.tld/@alice/",
        "https://instance.tld/users/alice"
    ],
    "links": [
        {
            "rel": "http://webfinger.net/rel/profile-page",
            "href": "https://instance.tld/@alice/"
        },
        {
            "rel": "http://schemas.google.com/g/2010#updates-from",
            "type": "application/atom+xml",
            "href": "https://instance.tld/@alice/feed.atom"
        },
        {
            "rel": "self",
            "type": "application/activity+json",
            "href": "https://instance.tld/users/alice"
        },
        {
            "rel": "http://ostatus.org/schema/1.0/subscribe",
            "template": "https://instance.tld/authorize_interaction?uri={uri}"
        }
    ],
    "properties": {
        "http://schema.org/name": "Alice",
        "http://instance.tld/ns/bot": null
    }
}
"""


def jrd_for(account: str, host: str = INSTANCE) -> Webfinger:
    return Webfinger(
        subject=f'acct:{ account }@{ host }',
        aliases=[ f'https://{ host }/@{ account }/' ],
        links=[
            Link(rel='http://webfinger.net/rel/profile-page', href=f'https://{ host }/@{ account }/'),
            Link(rel='self', mime_type='application/activity+json', href=f'https://{ host }/users/{ account }'),
        ])


class DummyWebFingerServer(WebFingerServer[dict[str,Webfinger]]):
    """
    Accounts are kept in the context, keyed by account name. Remembers which accounts it was asked for.
    """
    def __init__(self, domain: str = INSTANCE):
        self.domain = domain
        self.find_calls : list[tuple[str, Prefix | str, list[str] | None]] = []


    def instance_domain(self) -> str:
        return self.domain


    def find(self, account: str, context: dict[str,Webfinger], prefix: Prefix | str = Prefix.ACCT, rels: list[str] | None = None) -> Webfinger:
        self.find_calls.append((account, prefix, rels))
        if prefix == Prefix.ACCT and account in context:
            return context[account]
        raise ResolverError.not_found()


class FailingWebFingerServer(DummyWebFingerServer):
    """
    Its account storage is broken.
    """
    def find(self, account: str, context: dict[str,Webfinger], prefix: Prefix | str = Prefix.ACCT, rels: list[str] | None = None) -> Webfinger:
        raise ResolverError.http('Database unavailable')


class DummyAsyncWebFingerServer(AsyncWebFingerServer[dict[str,Webfinger]]):
    def __init__(self, domain: str = INSTANCE):
        self.domain = domain
        self.find_calls : list[str] = []


    async def instance_domain(self) -> str:
        return self.domain


    async def find(self, account: str, context: dict[str,Webfinger], prefix: Prefix | str = Prefix.ACCT, rels: list[str] | None = None) -> Webfinger:
        self.find_calls.append(account)
        if prefix == Prefix.ACCT and account in context:
            return context[account]
        raise ResolverError.not_found()


# Do not pick up proxies from the environment, they would bypass the MockTransport
TEST_CONFIG = WebClientConfiguration(trust_env=False, timeout=2.0)


def mock_web_client(handler: Callable[[httpx.Request], httpx.Response]) -> HttpxWebClient:
    return HttpxWebClient(TEST_CONFIG, httpx.MockTransport(handler))


def mock_async_web_client(handler: Callable[[httpx.Request], httpx.Response]) -> HttpxAsyncWebClient:
    return HttpxAsyncWebClient(TEST_CONFIG, httpx.MockTransport(handler))


def jrd_response(payload: bytes = ALICE_JRD_JSON, content_type: str = 'application/jrd+json') -> httpx.Response:
    return httpx.Response(200, content=payload, headers={ 'Content-Type': content_type })


class RecordingHandler:
    """
    MockTransport handler that records the requests. HTTPS is refused if https_down.
    """
    def __init__(self, response: Callable[[], httpx.Response] = jrd_response, https_down: bool = False):
        self._response = response
        self._https_down = https_down
        self.requests : list[httpx.Request] = []


    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._https_down and request.url.scheme == 'https':
            raise httpx.ConnectError('Connection refused', request=request)
        return self._response()
