"""
Test the server side: lookup, endpoint and response rendering.
"""

import pytest
from multidict import MultiDict

from fedifinger import Prefix, ResolverError, ResolverErrorKind, Webfinger, parse_query, response_for

from dummy import INSTANCE, DummyWebFingerServer, FailingWebFingerServer, jrd_for


@pytest.fixture
def accounts() -> dict[str,Webfinger]:
    return { 'alice': jrd_for('alice'), 'admin': jrd_for('admin') }


@pytest.fixture
def server() -> DummyWebFingerServer:
    return DummyWebFingerServer()


def test_found(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    response = server.endpoint({ 'resource': f'acct:alice@{ INSTANCE }' }, accounts)

    assert response.http_status == 200
    assert response.content_type() == 'application/jrd+json'
    assert response.headers['Access-Control-Allow-Origin'] == '*'
    assert Webfinger.from_json(response.payload) == accounts['alice']
    assert server.find_calls == [ ('alice', Prefix.ACCT, []) ]


def test_not_found(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    response = server.endpoint({ 'resource': f'acct:nobody@{ INSTANCE }' }, accounts)

    assert response.http_status == 404
    assert response.headers['Access-Control-Allow-Origin'] == '*'


def test_wrong_domain_does_not_call_find(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    response = server.endpoint({ 'resource': 'acct:alice@otherdomain.tld' }, accounts)

    assert response.http_status == 404
    assert server.find_calls == []


def test_wrong_domain_looks_like_not_found(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    wrong_domain = server.endpoint({ 'resource': 'acct:alice@otherdomain.tld' }, accounts)
    no_account = server.endpoint({ 'resource': f'acct:nobody@{ INSTANCE }' }, accounts)

    assert wrong_domain.http_status == no_account.http_status
    assert wrong_domain.payload == no_account.payload


def test_domain_is_case_insensitive(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    assert server.endpoint({ 'resource': 'acct:alice@Instance.TLD' }, accounts).http_status == 200


@pytest.mark.parametrize('query', [
    {},
    { 'resource': '' },
    { 'resource': 'admin' },
    { 'resource': 'acct:admin' },
    { 'resource': f'admin@{ INSTANCE }' },
    { 'resource': [ f'acct:alice@{ INSTANCE }', f'acct:admin@{ INSTANCE }' ] },
    { 'rel': 'self' },
])
def test_malformed(server: DummyWebFingerServer, accounts: dict[str,Webfinger], query: dict) -> None:
    response = server.endpoint(query, accounts)

    assert response.http_status == 400
    assert response.payload.startswith(b'400 Bad Request')
    assert server.find_calls == []


def test_group_prefix_passed_to_find(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    response = server.endpoint({ 'resource': f'group:admin@{ INSTANCE }' }, accounts)

    assert response.http_status == 404 # the dummy only knows acct: resources
    assert server.find_calls == [ ('admin', Prefix.GROUP, []) ]


def test_query_string(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    response = server.endpoint('resource=acct%3Aalice%40instance.tld&rel=self', accounts)

    assert response.http_status == 200
    jrd = Webfinger.from_json(response.payload)
    assert [ link.rel for link in jrd.links ] == [ 'self' ]
    assert server.find_calls == [ ('alice', Prefix.ACCT, [ 'self' ]) ]


def test_multidict_with_several_rels(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    query = MultiDict([
        ('resource', f'acct:alice@{ INSTANCE }'),
        ('rel', 'self'),
        ('rel', 'http://webfinger.net/rel/profile-page'),
    ])
    response = server.endpoint(query, accounts)

    jrd = Webfinger.from_json(response.payload)
    assert [ link.rel for link in jrd.links ] == [ 'http://webfinger.net/rel/profile-page', 'self' ]


def test_internal_failure_is_500(accounts: dict[str,Webfinger]) -> None:
    response = FailingWebFingerServer().endpoint({ 'resource': f'acct:alice@{ INSTANCE }' }, accounts)

    assert response.http_status == 500
    assert b'Database' not in response.payload


def test_lookup(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    assert server.lookup(f'acct:admin@{ INSTANCE }', accounts) == accounts['admin']

    with pytest.raises(ResolverError) as e:
        server.lookup('acct:admin@otherdomain.tld', accounts)
    assert e.value.kind == ResolverErrorKind.NOT_FOUND

    with pytest.raises(ResolverError) as e:
        server.lookup('admin', accounts)
    assert e.value.kind == ResolverErrorKind.WEBFINGER


def test_parse_query() -> None:
    assert parse_query('?resource=acct%3Aalice%40instance.tld') == ('acct:alice@instance.tld', [])
    assert parse_query({ 'resource': 'acct:a@b', 'rel': [ 'x', 'y' ] }) == ('acct:a@b', [ 'x', 'y' ])


def test_response_for() -> None:
    assert response_for(ResolverError.not_found()).http_status == 404
    assert response_for(ResolverError.webfinger('bad')).http_status == 400
    assert response_for(ResolverError.http()).http_status == 500

    response = response_for(jrd_for('alice'))
    assert response.http_status == 200
    assert Webfinger.from_json(response.payload) == jrd_for('alice')


class ListQuery(dict):
    """
    Behaves like the query multi-dicts of werkzeug or Django: get() returns the first value,
    getlist() all of them.
    """
    def __init__(self, pairs: list[tuple[str,str]]):
        super().__init__()
        self._pairs = pairs
        for key, value in pairs:
            self.setdefault(key, value)


    def getlist(self, key: str) -> list[str]:
        return [ value for k, value in self._pairs if k == key ]


def test_getlist_query() -> None:
    query = ListQuery([
        ('resource', f'acct:alice@{ INSTANCE }'),
        ('rel', 'self'),
        ('rel', 'http://webfinger.net/rel/profile-page'),
    ])
    assert parse_query(query) == (f'acct:alice@{ INSTANCE }', [ 'self', 'http://webfinger.net/rel/profile-page' ])


def test_getlist_query_with_repeated_resource(server: DummyWebFingerServer, accounts: dict[str,Webfinger]) -> None:
    query = ListQuery([
        ('resource', f'acct:alice@{ INSTANCE }'),
        ('resource', f'acct:admin@{ INSTANCE }'),
    ])
    response = server.endpoint(query, accounts)
    assert response.http_status == 400
    assert server.find_calls == []
