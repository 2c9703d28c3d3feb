"""
Test splitting resource identifiers into local part and host.
"""

import pytest

from fedifinger import Identifier, Prefix, ResolverError, ResolverErrorKind, normalize_resource, parse


@pytest.mark.parametrize('resource, local_part, host', [
    ('acct:alice@example.org',          'acct:alice',          'example.org'),
    ('acct:alice@localhost:8080',       'acct:alice',          'localhost:8080'),
    ('group:devs@example.org',          'group:devs',          'example.org'),
    ('acct:alice@old.example@new.example', 'acct:alice@old.example', 'new.example'),
    ('alice@example.org',               'alice',               'example.org'),
])
def test_splits_on_last_at(resource: str, local_part: str, host: str) -> None:
    identifier = parse(resource)
    assert identifier == Identifier(local_part, host)
    assert f'{ identifier.local_part }@{ identifier.host }' == resource
    assert str(identifier) == resource


@pytest.mark.parametrize('resource', [
    'acct:alice',
    'https://example.org/users/alice',
    '',
    '@example.org',
    'acct:alice@',
])
def test_malformed(resource: str) -> None:
    with pytest.raises(ResolverError) as e:
        parse(resource)
    assert e.value.kind == ResolverErrorKind.WEBFINGER


def test_not_a_string() -> None:
    with pytest.raises(ResolverError) as e:
        parse(None) # type: ignore[arg-type]
    assert e.value.kind == ResolverErrorKind.WEBFINGER


def test_identifier_is_immutable() -> None:
    identifier = parse('acct:alice@example.org')
    with pytest.raises(AttributeError):
        identifier.host = 'other.example' # type: ignore[misc]


def test_split_prefix() -> None:
    assert parse('acct:alice@example.org').split_prefix() == (Prefix.ACCT, 'alice')
    assert parse('ACCT:alice@example.org').split_prefix() == (Prefix.ACCT, 'alice')
    assert parse('group:devs@example.org').split_prefix() == (Prefix.GROUP, 'devs')
    assert parse('hey:there@example.org').split_prefix() == ('hey', 'there')


@pytest.mark.parametrize('resource', [
    'alice@example.org',
    ':alice@example.org',
    'acct:@example.org',
])
def test_split_prefix_malformed(resource: str) -> None:
    with pytest.raises(ResolverError) as e:
        parse(resource).split_prefix()
    assert e.value.kind == ResolverErrorKind.WEBFINGER


@pytest.mark.parametrize('resource, expected', [
    ('alice@example.org',           'acct:alice@example.org'),
    ('alice@example.org:8080',      'acct:alice@example.org:8080'),
    ('acct:alice@example.org',      'acct:alice@example.org'),
    ('group:devs@example.org',      'group:devs@example.org'),
    ('https://example.org/@alice',  'https://example.org/@alice'),
])
def test_normalize_resource(resource: str, expected: str) -> None:
    assert normalize_resource(resource) == expected


def test_prefix_str() -> None:
    assert str(Prefix.ACCT) == 'acct'
    assert Prefix.parse('Group') == Prefix.GROUP
