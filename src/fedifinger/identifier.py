"""
Parsing of WebFinger resource identifiers such as ``acct:alice@example.org``.
"""

from dataclasses import dataclass
from enum import Enum

from fedifinger.errors import ResolverError


class Prefix(Enum):
    """
    Well-known schemes of WebFinger resources. Other schemes are represented by
    the plain lowercase string instead, see parse().
    """
    ACCT = 'acct'
    GROUP = 'group'


    @staticmethod
    def parse(value: str) -> 'Prefix | str':
        lower = value.lower()
        for candidate in Prefix:
            if candidate.value == lower:
                return candidate
        return lower


    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Identifier:
    """
    A resource identifier split at its last '@'. The local part still carries the
    scheme, if any: for ``acct:alice@example.org`` it is ``acct:alice``.
    """
    local_part: str
    host: str


    def split_prefix(self) -> tuple['Prefix | str', str]:
        """
        Split the local part into the scheme and the bare account name, e.g.
        ``acct:alice`` into (Prefix.ACCT, 'alice').
        """
        scheme, sep, account = self.local_part.partition(':')
        if not sep or not scheme or not account:
            raise ResolverError.webfinger(f'Resource has no scheme: "{ self.local_part }@{ self.host }"')
        return (Prefix.parse(scheme), account)


    def __str__(self):
        return f'{ self.local_part }@{ self.host }'


def parse(resource: str) -> Identifier:
    """
    Split the resource on its last '@' into local part and host.
    Raises ResolverError of kind WEBFINGER if there is no '@' or either side is empty.
    """
    if not isinstance(resource, str):
        raise ResolverError.webfinger(f'Resource is not a string: { type(resource) }')

    local_part, sep, host = resource.rpartition('@')
    if not sep:
        raise ResolverError.webfinger(f'Resource has no "@": "{ resource }"')
    if not local_part or not host:
        raise ResolverError.webfinger(f'Resource has empty local part or host: "{ resource }"')
    return Identifier(local_part, host)


def normalize_resource(resource: str) -> str:
    """
    Add the acct: scheme to a resource that does not have one, such as ``alice@example.org``.
    A ':' after the '@' is a port number, not a scheme separator.
    """
    at = resource.find('@')
    colon = resource.find(':')
    if colon < 0 or (0 <= at < colon):
        return f'{ Prefix.ACCT }:{ resource }'
    return resource
