"""
Fetch and serve WebFinger (RFC 7033) resources.

Use resolve() to fetch the JRD of a remote resource, and subclass WebFingerServer
to serve the JRDs of your own accounts.
"""

from fedifinger.errors import ResolverError, ResolverErrorKind
from fedifinger.identifier import Identifier, Prefix, normalize_resource, parse
from fedifinger.jrd import JRD_CONTENT_TYPE, Link, Webfinger
from fedifinger.resolver import (
    AsyncWebFingerResolver,
    WebFingerResolver,
    resolve,
    resolve_async,
    webfinger_uri_for
)
from fedifinger.server import (
    AsyncWebFingerServer,
    WebFingerResponse,
    WebFingerServer,
    parse_query,
    response_for
)
from fedifinger.utils import FEDIFINGER_VERSION

__all__ = [
    'AsyncWebFingerResolver',
    'AsyncWebFingerServer',
    'FEDIFINGER_VERSION',
    'Identifier',
    'JRD_CONTENT_TYPE',
    'Link',
    'Prefix',
    'ResolverError',
    'ResolverErrorKind',
    'WebFingerResolver',
    'WebFingerResponse',
    'WebFingerServer',
    'Webfinger',
    'normalize_resource',
    'parse',
    'parse_query',
    'resolve',
    'resolve_async',
    'response_for',
    'webfinger_uri_for',
]
