"""
The errors that WebFinger resolution and serving may produce.
"""

from enum import Enum


class ResolverErrorKind(Enum):
    """
    The closed set of ways in which resolving or serving a WebFinger resource can fail.
    """
    NOT_FOUND = 1
    """
    The resource or account does not exist, or this server is not authoritative for it.
    """

    WEBFINGER = 2
    """
    The resource identifier is malformed, or the JRD failed JSON or schema validation.
    """

    HTTP = 3
    """
    Transport-level failure: DNS, connection, TLS, or an unexpected HTTP status.
    """


class ResolverError(RuntimeError):
    """
    Raised whenever a WebFinger resolution or lookup fails. Callers inspect ``kind``,
    which is always one of the ResolverErrorKind members.
    """
    def __init__(self, kind: ResolverErrorKind, msg: str | None = None, http_status: int | None = None):
        super().__init__(msg or kind.name)
        self.kind = kind
        self.msg = msg
        self.http_status = http_status


    @staticmethod
    def not_found(msg: str | None = None, http_status: int | None = None) -> 'ResolverError':
        return ResolverError(ResolverErrorKind.NOT_FOUND, msg, http_status)


    @staticmethod
    def webfinger(msg: str | None = None) -> 'ResolverError':
        return ResolverError(ResolverErrorKind.WEBFINGER, msg)


    @staticmethod
    def http(msg: str | None = None, http_status: int | None = None) -> 'ResolverError':
        return ResolverError(ResolverErrorKind.HTTP, msg, http_status)


    def __str__(self):
        ret = f'{ self.kind.name }'
        if self.http_status:
            ret += f' (HTTP { self.http_status })'
        if self.msg:
            ret += f': { self.msg }'
        return ret
