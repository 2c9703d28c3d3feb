"""
The JSON Resource Descriptor (JRD), see RFC 7033 section 4.4.
Both the resolving and the serving side use these types.
"""

from typing import Any

import msgspec

from fedifinger.errors import ResolverError
from fedifinger.utils import http_https_acct_uri_parse_validate, rfc5646_language_tag_parse_validate, uri_parse_validate

JRD_CONTENT_TYPE = 'application/jrd+json'

# From the CSV file at https://www.iana.org/assignments/link-relations/link-relations.xhtml
_REGISTERED_RELATION_TYPES = frozenset("""
about acl alternate amphtml appendix apple-touch-icon apple-touch-startup-image archives author
blocked-by bookmark canonical chapter cite-as collection contents convertedfrom copyright
create-form current describedby describes disclosure dns-prefetch duplicate edit edit-form
edit-media enclosure external first glossary help hosts hub icon index intervalafter
intervalbefore intervalcontains intervaldisjoint intervalduring intervalequals
intervalfinishedby intervalfinishes intervalin intervalmeets intervalmetby intervaloverlappedby
intervaloverlaps intervalstartedby intervalstarts item last latest-version license linkset lrdd
manifest mask-icon me media-feed memento micropub modulepreload monitor monitor-group next
next-archive nofollow noopener noreferrer opener openid2.local_id openid2.provider original
p3pv1 payment pingback preconnect predecessor-version prefetch preload prerender prev preview
previous prev-archive privacy-policy profile publication related restconf replies ruleinput
search section self service service-desc service-doc service-meta sip-trunking-capability
sponsored start status stylesheet subsection successor-version sunset tag terms-of-service
timegate timemap type ugc up version-history via webmention working-copy working-copy-of
""".split())


def is_registered_relation_type(value: str) -> bool:
    """
    Return True if the provided value is a registered relation type in
    https://www.iana.org/assignments/link-relations/link-relations.xhtml
    """
    return value in _REGISTERED_RELATION_TYPES


def is_valid_media_type(value: str) -> bool:
    """
    Loose check for a media type per RFC 6838: type and subtype separated by a slash.
    """
    main, sep, sub = value.partition('/')
    return bool(sep and main.strip() and sub.strip())


class Link(msgspec.Struct, omit_defaults=True):
    """
    One member of the links array of a JRD.
    """
    rel: str
    mime_type: str | None = msgspec.field(default=None, name='type')
    """
    Serialized as "type". If you fetch href, this is what to put into the Accept header.
    """
    href: str | None = None
    template: str | None = None
    titles: dict[str, str] | None = None
    properties: dict[str, str | None] | None = None


class Webfinger(msgspec.Struct, omit_defaults=True):
    """
    A WebFinger result. Absent optional members are omitted when serialized;
    values in properties may be null.
    """
    subject: str
    aliases: list[str] = msgspec.field(default_factory=list)
    links: list[Link] = msgspec.field(default_factory=list)
    properties: dict[str, str | None] = msgspec.field(default_factory=dict)


    class JrdError(RuntimeError):
        """
        Represents a problem found while validating a JRD.
        """
        def __init__(self, jrd: 'Webfinger', msg: str):
            super().__init__(msg)
            self._jrd = jrd
            self._msg = msg


        def __str__(self):
            return self._msg or self.__class__.__name__


    class InvalidUriError(JrdError):
        """
        A URI in the JRD is invalid.
        """
        pass # pylint: disable=unnecessary-pass


    class InvalidValueError(JrdError):
        """
        A value in the JRD is empty or invalid.
        """
        pass # pylint: disable=unnecessary-pass


    class InvalidRelError(JrdError):
        """
        The JRD specifies a link relationship that is invalid.
        """
        pass # pylint: disable=unnecessary-pass


    class InvalidMediaTypeError(JrdError):
        """
        The JRD specifies a media type that is invalid.
        """
        pass # pylint: disable=unnecessary-pass


    class InvalidLanguageTagError(JrdError):
        """
        The JRD specifies a language tag that is invalid.
        """
        pass # pylint: disable=unnecessary-pass


    @staticmethod
    def from_json(payload: bytes | str) -> 'Webfinger':
        """
        Deserialize a JRD. Unknown members are ignored; members of the wrong type are not.
        Raises ResolverError of kind WEBFINGER if the payload is not a JRD.
        """
        try:
            return msgspec.json.decode(payload, type=Webfinger)
        except msgspec.DecodeError as exc: # also catches msgspec.ValidationError
            raise ResolverError.webfinger(f'Invalid JRD: { exc }') from exc


    @staticmethod
    def from_dict(data: Any) -> 'Webfinger':
        try:
            return msgspec.convert(data, type=Webfinger)
        except msgspec.ValidationError as exc:
            raise ResolverError.webfinger(f'Invalid JRD: { exc }') from exc


    def as_json(self) -> bytes:
        return msgspec.json.encode(self)


    def as_dict(self) -> dict[str, Any]:
        return msgspec.to_builtins(self)


    def link(self, rel: str) -> Link | None:
        """
        Return the first link with this rel, if any. Position in the links array is priority.
        """
        for link in self.links:
            if link.rel == rel:
                return link
        return None


    def with_rels(self, rels: list[str] | None) -> 'Webfinger':
        """
        Return a copy of this JRD that only contains the links whose rel is in rels,
        in their original order. No rels means no filtering, see RFC 7033 section 4.3.
        """
        if not rels:
            return self
        return msgspec.structs.replace(self, links=[ link for link in self.links if link.rel in rels ])


    def validate(self) -> None: # pylint: disable=too-many-branches
        """
        Check the JRD against RFC 7033 section 4.4. Raises a single JrdError if there is one
        problem, or an ExceptionGroup if there is more than one.
        """
        excs : list[Exception] = []

        if http_https_acct_uri_parse_validate(self.subject) is None:
            excs.append(Webfinger.InvalidUriError(self, f'Subject not absolute URI: "{ self.subject }"'))

        for alias in self.aliases:
            if http_https_acct_uri_parse_validate(alias) is None:
                excs.append(Webfinger.InvalidUriError(self, f'Alias not absolute URI: "{ alias }"'))

        excs += self._validate_properties(self.properties, 'Property')

        for link in self.links:
            if uri_parse_validate(link.rel) is None and not is_registered_relation_type(link.rel):
                excs.append(Webfinger.InvalidRelError(self, f'Link rel value not absolute URI nor registered relation type: "{ link.rel }"'))

            if link.mime_type is not None and not is_valid_media_type(link.mime_type):
                excs.append(Webfinger.InvalidMediaTypeError(self, f'Link type not a valid media type: "{ link.mime_type }"'))

            if link.href is not None and uri_parse_validate(link.href) is None:
                excs.append(Webfinger.InvalidUriError(self, f'Link href not a URI: "{ link.href }"'))

            if link.titles:
                for key, value in link.titles.items():
                    if key != 'und' and rfc5646_language_tag_parse_validate(key) is None:
                        excs.append(Webfinger.InvalidLanguageTagError(self, f'Link title name not a valid language tag or "und": "{ key }"'))
                    if not value:
                        excs.append(Webfinger.InvalidValueError(self, f'Link title value is empty: name "{ key }"'))

            if link.properties:
                excs += self._validate_properties(link.properties, 'Link property')

        if excs:
            if len(excs) == 1:
                raise excs[0]
            raise ExceptionGroup('JRD has multiple errors', excs)


    def _validate_properties(self, properties: dict[str, str | None], what: str) -> list[Exception]:
        return [
            Webfinger.InvalidUriError(self, f'{ what } name not an absolute URI: "{ key }"')
            for key in properties
            if uri_parse_validate(key) is None
        ]
