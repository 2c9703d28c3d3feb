"""
Abstract data types that capture what is exchanged over HTTP.
"""

from dataclasses import dataclass

from multidict import MultiDict

from fedifinger.utils import ParsedUri


@dataclass
class HttpRequest:
    """
    Captures an HTTP request.
    """
    parsed_uri: ParsedUri
    method: str = 'GET'
    accept_header : str | None = None


@dataclass
class HttpResponse:
    """
    Captures the response of an HTTP request.
    """
    http_status : int
    response_headers: MultiDict # keys are lowercased
    payload : bytes | None = None


    def content_type(self) -> str | None:
        return self.response_headers.get('content-type')


    def media_type(self) -> str | None:
        """
        The content type without parameters such as charset, lowercased.
        """
        content_type = self.content_type()
        if content_type:
            return content_type.split(';', 1)[0].strip().lower()
        return None


    def payload_charset(self) -> str | None:
        content_type = self.content_type()
        tag = 'charset='
        if content_type and content_type.find(tag) >= 0:
            return content_type[ content_type.find(tag)+len(tag) : ].split(';', 1)[0].strip().strip('"')
        return None


    def is_success(self) -> bool:
        return 200 <= self.http_status < 300


@dataclass
class HttpRequestResponsePair:
    request: HttpRequest
    response: HttpResponse
