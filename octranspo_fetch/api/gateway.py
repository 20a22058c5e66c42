"""
OC Transpo API v1.1 gateway: POSTs a request, parses the XML reply and hands back
the <oct:{resource}Result> element. Embedded error codes and missing fields are
raised as typed errors. No retries; transport failures surface to the caller.
"""
import logging
import xml.etree.ElementTree as ET
from typing import Any

import httpx

from octranspo_fetch.api.errors import (
    MissingFieldError,
    NoReplyError,
    TransportError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

OCT_BASE = "https://api.octranspo1.com/v1.1"
OCT_REQUEST_TIMEOUT_SECONDS = 10.0
OCT_NS = {"oct": "http://octranspo.com", "t": "http://tempuri.org/"}


class ResultNode:
    """Thin wrapper over an XML element with lookups in the oct/t namespaces."""

    def __init__(self, element: ET.Element):
        self._element = element

    def children(self, path: str) -> list["ResultNode"]:
        return [ResultNode(e) for e in self._element.findall(path, OCT_NS)]

    def value(self, path: str) -> str:
        """Text content of a required child; raises MissingFieldError when absent."""
        found = self._element.find(path, OCT_NS)
        if found is None:
            raise MissingFieldError(path)
        return "".join(found.itertext())

    def child(self, path: str) -> "ResultNode | None":
        """Optional child; None when absent."""
        found = self._element.find(path, OCT_NS)
        return ResultNode(found) if found is not None else None

    def text(self) -> str:
        return "".join(self._element.itertext())

    def raise_for_error(self, context: str = "") -> None:
        """Raise UpstreamError if this node carries a non-empty t:Error child."""
        xerror = self.child("t:Error")
        code = xerror.text().strip() if xerror is not None else ""
        if code:
            raise UpstreamError(code, context)


def _find_result(root: ET.Element, resource: str) -> ET.Element | None:
    tag = f"{{{OCT_NS['oct']}}}{resource}Result"
    if root.tag == tag:
        return root
    return root.find(f".//oct:{resource}Result", OCT_NS)


def parse_result(body: bytes | str, resource: str) -> ResultNode:
    """Parse a raw XML reply and return the checked result node for resource."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise TransportError(f"Unparseable reply for {resource}: {e}") from e
    found = _find_result(root, resource)
    if found is None:
        raise NoReplyError(resource)
    result = ResultNode(found)
    result.raise_for_error(f"Error for {resource}")
    return result


class OCTranspoGateway:
    """Performs the HTTP call for one API resource. Counts nothing and caches nothing."""

    def __init__(
        self,
        application_id: str,
        application_key: str,
        base_url: str = OCT_BASE,
        timeout: float = OCT_REQUEST_TIMEOUT_SECONDS,
    ):
        self._app_id = application_id
        self._app_key = application_key
        self._base = base_url.rstrip("/")
        self._timeout = timeout

    def fetch(self, resource: str, params: list[tuple[str, Any]]) -> ResultNode:
        """
        POST to {base}/{resource} with credentials followed by params (in order).
        Returns the parsed <{resource}Result> node.
        """
        url = f"{self._base}/{resource}"
        data = [("appID", self._app_id), ("apiKey", self._app_key), *params]
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(url, data=dict(data))
                resp.raise_for_status()
                body = resp.content
        except httpx.TimeoutException as e:
            logger.warning(
                "telemetry oct_timeout resource=%s",
                resource,
                extra={"resource": resource},
            )
            raise TransportError(f"Timed out calling {resource}") from e
        except httpx.HTTPError as e:
            logger.warning(
                "telemetry oct_http_error resource=%s error=%s",
                resource,
                str(e),
                extra={"resource": resource, "error": str(e)},
            )
            raise TransportError(f"Request to {resource} failed: {e}") from e

        logger.debug(
            "telemetry oct_fetched resource=%s bytes=%s",
            resource,
            len(body),
            extra={"resource": resource, "bytes": len(body)},
        )
        return parse_result(body, resource)
