from __future__ import annotations

import http.client
import json
import ssl
from typing import Any, Protocol, Self, TypedDict, cast, runtime_checkable
import urllib.error
import urllib.parse
import urllib.request

import loguru
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from catalogsync.errors import (
    ServiceCallError,
    SourceUnavailable,
    SubmissionChannelError,
    SyncRequestError,
)
from catalogsync.infra.clients.endpoint import ManagementEndpoint
from catalogsync.models.candidate import CandidateRecord, CandidateState

# Safety net against a service that keeps handing out nextLink forever.
MAX_PAGES = 1000


class ClassificationSummary(TypedDict):
    uncategorized_count: int


@runtime_checkable
class ManagementService(Protocol):
    """Operations the dispatch engine needs from the management system."""

    def list_candidates(self) -> list[CandidateRecord]:
        """Return records awaiting classification.

        Raises:
            SourceUnavailable: If the inventory cannot be listed.
        """
        ...

    def get_classification_summary(self) -> ClassificationSummary:
        """Return the current uncategorized count.

        Raises:
            SourceUnavailable: If the summary cannot be fetched.
        """
        ...

    def submit_classification_request(self, key: str) -> int:
        """Submit one record and return the service result code (0 = accepted).

        Raises:
            SubmissionChannelError: If the request could not be issued.
        """
        ...

    def request_catalog_sync(self) -> int:
        """Ask the service to start a catalog synchronization pass.

        Raises:
            SyncRequestError: If the request could not be issued.
        """
        ...


class ManagementBaseModel(BaseModel):
    """Shared base for management service response models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def parse(cls, data: Any) -> Self:
        return cls.model_validate(data)


class CandidateModel(ManagementBaseModel):
    key: str = ""
    display_name: str = Field(default="", alias="displayName")
    publisher_name: str | None = Field(default=None, alias="publisherName")
    state: str | int | None = None

    def to_record(self) -> CandidateRecord:
        return CandidateRecord(
            key=self.key,
            display_name=self.display_name,
            publisher_name=self.publisher_name or "",
            state=CandidateState.parse(self.state),
        )


class CandidateListResponse(ManagementBaseModel):
    value: list[CandidateModel] = Field(default_factory=list)
    next_link: str | None = Field(default=None, alias="nextLink")


class SummaryResponse(ManagementBaseModel):
    uncategorized_count: int = Field(alias="uncategorizedCount")


class ResultCodeResponse(ManagementBaseModel):
    result_code: int = Field(alias="resultCode")


class ManagementClientLogger:
    """Handles all logging for ManagementClient."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def request(self, method: str, url: str) -> None:
        self._logger.bind(method=method, url=url).debug("{} {}", method, url)

    def candidates_listed(self, count: int, pages: int) -> None:
        self._logger.bind(count=count, pages=pages).info(
            "Listed {} uncategorized candidates ({} pages)", count, pages
        )

    def listing_truncated(self, pages: int, next_link: str) -> None:
        self._logger.bind(pages=pages, next_link=next_link).warning(
            "Stopped listing candidates after {} pages; more pages remain at {}",
            pages,
            next_link,
        )

    def summary_fetched(self, uncategorized_count: int) -> None:
        self._logger.bind(uncategorized=uncategorized_count).debug(
            "Uncategorized count: {}", uncategorized_count
        )


class ManagementClient:
    """JSON-over-HTTPS client for the management system's administration API."""

    def __init__(
        self,
        endpoint: ManagementEndpoint,
        *,
        api_token: str | None = None,
        timeout_seconds: float = 30.0,
        verify_tls: bool = True,
        logger_instance: loguru.Logger = logger,
    ) -> None:
        self._endpoint = endpoint
        self._api_token = api_token
        self._timeout_seconds = timeout_seconds
        self._verify_tls = verify_tls
        self._logger = ManagementClientLogger(logger_instance)

    @property
    def endpoint(self) -> ManagementEndpoint:
        return self._endpoint

    def _url(self, path: str, query: dict[str, str] | None = None) -> str:
        url = self._endpoint.base_url.rstrip("/") + path
        if query:
            url += "?" + urllib.parse.urlencode(query)
        return url

    def _ssl_context(self) -> ssl.SSLContext | None:
        if self._verify_tls:
            return None
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    def _parse_json_response(self, body: str) -> dict[str, Any]:
        try:
            return cast(dict[str, Any], json.loads(body))
        except json.JSONDecodeError as e:
            raise ServiceCallError(
                f"Failed to parse management service response as JSON: {e}"
            ) from e

    def _request(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {"Accept": "application/json"}
        data: bytes | None = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"

        req = urllib.request.Request(  # noqa: S310
            url, data=data, headers=headers, method=method
        )
        self._logger.request(method, url)

        try:
            with urllib.request.urlopen(  # noqa: S310 - configured endpoint
                req, timeout=self._timeout_seconds, context=self._ssl_context()
            ) as resp:
                body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            err_body = e.read().decode("utf-8", "ignore")
            raise ServiceCallError(
                f"Management service error ({e.code}) for {method} {url}: {err_body}"
            ) from e
        except (OSError, http.client.HTTPException) as e:
            # urllib leaves errors raised while reading the response unwrapped.
            raise ServiceCallError(
                f"Network error calling management service at {url}: {e}"
            ) from e

        return self._parse_json_response(body) if body.strip() else {}

    # High-level APIs -----------------------------------------------------

    def list_candidates(self) -> list[CandidateRecord]:
        """List uncategorized records, following ``nextLink`` pagination."""
        url: str | None = self._url("/software", {"state": "uncategorized"})
        records: list[CandidateRecord] = []
        pages = 0
        try:
            while url is not None and pages < MAX_PAGES:
                resp = CandidateListResponse.parse(self._request("GET", url))
                records.extend(item.to_record() for item in resp.value)
                pages += 1
                url = resp.next_link
        except (ServiceCallError, ValueError) as e:
            raise SourceUnavailable(f"Could not list candidates: {e}") from e

        if url is not None:
            self._logger.listing_truncated(pages, url)
        self._logger.candidates_listed(len(records), pages)
        return records

    def get_classification_summary(self) -> ClassificationSummary:
        try:
            resp = SummaryResponse.parse(
                self._request("GET", self._url("/software/summary"))
            )
        except (ServiceCallError, ValueError) as e:
            raise SourceUnavailable(
                f"Could not fetch classification summary: {e}"
            ) from e

        self._logger.summary_fetched(resp.uncategorized_count)
        return {"uncategorized_count": resp.uncategorized_count}

    def submit_classification_request(self, key: str) -> int:
        path = f"/software/{urllib.parse.quote(key, safe='')}/categorize"
        try:
            resp = ResultCodeResponse.parse(self._request("POST", self._url(path), {}))
        except (ServiceCallError, ValueError) as e:
            raise SubmissionChannelError(key, str(e)) from e
        return resp.result_code

    def request_catalog_sync(self) -> int:
        try:
            resp = ResultCodeResponse.parse(
                self._request("POST", self._url("/catalog/sync"), {})
            )
        except (ServiceCallError, ValueError) as e:
            raise SyncRequestError(f"Could not request catalog sync: {e}") from e
        return resp.result_code
