"""
Batch request orchestration.

A batch bundles up to BATCH_MAX_REQUESTS write requests into one HTTP call.
Every sub-request is sent, in order, through the same handling path as a
standalone request. When every sub-request targets the cart resource the
responses are collapsed into a single cart response carrying the notices
of all of them.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from cart_api.config import Settings, settings as default_settings
from cart_api.core.exceptions import (
    CartAPIException,
    InvalidInputError,
    InvalidPathError,
    UnknownServerError,
)
from cart_api.core.logging import get_logger
from cart_api.core.routing import PathMatch, PathMatcher
from cart_api.schemas.batch import (
    BatchEnvelope,
    BatchResult,
    SubRequest,
    SubResponse,
    ValidationMode,
)
from cart_api.utils.response import error_response


logger = get_logger(__name__)

Dispatch = Callable[[SubRequest], Awaitable[SubResponse]]


@dataclass
class BatchOutcome:
    """What the batch endpoint sends back."""
    result: BatchResult
    collapsed: bool = False
    body: Any = None

    @property
    def status_code(self) -> int:
        if self.collapsed:
            return self.result.responses[-1].status
        return 207

    def to_response(self) -> Any:
        if self.collapsed:
            return self.body
        return self.result.to_response()


class BatchOrchestrator:
    """Validates, dispatches and aggregates a batch of sub-requests."""

    def __init__(self, settings: Optional[Settings] = None, matcher: Optional[PathMatcher] = None):
        self.settings = settings or default_settings
        self.matcher = matcher or PathMatcher(self.settings.API_NAMESPACE, self.settings.API_VERSION)

    @property
    def max_requests(self) -> int:
        return self.settings.BATCH_MAX_REQUESTS

    @property
    def notice_types(self) -> List[str]:
        return list(self.settings.NOTICE_TYPES)

    def validate(self, envelope: BatchEnvelope) -> List[PathMatch]:
        """
        Check the envelope before anything is dispatched.

        Returns the classified path of every sub-request.

        Raises:
            InvalidInputError: no sub-requests or more than the maximum
            InvalidPathError: a sub-request path is outside the API namespace
        """
        count = len(envelope.sub_requests)
        if count < 1 or count > self.max_requests:
            raise InvalidInputError(
                "cocart_rest_invalid_batch_size",
                f"A batch must contain between 1 and {self.max_requests} requests.",
                data={"count": count, "max_requests": self.max_requests},
            )

        matches = []
        for sub_request in envelope.sub_requests:
            match = self.matcher.classify(sub_request.path)
            if not match.in_namespace:
                raise InvalidPathError(sub_request.path)
            matches.append(match)

        return matches

    @staticmethod
    def resolve_paths(envelope: BatchEnvelope, matches: List[PathMatch]) -> BatchEnvelope:
        """Envelope whose sub-requests carry the paths they were classified by."""
        sub_requests = [
            sub_request.model_copy(update={"path": match.path})
            for sub_request, match in zip(envelope.sub_requests, matches)
        ]
        return envelope.model_copy(update={"sub_requests": sub_requests})

    async def dispatch_all(self, envelope: BatchEnvelope, dispatch: Dispatch) -> BatchResult:
        """Send each sub-request, one after another, capturing failures in its slot."""
        responses: List[SubResponse] = []

        for index, sub_request in enumerate(envelope.sub_requests):
            try:
                response = await dispatch(sub_request)
            except CartAPIException as exc:
                response = SubResponse(status=exc.status_code, body=exc.to_response())
            except Exception as exc:
                logger.warning(
                    "batch_request_failed",
                    index=index,
                    method=sub_request.method,
                    path=sub_request.path,
                    error=str(exc),
                )
                response = SubResponse(
                    status=500,
                    body=error_response("cocart_rest_batch_request_failed", str(exc), 500),
                )

            logger.debug(
                "batch_request_completed",
                index=index,
                method=sub_request.method,
                path=sub_request.path,
                status=response.status,
            )
            responses.append(response)

        failed_indices = None
        if envelope.validation_mode == ValidationMode.REQUIRE_ALL_VALIDATE:
            failed = [index for index, response in enumerate(responses) if response.failed]
            if failed:
                failed_indices = failed

        return BatchResult(responses=responses, failed_indices=failed_indices)

    def merge_notices(self, responses: List[SubResponse]) -> Dict[str, List[str]]:
        """
        Merge the notices of all responses, grouped by notice type.

        Every notice gets the next insertion index so that notices of the same
        type coming from different responses never overwrite each other.
        """
        indexed: Dict[str, Dict[int, str]] = {}
        key = 0

        for response in responses:
            body = response.body if isinstance(response.body, dict) else {}
            all_notices = body.get("notices") or {}
            if not isinstance(all_notices, dict):
                raise TypeError(f"Notices must be a mapping of notice type to messages, got {type(all_notices).__name__}")

            for notice_type in self.notice_types:
                messages = all_notices.get(notice_type) or []
                if not isinstance(messages, list):
                    raise TypeError(f"Notices of type '{notice_type}' must be a list")
                for notice in messages:
                    indexed.setdefault(notice_type, {})[key] = notice
                    key += 1

        return {
            notice_type: [entries[i] for i in sorted(entries)]
            for notice_type, entries in indexed.items()
        }

    def collapse(self, result: BatchResult) -> Any:
        """Body of the last response, carrying the notices of every response."""
        notices = self.merge_notices(result.responses)

        body = result.responses[-1].body
        if isinstance(body, dict):
            body = dict(body)
            if notices and body.get("notices"):
                body["notices"] = notices

        return body

    async def handle_batch(self, envelope: BatchEnvelope, dispatch: Dispatch) -> BatchOutcome:
        """
        Run a batch.

        Raises:
            InvalidInputError: the envelope failed validation, nothing was dispatched
            UnknownServerError: aggregating the responses failed
        """
        try:
            matches = self.validate(envelope)
        except InvalidInputError as exc:
            logger.warning("batch_rejected", code=exc.code, message=exc.message)
            raise

        logger.info(
            "batch_started",
            size=len(envelope.sub_requests),
            validation=envelope.validation_mode.value,
        )

        result = await self.dispatch_all(self.resolve_paths(envelope, matches), dispatch)

        try:
            if all(match.is_cart for match in matches) and not result.failed:
                logger.debug("batch_collapsed", size=len(result.responses))
                return BatchOutcome(result=result, collapsed=True, body=self.collapse(result))
        except Exception as exc:
            logger.error("batch_aggregation_failed", error=str(exc))
            raise UnknownServerError(str(exc)) from exc

        if result.failed:
            logger.warning("batch_failed", failed_indices=result.failed_indices)

        return BatchOutcome(result=result)
