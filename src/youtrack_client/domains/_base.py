"""
Shared plumbing for domain clients: response-shape checks, model validation
and paged GETs, all routed through the one Transport.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import ApiError, MalformedResponseError
from ..paging import DEFAULT_PAGE_SIZE, Page, Pager, paginate
from ..transport import ParamValue, Transport

T = TypeVar("T", bound=BaseModel)


@contextmanager
def operation_context(operation: str) -> Iterator[None]:
    """Prefix ApiError messages with the operation name, keeping their class."""
    try:
        yield
    except ApiError as exc:
        raise exc.with_context(operation) from exc


def expect_list(payload: Any) -> List[Any]:
    """
    Array endpoints: an empty body or empty array is an empty result.
    Anything else that isn't a JSON array is malformed.
    """
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise MalformedResponseError(f"expected a JSON array, got {type(payload).__name__}")
    return payload


def expect_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


def validate_model(model: Type[T], payload: Any) -> T:
    data = expect_object(payload)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"response did not match {model.__name__}: {exc}"
        ) from exc


def validate_models(model: Type[T], payload: Any) -> List[T]:
    return [validate_model(model, e) for e in expect_list(payload)]


def drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


class DomainClient:
    """Base for one functional area of the API; owns nothing but a Transport reference."""

    domain = "api"

    def __init__(self, transport: Transport):
        self._transport = transport

    def _op(self, name: str) -> str:
        return f"{self.domain}.{name}"

    async def _get_model(
        self,
        model: Type[T],
        path: str,
        *,
        operation: str,
        params: Optional[Mapping[str, ParamValue]] = None,
    ) -> T:
        op = self._op(operation)
        with operation_context(op):
            payload = await self._transport.get(path, params=params, operation=op)
            return validate_model(model, payload)

    async def _get_list(
        self,
        model: Type[T],
        path: str,
        *,
        operation: str,
        params: Optional[Mapping[str, ParamValue]] = None,
    ) -> List[T]:
        op = self._op(operation)
        with operation_context(op):
            payload = await self._transport.get(path, params=params, operation=op)
            return validate_models(model, payload)

    async def _post_model(
        self,
        model: Type[T],
        path: str,
        *,
        json: Dict[str, Any],
        operation: str,
        params: Optional[Mapping[str, ParamValue]] = None,
    ) -> T:
        op = self._op(operation)
        with operation_context(op):
            payload = await self._transport.post(
                path, json=json, params=params, operation=op
            )
            return validate_model(model, payload)

    async def _post(
        self,
        path: str,
        *,
        json: Any,
        operation: str,
        params: Optional[Mapping[str, ParamValue]] = None,
    ) -> Any:
        op = self._op(operation)
        with operation_context(op):
            return await self._transport.post(
                path, json=json, params=params, operation=op
            )

    async def _delete(self, path: str, *, operation: str) -> None:
        op = self._op(operation)
        with operation_context(op):
            await self._transport.delete(path, operation=op)

    def _paginate(
        self,
        model: Type[T],
        path: str,
        *,
        operation: str,
        params: Optional[Mapping[str, ParamValue]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[T]:
        """
        Lazy pager over an array endpoint using $skip/$top.
        YouTrack returns bare arrays with no total, so a full page means "maybe more".
        """
        op = self._op(operation)
        base_params = dict(params or {})

        async def fetch_page(offset: int, page_limit: int) -> Page[T]:
            page_params = {**base_params, "$skip": offset, "$top": page_limit}
            with operation_context(op):
                payload = await self._transport.get(
                    path, params=page_params, operation=op
                )
                items = validate_models(model, payload)
            return Page(
                items=items,
                offset=offset,
                limit=page_limit,
                has_more=len(items) >= page_limit,
            )

        return paginate(fetch_page, page_size=page_size, limit=limit)
