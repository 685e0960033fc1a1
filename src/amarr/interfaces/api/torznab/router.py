from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse

from amarr.application.torznab_params import build_torznab_query, parse_action
from amarr.application.use_cases import TorznabCapsUseCase, TorznabSearchUseCase
from amarr.domain.entities import (
    IndexerError,
    ThrottledError,
    TorznabAction,
    TorznabBadRequest,
    TorznabIndexerNotFound,
    TorznabQuery,
    UnauthorizedError,
)
from amarr.domain.ports import IndexerPort
from amarr.infrastructure.torznab.presenter import (
    TorznabRendered,
    render_caps_xml,
    render_rss_xml,
)
from amarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["torznab"])

THROTTLED_MESSAGE = "You are being throttled. Retry in a few minutes."
UNAUTHORIZED_MESSAGE = "Unauthorized, check your credentials."

# Indexer failures recovered on the search path; everything else propagates.
_FAILURE_RESPONSES: dict[type[IndexerError], tuple[int, str, str]] = {
    ThrottledError: (403, THROTTLED_MESSAGE, "torznab_throttled"),
    UnauthorizedError: (401, UNAUTHORIZED_MESSAGE, "torznab_unauthorized"),
}


def _xml(rendered: TorznabRendered, *, status_code: int = 200) -> Response:
    return Response(
        content=rendered.payload,
        media_type=rendered.media_type,
        status_code=status_code,
    )


def _text(body: str, *, status_code: int) -> Response:
    return PlainTextResponse(body, status_code=status_code)


def _failure_response(exc: IndexerError, *, indexer_name: str) -> Response:
    status_code, body, event = next(
        mapped
        for exc_type, mapped in _FAILURE_RESPONSES.items()
        if isinstance(exc, exc_type)
    )
    log.warning(event, indexer=indexer_name, status_code=status_code)
    return _text(body, status_code=status_code)


@router.get("/api")
async def torznab_legacy_api(request: Request) -> Response:
    # Kept for older clients, serves the configured default indexer.
    state = cast(AppState, request.app.state)
    return await _handle_request(request, state.indexers.default_name)


@router.get("/indexer/amule/api")
async def torznab_amule_api(request: Request) -> Response:
    return await _handle_request(request, "amule")


@router.get("/indexer/ddunlimitednet/api")
async def torznab_ddunlimitednet_api(request: Request) -> Response:
    return await _handle_request(request, "ddunlimitednet")


def _first_values(request: Request) -> dict[str, str]:
    # Repeated keys resolve to their first occurrence.
    params: dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        params.setdefault(key, value)
    return params


async def _handle_request(request: Request, indexer_name: str) -> Response:
    state = cast(AppState, request.app.state)
    params = _first_values(request)
    t = params.get("t")

    try:
        action = parse_action(t)

        if action is TorznabAction.CAPS:
            indexer = state.indexers.get(indexer_name)
            log.debug("torznab_caps", indexer=indexer_name)
            caps = await TorznabCapsUseCase(
                indexer=indexer, indexer_name=indexer_name
            ).execute()
            return _xml(render_caps_xml(caps))

        query = build_torznab_query(action, params)
        indexer = state.indexers.get(indexer_name)
        return await _perform_search(indexer, indexer_name, query)

    except TorznabBadRequest as e:
        log.info("torznab_bad_request", indexer=indexer_name, t=t, error=str(e))
        return _text(str(e), status_code=400)

    except TorznabIndexerNotFound as e:
        log.warning("torznab_indexer_not_configured", indexer=indexer_name)
        return _text(str(e), status_code=404)

    except Exception:
        # Unrecognized indexer / encoding failures: never answer 200 here.
        log.exception("torznab_unhandled_error", indexer=indexer_name, t=t)
        raise


async def _perform_search(
    indexer: IndexerPort, indexer_name: str, query: TorznabQuery
) -> Response:
    uc = TorznabSearchUseCase(indexer=indexer, indexer_name=indexer_name)
    try:
        feed = await uc.execute(query)
    except (ThrottledError, UnauthorizedError) as e:
        return _failure_response(e, indexer_name=indexer_name)

    return _xml(render_rss_xml(feed))
