"""JSON-over-HTTP surface for the ledger (aiohttp.web)."""
from __future__ import annotations

import json
import logging
from typing import Any

from aiohttp import web

from ..chains import SimulatedChain
from ..errors import ErrorCode, Result
from ..services import LedgerEngine

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "X-Principal"

ENGINE_KEY = web.AppKey("engine", LedgerEngine)
CHAIN_KEY = web.AppKey("chain", SimulatedChain)

_ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NOT_AUTHORIZED: 403,
    ErrorCode.VAULT_NOT_FOUND: 404,
    ErrorCode.STRATEGY_NOT_FOUND: 404,
    ErrorCode.VAULT_PAUSED: 409,
}

routes = web.RouteTableDef()


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


def _caller(request: web.Request) -> str:
    principal = request.headers.get(PRINCIPAL_HEADER, "").strip()
    if not principal:
        raise web.HTTPUnauthorized(
            text=json.dumps({"error": f"missing {PRINCIPAL_HEADER} header"}),
            content_type="application/json",
        )
    return principal


def _bad_request(reason: str) -> web.HTTPBadRequest:
    return web.HTTPBadRequest(
        text=json.dumps({"error": reason}), content_type="application/json"
    )


def _int_param(request: web.Request, name: str) -> int:
    try:
        return int(request.match_info[name])
    except ValueError:
        raise _bad_request(f"{name} must be an integer") from None


async def _body(request: web.Request, *fields: str) -> dict[str, Any]:
    """Parse the JSON body and check ``fields`` are present."""
    try:
        data = await request.json()
    except ValueError:
        raise _bad_request("body must be valid JSON") from None
    if not isinstance(data, dict):
        raise _bad_request("body must be a JSON object")
    missing = [f for f in fields if f not in data]
    if missing:
        raise _bad_request(f"missing fields: {', '.join(missing)}")
    return data


def _int_field(data: dict[str, Any], name: str) -> int:
    value = data[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise _bad_request(f"{name} must be an integer")
    return value


def _respond(result: Result[Any]) -> web.Response:
    code = result.error
    if code is None:
        return web.json_response({"result": result.value})
    return web.json_response(
        {"error": int(code), "reason": code.name}, status=_ERROR_STATUS.get(code, 400)
    )


def _not_found() -> web.Response:
    return web.json_response({"error": "not found"}, status=404)


# ---------------------------------------------------------------------------
# Vaults
# ---------------------------------------------------------------------------


@routes.post("/vaults")
async def create_vault(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(request, "name", "risk_level", "min_deposit")
    result = request.app[ENGINE_KEY].create_vault(
        caller,
        str(data["name"]),
        _int_field(data, "risk_level"),
        _int_field(data, "min_deposit"),
    )
    return _respond(result)


@routes.get("/vaults/{vault_id}")
async def get_vault(request: web.Request) -> web.Response:
    vault = request.app[ENGINE_KEY].get_vault_info(_int_param(request, "vault_id"))
    if vault is None:
        return _not_found()
    return web.json_response(vault.to_dict())


@routes.post("/vaults/{vault_id}/deposit")
async def deposit(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(request, "amount")
    result = request.app[ENGINE_KEY].deposit(
        caller, _int_param(request, "vault_id"), _int_field(data, "amount")
    )
    return _respond(result)


@routes.post("/vaults/{vault_id}/withdraw")
async def withdraw(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(request, "shares")
    result = request.app[ENGINE_KEY].withdraw(
        caller, _int_param(request, "vault_id"), _int_field(data, "shares")
    )
    return _respond(result)


@routes.post("/vaults/{vault_id}/harvest")
async def harvest(request: web.Request) -> web.Response:
    caller = _caller(request)
    result = request.app[ENGINE_KEY].harvest_vault(caller, _int_param(request, "vault_id"))
    return _respond(result)


@routes.post("/vaults/{vault_id}/rebalance")
async def rebalance(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(request, "strategy_id")
    result = request.app[ENGINE_KEY].rebalance_vault(
        caller, _int_param(request, "vault_id"), _int_field(data, "strategy_id")
    )
    return _respond(result)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


@routes.post("/strategies")
async def add_strategy(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(
        request, "name", "protocol", "apy", "tvl_capacity", "risk_score", "contract_address"
    )
    result = request.app[ENGINE_KEY].add_strategy(
        caller,
        str(data["name"]),
        str(data["protocol"]),
        _int_field(data, "apy"),
        _int_field(data, "tvl_capacity"),
        _int_field(data, "risk_score"),
        str(data["contract_address"]),
    )
    return _respond(result)


@routes.get("/strategies/best-apy")
async def best_apy(request: web.Request) -> web.Response:
    return web.json_response({"result": request.app[ENGINE_KEY].get_best_apy()})


@routes.get("/strategies/{strategy_id}")
async def get_strategy(request: web.Request) -> web.Response:
    strategy = request.app[ENGINE_KEY].get_strategy_info(_int_param(request, "strategy_id"))
    if strategy is None:
        return _not_found()
    return web.json_response(strategy.to_dict())


@routes.put("/strategies/{strategy_id}/apy")
async def update_apy(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(request, "apy")
    result = request.app[ENGINE_KEY].update_strategy_apy(
        caller, _int_param(request, "strategy_id"), _int_field(data, "apy")
    )
    return _respond(result)


# ---------------------------------------------------------------------------
# Platform
# ---------------------------------------------------------------------------


@routes.get("/platform/stats")
async def platform_stats(request: web.Request) -> web.Response:
    return web.json_response(request.app[ENGINE_KEY].get_platform_stats().to_dict())


@routes.put("/platform/fee")
async def set_fee(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(request, "rate")
    return _respond(request.app[ENGINE_KEY].set_platform_fee(caller, _int_field(data, "rate")))


@routes.post("/platform/admins")
async def add_admin(request: web.Request) -> web.Response:
    caller = _caller(request)
    data = await _body(request, "principal")
    return _respond(request.app[ENGINE_KEY].add_admin(caller, str(data["principal"])))


@routes.post("/platform/pause")
async def toggle_pause(request: web.Request) -> web.Response:
    caller = _caller(request)
    return _respond(request.app[ENGINE_KEY].toggle_emergency_pause(caller))


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@routes.get("/users/{user}/vaults")
async def user_vaults(request: web.Request) -> web.Response:
    user = request.match_info["user"]
    return web.json_response({"result": request.app[ENGINE_KEY].get_user_vaults(user)})


@routes.get("/users/{user}/vaults/{vault_id}")
async def user_position(request: web.Request) -> web.Response:
    engine = request.app[ENGINE_KEY]
    user = request.match_info["user"]
    vault_id = _int_param(request, "vault_id")
    position = engine.get_user_position(vault_id, user)
    if position is None:
        return _not_found()
    return web.json_response(
        {
            "position": position.to_dict(),
            "value": engine.get_user_vault_value(vault_id, user),
        }
    )


@routes.get("/users/{user}/admin")
async def user_is_admin(request: web.Request) -> web.Response:
    user = request.match_info["user"]
    return web.json_response({"result": request.app[ENGINE_KEY].is_user_admin(user)})


# ---------------------------------------------------------------------------
# Simulated chain
# ---------------------------------------------------------------------------


@routes.post("/chain/blocks")
async def mine_blocks(request: web.Request) -> web.Response:
    data = await _body(request, "count")
    count = _int_field(data, "count")
    if count < 0:
        raise _bad_request("count must be non-negative")
    height = request.app[CHAIN_KEY].mine_blocks(count)
    return web.json_response({"block_height": height})


def create_app(engine: LedgerEngine, chain: SimulatedChain) -> web.Application:
    """Build the aiohttp application around an engine and its chain."""
    app = web.Application()
    app[ENGINE_KEY] = engine
    app[CHAIN_KEY] = chain
    app.add_routes(routes)
    logger.debug("HTTP API routes registered: %d", len(app.router.routes()))
    return app
