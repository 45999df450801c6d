import json

import aiohttp
import pytest
from web3.exceptions import ContractLogicError

from config.constants import DEFAULT_TOKENS
from core.models import TokenMeta
from services.token_service import (
    BalanceService,
    TokenMetaResolver,
    TokenRegistry,
    parse_registry_payload,
)

MUSDC = DEFAULT_TOKENS["mUSDC"]
PMX = DEFAULT_TOKENS["PMX"]
MDAI = DEFAULT_TOKENS["mDAI"]


def registry_returning(config, monkeypatch, payload=None, error=None):
    registry = TokenRegistry(config)

    async def fake_fetch_json():
        if error is not None:
            raise error
        return payload

    monkeypatch.setattr(registry, "_fetch_json", fake_fetch_json)
    return registry


def test_parse_registry_payload_skips_malformed_entries():
    payload = {"data": [
        {"address": MUSDC, "symbol": "mUSDC", "decimals": "6", "name": "Mock USDC", "volume24h": "1000.5"},
        {"address": PMX, "symbol": "PMX", "decimals": "abc", "name": "Pumex"},
        {"symbol": "NOADDR", "decimals": 18},
        "garbage",
    ]}

    registry = parse_registry_payload(payload)

    assert set(registry) == {MUSDC.lower(), PMX.lower()}
    assert registry[MUSDC.lower()].decimals == 6
    assert registry[MUSDC.lower()].volume24h == 1000.5
    assert registry[PMX.lower()].decimals is None


@pytest.mark.parametrize("payload", [None, [], {"data": None}, {"items": []}])
def test_parse_registry_payload_degrades_to_empty(payload):
    assert parse_registry_payload(payload) == {}


@pytest.mark.asyncio
async def test_registry_fetch_never_raises(config, monkeypatch):
    registry = registry_returning(config, monkeypatch, error=aiohttp.ClientError("boom"))

    result = await registry.fetch()

    assert result.ok is False
    assert result.value == {}


@pytest.mark.asyncio
async def test_meta_from_registry_matches_entry(make_wallet, config, monkeypatch):
    payload = {"data": [
        {"address": MUSDC.lower(), "symbol": "mUSDC", "decimals": 6, "name": "Mock USDC", "volume24h": 1000},
    ]}
    wallet = make_wallet()
    resolver = TokenMetaResolver(wallet, registry_returning(config, monkeypatch, payload))

    meta = await resolver.get_token_meta(MUSDC.upper().replace("0X", "0x"))

    assert meta == TokenMeta(symbol="mUSDC", decimals=6, name="Mock USDC", volume24h=1000.0)
    # Реестр сработал, контракт не вызывался
    assert wallet.contract(MUSDC).calls == []


@pytest.mark.asyncio
async def test_meta_falls_back_to_chain(make_wallet, config, monkeypatch):
    wallet = make_wallet(decimals={"PMX": 9})
    resolver = TokenMetaResolver(wallet, registry_returning(config, monkeypatch, {"data": []}))

    meta = await resolver.get_token_meta(PMX)

    assert meta == TokenMeta(symbol="PMX", decimals=9, name="PMX", volume24h=0.0)


@pytest.mark.asyncio
async def test_meta_defaults_when_chain_calls_fail(make_wallet, config, monkeypatch):
    wallet = make_wallet()
    token = wallet.contract(PMX)
    token.responses["decimals"] = {"error": ContractLogicError("no decimals")}
    token.responses["symbol"] = {"error": ValueError("no symbol")}
    resolver = TokenMetaResolver(wallet, registry_returning(config, monkeypatch, error=aiohttp.ClientError()))

    meta = await resolver.get_token_meta(PMX)

    assert meta.decimals == 18
    assert meta.symbol == "TKN"


@pytest.mark.asyncio
async def test_balances_snapshot_marks_failed_reads(make_wallet, config, monkeypatch):
    wallet = make_wallet(balances={"mUSDC": 1_500_000}, decimals={"mUSDC": 6}, native_balance=2 * 10 ** 18)
    wallet.contract(PMX).responses["balanceOf"] = {"error": ContractLogicError("revert")}
    service = BalanceService(wallet, config, registry_returning(config, monkeypatch, {"data": []}))

    balances = await service.get_balances()

    assert balances["INJ"] == "2.000000 INJ"
    assert balances["mUSDC"] == "1.500000 mUSDC"
    assert balances["PMX"] == "Error"
    assert list(balances)[-1] == "WINJ"


@pytest.mark.asyncio
async def test_volume_data_shares(make_wallet, config, monkeypatch):
    payload = {"data": [
        {"address": MUSDC, "symbol": "mUSDC", "decimals": 6, "volume24h": 1000},
        {"address": PMX, "symbol": "PMX", "decimals": 18, "volume24h": 3000},
        {"address": MDAI, "symbol": "mDAI", "decimals": 18, "volume24h": 0},
        {"address": "0x" + "9" * 40, "symbol": "OTHER", "decimals": 18, "volume24h": 99999},
    ]}
    service = BalanceService(make_wallet(), config, registry_returning(config, monkeypatch, payload))

    shares = {share.symbol: share.volume_percent for share in await service.get_volume_data()}

    assert shares == {"mUSDC": 25.0, "PMX": 75.0, "mDAI": 0.0}


@pytest.mark.asyncio
async def test_volume_data_none_without_volume(make_wallet, config, monkeypatch):
    payload = {"data": [{"address": MUSDC, "symbol": "mUSDC", "decimals": 6, "volume24h": 0}]}
    service = BalanceService(make_wallet(), config, registry_returning(config, monkeypatch, payload))

    assert await service.get_volume_data() is None


@pytest.mark.parametrize("volume", ["NaN", "Infinity", "-Infinity", float("nan"), float("inf")])
def test_parse_registry_payload_zeroes_non_finite_volume(volume):
    payload = {"data": [{"address": MUSDC, "symbol": "mUSDC", "decimals": 6, "volume24h": volume}]}

    assert parse_registry_payload(payload)[MUSDC.lower()].volume24h == 0.0


@pytest.mark.asyncio
async def test_volume_data_ignores_non_finite_entries(make_wallet, config, monkeypatch):
    payload = json.loads(
        '{"data": ['
        f'{{"address": "{MUSDC}", "symbol": "mUSDC", "decimals": 6, "volume24h": NaN}},'
        f'{{"address": "{PMX}", "symbol": "PMX", "decimals": 18, "volume24h": "Infinity"}},'
        f'{{"address": "{MDAI}", "symbol": "mDAI", "decimals": 18, "volume24h": 500}}'
        ']}'
    )
    service = BalanceService(make_wallet(), config, registry_returning(config, monkeypatch, payload))

    shares = {share.symbol: share.volume_percent for share in await service.get_volume_data()}

    assert shares == {"mUSDC": 0.0, "PMX": 0.0, "mDAI": 100.0}


@pytest.mark.asyncio
async def test_volume_data_none_when_total_overflows(make_wallet, config, monkeypatch):
    payload = {"data": [
        {"address": MUSDC, "symbol": "mUSDC", "decimals": 6, "volume24h": 1e308},
        {"address": PMX, "symbol": "PMX", "decimals": 18, "volume24h": 1e308},
    ]}
    service = BalanceService(make_wallet(), config, registry_returning(config, monkeypatch, payload))

    assert await service.get_volume_data() is None
