from dataclasses import asdict
from datetime import datetime

import pytest

from config.constants import DEFAULT_TOKENS
from core.models import CycleState, RouteHop, VolumeShare
from utils.dashboard import CLEAR_SCREEN, Dashboard, DashboardHeader, render_dashboard, volume_bar

HEADER = DashboardHeader(
    network_name="Injective Testnet",
    chain_id=1439,
    router_address="0x4069f8Ada1a4d3B705e6a82F9A3EB8624Cd4Cb1E",
    wallet_address="0x" + "a" * 40,
    mode="random",
    loop_seconds=30,
)
LABELS = {address.lower(): symbol for symbol, address in DEFAULT_TOKENS.items()}


def full_state():
    return CycleState(
        balances={"INJ": "1.000000 INJ", "mUSDC": "2.500000 mUSDC", "WINJ": "0.000000 WINJ"},
        volume_data=[VolumeShare("mUSDC", 25.0), VolumeShare("PMX", 75.0)],
        routes=[
            RouteHop(DEFAULT_TOKENS["WINJ"], DEFAULT_TOKENS["mUSDT"], False),
            RouteHop(DEFAULT_TOKENS["mUSDT"], DEFAULT_TOKENS["mDAI"], True),
        ],
        direction="INJ → TOKEN",
        amount_in_disp="0.250000 INJ",
        quote_out_disp="0.500000 mDAI",
        min_out_disp="0.495000 mDAI",
        gas_price_disp="0.2 gwei",
        gas_limit_disp="230000",
        deadline_disp="1700000300 (in 5m)",
        status="Quoting…",
    )


def test_render_contains_all_sections():
    text = render_dashboard(full_state(), HEADER, LABELS, now=datetime(2024, 1, 2, 3, 4, 5))

    assert "INJECTIVE EVM SWAP BOT (PUMEX)" in text
    assert "Injective Testnet (chainId 1439)" in text
    assert "mUSDC : 2.500000 mUSDC" in text
    assert "   01. WINJ ─(volatile)─→ mUSDT" in text
    assert "   02. mUSDT ──(stable)──→ mDAI" in text
    assert "Min Out:  0.495000 mDAI" in text
    assert "Gas:      0.2 gwei | Limit: 230000" in text
    assert "Market Volume (24h):" in text
    assert "Status: Quoting…" in text
    assert "Last update: 2024-01-02 03:04:05" in text


def test_render_does_not_mutate_state():
    state = full_state()
    before = asdict(state)

    render_dashboard(state, HEADER, LABELS)

    assert asdict(state) == before


def test_render_empty_state_uses_placeholders():
    text = render_dashboard(CycleState(), HEADER)

    assert "Route:    -" in text
    assert "Quote:    -" in text
    assert "Market Volume" not in text
    assert "Status: Preparing…" in text


def test_unknown_route_address_is_shortened():
    state = CycleState(routes=[RouteHop("0x1234567890abcdef1234567890abcdef12345678", DEFAULT_TOKENS["WINJ"])])

    text = render_dashboard(state, HEADER, LABELS)

    assert "0x1234…5678 ─(volatile)─→ WINJ" in text


@pytest.mark.parametrize("value, filled", [(0, 0), (25.0, 4), (50, 8), (100, 15), (140, 15)])
def test_volume_bar(value, filled):
    bar = volume_bar(value)

    assert bar.startswith("█" * filled + "░" * (15 - filled))
    assert bar.endswith(f" {value:.2f}%")


def test_dashboard_draw_and_countdown():
    output = []
    dashboard = Dashboard(HEADER, {DEFAULT_TOKENS["WINJ"]: "WINJ"}, write=output.append)

    dashboard.draw(CycleState(status="Checking liquidity…"))
    dashboard.draw_countdown(9)
    dashboard.draw_countdown(0)

    assert output[0].startswith(CLEAR_SCREEN)
    assert "Status: Checking liquidity…" in output[0]
    assert output[1] == "\rNext run in 09s   "
    assert output[2].strip() == ""


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_volume_bar_non_finite_renders_empty(value):
    assert volume_bar(value) == "░" * 15 + " 0.00%"
