import pytest
from web3.exceptions import ContractLogicError

from config.constants import DEFAULT_ROUTER_ADDRESS, DEFAULT_TOKENS, MAX_UINT256
from core.gas_monitor import GasMonitor
from services.approval_service import ApprovalError, ApprovalManager

PMX = DEFAULT_TOKENS["PMX"]


def make_manager(wallet, config):
    return ApprovalManager(wallet, config, GasMonitor(wallet, config))


@pytest.mark.asyncio
async def test_sufficient_allowance_sends_nothing(make_wallet, config):
    wallet = make_wallet(allowance=10 ** 18)

    receipt = await make_manager(wallet, config).ensure_approval(PMX, DEFAULT_ROUTER_ADDRESS, 10 ** 18)

    assert receipt is None
    assert wallet.sent == []
    assert wallet.events == []


@pytest.mark.asyncio
async def test_approves_max_and_waits_for_receipt(make_wallet, config):
    wallet = make_wallet(allowance=5)

    receipt = await make_manager(wallet, config).ensure_approval(PMX, DEFAULT_ROUTER_ADDRESS, 10)

    assert receipt.status == 1
    assert [event[0] for event in wallet.events] == ["nonce", "send", "receipt"]
    tx = wallet.sent[0]
    assert tx["fn"] == "approve"
    assert tx["args"][1] == MAX_UINT256
    # 46000 * 1.15
    assert tx["gas"] == 52900
    assert tx["gasPrice"] == 10 ** 9
    assert tx["nonce"] == 7


@pytest.mark.asyncio
async def test_approve_gas_falls_back_when_estimate_fails(make_wallet, config):
    wallet = make_wallet()
    wallet.contract(PMX).responses["approve"] = {"gas_error": ContractLogicError("estimate failed")}

    await make_manager(wallet, config).ensure_approval(PMX, DEFAULT_ROUTER_ADDRESS, 1)

    assert wallet.sent[0]["gas"] == 115000


@pytest.mark.asyncio
async def test_reverted_approval_raises(make_wallet, config):
    wallet = make_wallet(receipt_status=0)

    with pytest.raises(ApprovalError):
        await make_manager(wallet, config).ensure_approval(PMX, DEFAULT_ROUTER_ADDRESS, 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("allowance, notified", [(10 ** 18, False), (0, True)])
async def test_on_submit_called_only_before_real_approval(make_wallet, config, allowance, notified):
    wallet = make_wallet(allowance=allowance)
    calls = []

    def on_submit():
        calls.append(len(wallet.sent))

    await make_manager(wallet, config).ensure_approval(PMX, DEFAULT_ROUTER_ADDRESS, 10 ** 18, on_submit=on_submit)

    assert calls == ([0] if notified else [])
