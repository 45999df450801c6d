# utils/diagnose_swap.py
import asyncio
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from web3 import Web3

from config.settings import load_config
from core.gas_monitor import GasMonitor
from core.models import CHAIN_ERRORS
from core.wallet_manager import Wallet
from services.approval_service import ApprovalManager
from services.plan_service import PlanBuilder
from services.quote_service import QuoteService, min_amount_out
from services.token_service import BalanceService, TokenMetaResolver, TokenRegistry
from utils.formatting import format_token_amount
from utils.security import load_signing_key


async def diagnose_swap_issues(config=None, wallet=None):
    """Диагностика свапов без отправки транзакций"""
    print("🔧 DIAGNOSING SWAP ISSUES...")

    config = config or load_config()
    wallet = wallet or Wallet.from_private_key(load_signing_key(), config.rpc_url, config.chain_id)
    print(f"🔍 Using wallet: {wallet.address}")

    registry = TokenRegistry(config)
    resolver = TokenMetaResolver(wallet, registry)
    gas_monitor = GasMonitor(wallet, config)

    # 1. Балансы
    print("\n💰 BALANCES:")
    balances = await BalanceService(wallet, config, registry).get_balances()
    for symbol, balance in balances.items():
        print(f"   {symbol}: {balance}")

    # 2. Реестр токенов
    print("\n📚 TOKEN REGISTRY:")
    snapshot = await registry.fetch()
    if snapshot.ok:
        print(f"   ✅ {len(snapshot.value)} tokens listed")
    else:
        print(f"   ❌ Registry unavailable: {snapshot.error}")

    # 3. Router
    print("\n🔗 ROUTER CONTRACT:")
    try:
        code = wallet.web3.eth.get_code(Web3.to_checksum_address(config.router_address))
        print(f"   ✅ Contract exists: {len(code)} bytes")
    except CHAIN_ERRORS as e:
        print(f"   ❌ Router contract error: {e}")

    gas_price = gas_monitor.get_gas_price()
    print(f"   ⛽ Gas price: {gas_monitor.format_gwei(gas_price.value)}{'' if gas_price.ok else ' (fallback)'}")

    # 4. Allowance и котировки для каждого токена
    approvals = ApprovalManager(wallet, config, gas_monitor)
    quotes = QuoteService(wallet, config)
    builder = PlanBuilder(wallet, config, resolver)
    amount_in = Web3.to_wei(config.native_amount_range[0], 'ether')

    print("\n📊 QUOTE TEST:")
    for token in config.tradeable_tokens():
        meta = await resolver.get_token_meta(token.address)
        try:
            allowance = approvals.check_allowance(token.address, config.router_address)
            print(f"   🔓 {token.symbol} allowance: {format_token_amount(allowance, meta.decimals, token.symbol)}")
        except CHAIN_ERRORS as e:
            print(f"   ❌ {token.symbol} allowance check failed: {e}")

        route = builder.native_to_token_route(token.symbol, token.address)
        quote = await quotes.get_quote(amount_in, route)
        if quote.ok and quote.out > 0:
            min_out = min_amount_out(quote.out, config.slippage_bps)
            print(
                f"   ✅ {format_token_amount(amount_in, 18, config.native_symbol)} -> "
                f"{format_token_amount(quote.out, meta.decimals, token.symbol)} "
                f"(min {format_token_amount(min_out, meta.decimals, token.symbol)})"
            )
        else:
            print(f"   ❌ No quote for {config.native_symbol} -> {token.symbol}")


if __name__ == "__main__":
    asyncio.run(diagnose_swap_issues())
