from typing import Callable, Optional

from web3 import Web3

from config.constants import APPROVE_FALLBACK_GAS, MAX_UINT256
from utils.logger import setup_logger


class ApprovalError(RuntimeError):
    pass


class ApprovalManager:
    """Approve токенов для роутера перед свапом TOKEN -> NATIVE"""

    def __init__(self, wallet, config, gas_monitor):
        self.wallet = wallet
        self.config = config
        self.gas_monitor = gas_monitor
        self.logger = setup_logger("ApprovalManager")

    def check_allowance(self, token_address: str, spender: str) -> int:
        token_contract = self.wallet.contract(token_address)
        return token_contract.functions.allowance(
            self.wallet.address,
            Web3.to_checksum_address(spender)
        ).call()

    async def ensure_approval(self, token_address: str, spender: str, amount: int,
                              on_submit: Optional[Callable[[], None]] = None):
        """Возвращает receipt approve-транзакции или None, если allowance хватает.

        on_submit вызывается только когда approve действительно будет отправлен.
        Возврат только после подтверждения транзакции: nonce свапа
        запрашивается уже после этого.
        """
        # ✅ ПРОВЕРЯЕМ ТЕКУЩИЙ ALLOWANCE
        current_allowance = self.check_allowance(token_address, spender)
        if current_allowance >= amount:
            self.logger.info("✅ Allowance already sufficient")
            return None

        if on_submit:
            on_submit()

        token_contract = self.wallet.contract(token_address)
        approve_call = token_contract.functions.approve(
            Web3.to_checksum_address(spender),
            MAX_UINT256
        )

        estimate = self.gas_monitor.estimate_gas(
            approve_call,
            {'from': self.wallet.address},
            fallback=APPROVE_FALLBACK_GAS
        )
        gas_limit = self.gas_monitor.buffered(estimate.value)
        gas_price = self.gas_monitor.get_gas_price().value
        nonce = self.wallet.get_nonce()

        tx_hash = await self.wallet.send_transaction(
            approve_call,
            gas_price=gas_price,
            gas_limit=gas_limit,
            nonce=nonce
        )
        self.logger.info(f"📝 Approval transaction sent: {tx_hash}")

        receipt = await self.wallet.wait_for_receipt(tx_hash)
        if receipt.status != 1:
            self.logger.error("❌ Approval failed")
            raise ApprovalError(f"Approval reverted: {tx_hash}")

        self.logger.info("✅ Approval successful")
        return receipt
