from web3 import Web3

from config.constants import BPS_DENOMINATOR, FALLBACK_GAS_PRICE_GWEI
from core.models import CHAIN_ERRORS, Fetched
from utils.logger import setup_logger


def apply_gas_buffer(gas_estimate: int, buffer_bps: int) -> int:
    """Запас по газу: estimate * (10000 + bps) / 10000, целочисленно"""
    return gas_estimate * (BPS_DENOMINATOR + buffer_bps) // BPS_DENOMINATOR


class GasMonitor:
    def __init__(self, wallet, config):
        self.wallet = wallet
        self.config = config
        self.logger = setup_logger("GasMonitor")
        self.fallback_gas_price = Web3.to_wei(FALLBACK_GAS_PRICE_GWEI, 'gwei')

    def get_gas_price(self) -> Fetched:
        """Текущая цена газа (legacy) или безопасное значение по умолчанию"""
        try:
            gas_price = self.wallet.get_gas_price()
            self.logger.debug(f"🔍 Current gas price: {Web3.from_wei(gas_price, 'gwei')} Gwei")
            return Fetched(gas_price)
        except CHAIN_ERRORS as e:
            self.logger.warning(f"⚠️ Failed to fetch gas price, using {FALLBACK_GAS_PRICE_GWEI} Gwei: {e}")
            return Fetched.fallback(self.fallback_gas_price, e)

    def estimate_gas(self, contract_call, tx_params: dict, fallback: int = None) -> Fetched:
        """Оценка газа; при fallback=None ошибка пробрасывается наверх"""
        try:
            return Fetched(contract_call.estimate_gas(tx_params))
        except CHAIN_ERRORS as e:
            if fallback is None:
                raise
            self.logger.warning(f"⚠️ Gas estimation failed, using fallback {fallback}: {e}")
            return Fetched.fallback(fallback, e)

    def buffered(self, gas_estimate: int) -> int:
        return apply_gas_buffer(gas_estimate, self.config.gas_buffer_bps)

    @staticmethod
    def format_gwei(gas_price: int) -> str:
        if not gas_price:
            return "0 gwei"
        return f"{Web3.from_wei(gas_price, 'gwei').normalize():f} gwei"
