import asyncio
from web3 import Web3
from eth_account import Account

from config.constants import ERC20_ABI
from utils.logger import setup_logger


class Wallet:
    """Кошелек бота: аккаунт eth-account + подключение web3 к одной сети"""

    def __init__(self, account, web3, chain_id: int, receipt_timeout: int = 120):
        self.account = account
        self.address = account.address
        self.web3 = web3
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout
        self.logger = setup_logger("Wallet")

    @classmethod
    def from_private_key(cls, private_key: str, rpc_url: str, chain_id: int,
                         receipt_timeout: int = 120) -> "Wallet":
        account = Account.from_key(private_key)
        web3 = Web3(Web3.HTTPProvider(rpc_url))
        return cls(account, web3, chain_id, receipt_timeout)

    def is_connected(self) -> bool:
        try:
            return self.web3.is_connected()
        except Exception as e:
            self.logger.error(f"❌ Connection check failed: {e}")
            return False

    def contract(self, address: str, abi=ERC20_ABI):
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def get_balance(self) -> int:
        """Баланс нативного токена"""
        return self.web3.eth.get_balance(self.address)

    def get_token_balance(self, token_address: str) -> int:
        return self.contract(token_address).functions.balanceOf(self.address).call()

    def get_nonce(self) -> int:
        """Свежий nonce; запрашивать непосредственно перед каждой отправкой"""
        return self.web3.eth.get_transaction_count(self.address, 'latest')

    def get_gas_price(self) -> int:
        return self.web3.eth.gas_price

    async def send_transaction(self, contract_call, gas_price: int, gas_limit: int,
                               nonce: int, value: int = 0) -> str:
        """Подпись и отправка legacy-транзакции (только gasPrice, без EIP-1559)"""
        transaction = contract_call.build_transaction({
            'from': self.address,
            'value': value,
            'gas': gas_limit,
            'gasPrice': gas_price,
            'nonce': nonce,
            'chainId': self.chain_id
        })

        signed_txn = self.account.sign_transaction(transaction)
        tx_hash = self.web3.eth.send_raw_transaction(signed_txn.raw_transaction)
        tx_hash_hex = Web3.to_hex(tx_hash)

        self.logger.info(f"📤 Transaction sent: {tx_hash_hex} (nonce {nonce})")
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str):
        """Ожидание включения транзакции в блок без блокировки event loop"""
        receipt = await asyncio.to_thread(
            self.web3.eth.wait_for_transaction_receipt,
            tx_hash,
            timeout=self.receipt_timeout
        )
        self.logger.info(
            f"{'✅' if receipt.status == 1 else '❌'} Receipt for {tx_hash}: "
            f"status={receipt.status}, block={receipt.blockNumber}"
        )
        return receipt
