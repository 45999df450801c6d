from decimal import Decimal
from types import SimpleNamespace

import pytest

from config.constants import DEFAULT_ROUTER_ADDRESS, DEFAULT_TOKENS
from config.settings import BotConfig
from utils.randomizer import Randomizer

WALLET_ADDRESS = "0x" + "a" * 40


class FakeCall:
    def __init__(self, contract, name, args):
        self.contract = contract
        self.name = name
        self.args = args
        self.response = contract.responses.get(name, {})

    def call(self):
        self.contract.calls.append((self.name, self.args))
        if self.response.get("error") is not None:
            raise self.response["error"]
        result = self.response.get("result")
        return result(*self.args) if callable(result) else result

    def estimate_gas(self, params):
        self.contract.estimates.append((self.name, self.args, params))
        if self.response.get("gas_error") is not None:
            raise self.response["gas_error"]
        return self.response.get("gas", 21000)

    def build_transaction(self, params):
        return {"fn": self.name, "args": self.args, **params}


class FakeFunctions:
    def __init__(self, contract):
        self._contract = contract

    def __getattr__(self, name):
        return lambda *args: FakeCall(self._contract, name, args)


class FakeContract:
    def __init__(self, address, **responses):
        self.address = address
        self.responses = responses
        self.calls = []
        self.estimates = []
        self.functions = FakeFunctions(self)

    def call_count(self, name):
        return sum(1 for call_name, _ in self.calls if call_name == name)


class FakeWallet:
    """Кошелек без сети: контракты по адресу, журнал событий отправки"""

    def __init__(self, contracts, native_balance=10 ** 18, gas_price=10 ** 9,
                 receipt_status=1, block_number=42):
        self.address = WALLET_ADDRESS
        self.contracts = {address.lower(): contract for address, contract in contracts.items()}
        self.native_balance = native_balance
        self.gas_price = gas_price
        self.receipt_status = receipt_status
        self.block_number = block_number
        self.nonce = 7
        self.sent = []
        self.events = []

    def contract(self, address, abi=None):
        return self.contracts[address.lower()]

    def get_balance(self):
        return self.native_balance

    def get_token_balance(self, token_address):
        return self.contract(token_address).functions.balanceOf(self.address).call()

    def get_nonce(self):
        self.events.append(("nonce", self.nonce))
        return self.nonce

    def get_gas_price(self):
        if isinstance(self.gas_price, Exception):
            raise self.gas_price
        return self.gas_price

    async def send_transaction(self, contract_call, gas_price, gas_limit, nonce, value=0):
        tx = contract_call.build_transaction({
            "from": self.address,
            "value": value,
            "gas": gas_limit,
            "gasPrice": gas_price,
            "nonce": nonce,
        })
        self.sent.append(tx)
        self.events.append(("send", tx["fn"]))
        self.nonce += 1
        return "0x" + f"{len(self.sent):064x}"

    async def wait_for_receipt(self, tx_hash):
        self.events.append(("receipt", tx_hash))
        return SimpleNamespace(status=self.receipt_status, blockNumber=self.block_number)


class ScriptedRandomizer(Randomizer):
    """Детерминированный источник случайности для тестов"""

    def __init__(self, symbol="mUSDC", native_first=True, amount="0.2500", percent=20):
        super().__init__()
        self.symbol = symbol
        self.native_first = native_first
        self.amount = Decimal(amount)
        self.percent = percent

    def choice(self, items):
        return next(item for item in items if item.symbol == self.symbol)

    def coin_flip(self):
        return self.native_first

    def get_random_amount(self, min_value, max_value, digits=4):
        return self.amount

    def get_random_percentage(self, min_percent, max_percent):
        return self.percent


def make_token_contracts(balances=None, decimals=None, allowance=0):
    balances = balances or {}
    decimals = decimals or {}
    contracts = {}
    for symbol, address in DEFAULT_TOKENS.items():
        contracts[address] = FakeContract(
            address,
            balanceOf={"result": balances.get(symbol, 0)},
            decimals={"result": decimals.get(symbol, 18)},
            symbol={"result": symbol},
            allowance={"result": allowance},
            approve={"gas": 46000},
        )
    return contracts


@pytest.fixture
def config():
    return BotConfig(mode="native_to_token", liquidity_interval_ms=0)


@pytest.fixture
def router():
    return FakeContract(
        DEFAULT_ROUTER_ADDRESS,
        getAmountsOut={"result": lambda amount_in, routes: [amount_in, amount_in * 2, 500000]},
        swapExactETHForTokens={"gas": 200000},
        swapExactTokensForETH={"gas": 250000},
    )


@pytest.fixture
def make_wallet(router):
    def _make_wallet(balances=None, decimals=None, allowance=0, **kwargs):
        contracts = make_token_contracts(balances, decimals, allowance)
        contracts[DEFAULT_ROUTER_ADDRESS] = router
        return FakeWallet(contracts, **kwargs)

    return _make_wallet


@pytest.fixture
def no_sleep():
    calls = []

    async def _sleep(seconds):
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep
