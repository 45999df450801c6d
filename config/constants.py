# ✅ СЕТЬ ПО УМОЛЧАНИЮ: Injective EVM Testnet + Pumex router
NETWORK_NAME = "Injective Testnet"
NATIVE_SYMBOL = "INJ"
DEFAULT_RPC_URL = "https://k8s.testnet.json-rpc.injective.network/"
DEFAULT_CHAIN_ID = 1439
DEFAULT_ROUTER_ADDRESS = "0x4069f8Ada1a4d3B705e6a82F9A3EB8624Cd4Cb1E"
DEFAULT_TOKEN_API_URL = "https://pumex-api-testnet-e59621f25cf1.herokuapp.com/stats/topTokens"

DEFAULT_TOKENS = {
    "WINJ": "0x5Ae9B425f58B78e0d5e7e5a7A75c5f5B45d143B7",
    "mUSDT": "0xE83c1acd1c9cc3780D0a560E36DCCAA236B86412",
    "mDAI": "0x510B9d0E74480aF149737482884b4aAa82C1A714",
    "mUSDC": "0x1d4403F5Ac128dAF548C5ba707D1047b475fDAd2",
    "PMX": "0xeD0094eE59492cB08A5602Eb8275acb00FFb627d",
}

WRAPPED_NATIVE_SYMBOL = "WINJ"
INTERMEDIATE_SYMBOL = "mUSDT"
TRADEABLE_SYMBOLS = ("PMX", "mUSDC", "mDAI")
# Вторая нога идет через stable-пул только для этих токенов
STABLE_HOP_SYMBOLS = ("mDAI",)

MAX_UINT256 = 2 ** 256 - 1
BPS_DENOMINATOR = 10000
APPROVE_FALLBACK_GAS = 100000
FALLBACK_GAS_PRICE_GWEI = "0.2"
DEFAULT_DECIMALS = 18
PLACEHOLDER_SYMBOL = "TKN"

# ✅ РЕЖИМЫ ТОРГОВЛИ
MODE_NATIVE_TO_TOKEN = "native_to_token"
MODE_TOKEN_TO_NATIVE = "token_to_native"
MODE_RANDOM = "random"
MODES = (MODE_NATIVE_TO_TOKEN, MODE_TOKEN_TO_NATIVE, MODE_RANDOM)

MODE_ALIASES = {
    'native_to_token': ['native_to_token', 'inj_to_token', 'buy'],
    'token_to_native': ['token_to_native', 'token_to_inj', 'sell'],
    'random': ['random', 'mixed', 'any'],
}

ROUTE_TUPLE_COMPONENTS = [
    {"internalType": "address", "name": "from", "type": "address"},
    {"internalType": "address", "name": "to", "type": "address"},
    {"internalType": "bool", "name": "stable", "type": "bool"},
]

ROUTER_ABI = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"components": ROUTE_TUPLE_COMPONENTS, "internalType": "struct Route[]",
             "name": "routes", "type": "tuple[]"}
        ],
        "name": "getAmountsOut",
        "outputs": [{"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "amountOutMin", "type": "uint256"},
            {"components": ROUTE_TUPLE_COMPONENTS, "internalType": "struct Route[]",
             "name": "routes", "type": "tuple[]"},
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "deadline", "type": "uint256"}
        ],
        "name": "swapExactETHForTokens",
        "outputs": [{"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}],
        "stateMutability": "payable",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"internalType": "uint256", "name": "amountOutMin", "type": "uint256"},
            {"components": ROUTE_TUPLE_COMPONENTS, "internalType": "struct Route[]",
             "name": "routes", "type": "tuple[]"},
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "deadline", "type": "uint256"}
        ],
        "name": "swapExactTokensForETH",
        "outputs": [{"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]

ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"name": "success", "type": "bool"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function"
    }
]


def normalize_mode(mode_name: str) -> str:
    """✅ НОРМАЛИЗАЦИЯ НАЗВАНИЯ РЕЖИМА"""
    if not mode_name:
        return ""

    normalized = mode_name.lower().strip().replace('-', '_')

    for mode, aliases in MODE_ALIASES.items():
        if normalized in aliases:
            return mode

    # Если не нашли, возвращаем как есть (валидация отсеет)
    return normalized
