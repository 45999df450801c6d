import os
import json
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from dotenv import load_dotenv

from config.constants import (
    NETWORK_NAME,
    NATIVE_SYMBOL,
    DEFAULT_RPC_URL,
    DEFAULT_CHAIN_ID,
    DEFAULT_ROUTER_ADDRESS,
    DEFAULT_TOKEN_API_URL,
    DEFAULT_TOKENS,
    WRAPPED_NATIVE_SYMBOL,
    INTERMEDIATE_SYMBOL,
    TRADEABLE_SYMBOLS,
    STABLE_HOP_SYMBOLS,
    BPS_DENOMINATOR,
    MODES,
    MODE_RANDOM,
    normalize_mode,
)
from utils.logger import setup_logger

DEFAULT_CONFIG_PATH = "config/config.json"

# Переменные окружения -> (поле конфига, тип)
ENV_OVERRIDES = {
    'RPC_URL': ('rpc_url', str),
    'CHAIN_ID': ('chain_id', int),
    'ROUTER_ADDRESS': ('router_address', str),
    'TOKEN_API_URL': ('token_api_url', str),
    'SLIPPAGE_BPS': ('slippage_bps', int),
    'LOOP_SECONDS': ('loop_seconds', int),
    'GAS_BUFFER_BPS': ('gas_buffer_bps', int),
    'MODE': ('mode', str),
    'LIQUIDITY_ATTEMPTS': ('liquidity_attempts', int),
    'LIQUIDITY_INTERVAL_MS': ('liquidity_interval_ms', int),
    'DEADLINE_SECONDS': ('deadline_seconds', int),
    'RECEIPT_TIMEOUT': ('receipt_timeout', int),
    'LOG_FILE': ('log_file', str),
    'LOG_LEVEL': ('log_level', str),
}


@dataclass(frozen=True)
class TokenRef:
    symbol: str
    address: str


@dataclass(frozen=True)
class BotConfig:
    """Неизменяемая конфигурация бота, создается один раз при старте"""
    network_name: str = NETWORK_NAME
    native_symbol: str = NATIVE_SYMBOL
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    router_address: str = DEFAULT_ROUTER_ADDRESS
    token_api_url: str = DEFAULT_TOKEN_API_URL
    tokens: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(DEFAULT_TOKENS)))
    wrapped_native_symbol: str = WRAPPED_NATIVE_SYMBOL
    intermediate_symbol: str = INTERMEDIATE_SYMBOL
    tradeable_symbols: Tuple[str, ...] = TRADEABLE_SYMBOLS
    stable_hop_symbols: Tuple[str, ...] = STABLE_HOP_SYMBOLS

    slippage_bps: int = 100
    loop_seconds: int = 30
    gas_buffer_bps: int = 1500
    mode: str = MODE_RANDOM

    liquidity_attempts: int = 12
    liquidity_interval_ms: int = 3000
    deadline_seconds: int = 300
    receipt_timeout: int = 120
    registry_timeout: int = 15
    native_amount_range: Tuple[float, float] = (0.10, 0.50)
    token_percent_range: Tuple[int, int] = (10, 50)

    log_file: str = "logs/swap_bot.log"
    log_level: str = "INFO"

    def __post_init__(self):
        # Токены всегда храним как read-only отображение
        if not isinstance(self.tokens, MappingProxyType):
            object.__setattr__(self, 'tokens', MappingProxyType(dict(self.tokens)))
        object.__setattr__(self, 'mode', normalize_mode(self.mode))

    def token_address(self, symbol: str) -> str:
        return self.tokens[symbol]

    @property
    def wrapped_native(self) -> str:
        return self.token_address(self.wrapped_native_symbol)

    @property
    def intermediate(self) -> str:
        return self.token_address(self.intermediate_symbol)

    def tradeable_tokens(self) -> List[TokenRef]:
        return [TokenRef(symbol, self.token_address(symbol)) for symbol in self.tradeable_symbols]


def validate_config(config: BotConfig) -> List[str]:
    """Валидация конфигурации, возвращает список проблем"""
    issues = []

    if not config.rpc_url:
        issues.append("RPC URL is empty")
    if config.chain_id <= 0:
        issues.append(f"Invalid chain_id: {config.chain_id}")
    if not config.router_address:
        issues.append("Router address is empty")

    for name in ('slippage_bps', 'gas_buffer_bps'):
        value = getattr(config, name)
        if not 0 <= value <= BPS_DENOMINATOR:
            issues.append(f"{name} must be within [0, {BPS_DENOMINATOR}], got {value}")

    if config.loop_seconds <= 0:
        issues.append(f"loop_seconds must be positive, got {config.loop_seconds}")
    if config.liquidity_attempts <= 0:
        issues.append(f"liquidity_attempts must be positive, got {config.liquidity_attempts}")
    if config.liquidity_interval_ms < 0:
        issues.append(f"liquidity_interval_ms must not be negative, got {config.liquidity_interval_ms}")
    if config.deadline_seconds <= 0:
        issues.append(f"deadline_seconds must be positive, got {config.deadline_seconds}")
    if config.mode not in MODES:
        issues.append(f"Unknown mode '{config.mode}', expected one of {', '.join(MODES)}")

    required = {config.wrapped_native_symbol, config.intermediate_symbol, *config.tradeable_symbols}
    for symbol in sorted(required):
        if not config.tokens.get(symbol):
            issues.append(f"Token {symbol} has no address")

    low, high = config.native_amount_range
    if not 0 < low <= high:
        issues.append(f"Invalid native_amount_range: {config.native_amount_range}")
    low_pct, high_pct = config.token_percent_range
    if not 0 < low_pct < high_pct <= 100:
        issues.append(f"Invalid token_percent_range: {config.token_percent_range}")

    return issues


def _substitute_env(value):
    """Подстановка переменных окружения вида ${VAR}"""
    if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
        env_var = value[2:-1]
        return os.getenv(env_var, value)
    return value


def _load_file_overrides(config_path: str, logger) -> Dict:
    if not config_path or not os.path.exists(config_path):
        return {}

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON decode error in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")

    known = {f.name for f in fields(BotConfig)}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"⚠️ Unknown config key ignored: {key}")
            continue

        if key == 'tokens' and isinstance(value, dict):
            tokens = dict(DEFAULT_TOKENS)
            tokens.update({symbol: _substitute_env(addr) for symbol, addr in value.items()})
            overrides[key] = tokens
        elif isinstance(value, list):
            overrides[key] = tuple(_substitute_env(v) for v in value)
        else:
            overrides[key] = _substitute_env(value)

    logger.info(f"✅ Configuration file loaded: {config_path}")
    return overrides


def _load_env_overrides() -> Dict:
    overrides = {}
    for env_var, (name, cast) in ENV_OVERRIDES.items():
        raw = os.getenv(env_var)
        if raw is None or (raw.strip() == "" and cast is not str):
            continue
        try:
            overrides[name] = cast(raw.strip())
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {raw!r}") from e
    return overrides


def load_config(config_path: str = DEFAULT_CONFIG_PATH, use_env: bool = True) -> BotConfig:
    """Сборка конфигурации: значения по умолчанию -> JSON файл -> переменные окружения"""
    logger = setup_logger("Config")

    if use_env:
        load_dotenv()

    config = BotConfig()
    config = replace(config, **_load_file_overrides(config_path, logger))
    if use_env:
        config = replace(config, **_load_env_overrides())

    issues = validate_config(config)
    if issues:
        logger.error(f"❌ Config validation issues: {issues}")
        raise ValueError("Invalid configuration: " + "; ".join(issues))

    logger.info(
        f"✅ Configuration loaded: {config.network_name} (ChainID: {config.chain_id}), "
        f"mode={config.mode}, slippage={config.slippage_bps}bps, loop={config.loop_seconds}s"
    )
    return config
