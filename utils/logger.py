import logging
import sys
from pathlib import Path

ROOT_LOGGER_NAME = "swap_bot"
DEFAULT_LOG_FILE = "logs/swap_bot.log"

# Глобальный словарь для отслеживания инициализированных логгеров
_initialized_loggers = set()
_configured = None


def setup_logger(name: str = None) -> logging.Logger:
    """Получение именованного логгера бота (без собственных обработчиков)"""
    if name is None:
        name = __name__

    full_name = name if name.startswith(ROOT_LOGGER_NAME) else f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(full_name)

    # Если логгер уже инициализирован - возвращаем его
    if full_name in _initialized_loggers:
        return logger

    # Уровень наследуется от корневого логгера бота
    logger.setLevel(logging.NOTSET)

    # Помечаем как инициализированный
    _initialized_loggers.add(full_name)

    return logger


def configure_logging(log_file: str = DEFAULT_LOG_FILE, level: str = "INFO",
                      console: bool = False) -> logging.Logger:
    """Подключение обработчиков к корневому логгеру бота.

    Терминал занят дашбордом, поэтому по умолчанию пишем только в файл.
    Пустой log_file отключает файловый обработчик. Повторный вызов с теми же
    параметрами ничего не меняет, с другими - заменяет обработчики.
    """
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # ✅ ПРОВЕРЯЕМ, ЧТОБЫ НЕ ДОБАВЛЯТЬ ОБРАБОТЧИКИ ПОВТОРНО
    if _configured == (log_file, console):
        return root

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    # Не дублируем записи в корневой логгер Python
    root.propagate = False
    _configured = (log_file, console)

    return root
