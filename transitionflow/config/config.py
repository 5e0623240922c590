"""
Módulo de configuração para TransitionFlow
Suporta configuração via variáveis de ambiente e arquivo .env
"""

import os
import threading
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv


class DefaultConfig:
    """Valores padrão das configurações"""
    # Paths
    OUTPUT_DIR = './output'
    TRANSITIONS_DIR = './transitions'
    FILE_EXTENSION = 'json'

    # Análise de caminhos
    MAX_PATH_DEPTH = 10

    # Validação
    STRICT_VALIDATION = False  # Falha (exit 1) quando houver leituras ausentes

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_DIR = './logs'
    AUTO_LOG_ENABLED = False  # Habilitar criação automática de logs


class Config:
    """
    Configurações do TransitionFlow (Singleton Thread-Safe)

    Uso:
        config = Config.get_instance()  # Recomendado
        # ou
        config = get_config()

    Thread-safe: Sim (usando threading.Lock com double-check locking)
    """

    _instance: Optional['Config'] = None
    _lock: threading.Lock = threading.Lock()
    _initialized: bool = False

    def __new__(cls) -> 'Config':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Inicializa configurações (executado apenas uma vez)"""
        if Config._initialized:
            return

        with Config._lock:
            if Config._initialized:
                return

            # Tenta carregar .env primeiro, depois environment.env
            base_path = Path(__file__).parent.parent.parent
            env_path = base_path / '.env'
            if not env_path.exists():
                env_path = base_path / 'environment.env'

            if env_path.exists():
                load_dotenv(env_path)
                self._env_loaded = True
            else:
                self._env_loaded = False

            # Caminhos padrão
            self.output_dir = os.getenv('TRANSITIONFLOW_OUTPUT_DIR', DefaultConfig.OUTPUT_DIR)
            self.transitions_dir = os.getenv('TRANSITIONFLOW_TRANSITIONS_DIR', DefaultConfig.TRANSITIONS_DIR)
            self.file_extension = os.getenv('TRANSITIONFLOW_FILE_EXTENSION',
                                            DefaultConfig.FILE_EXTENSION).lstrip('.')

            # Análise
            self.max_path_depth = self._getenv_int('TRANSITIONFLOW_MAX_PATH_DEPTH', DefaultConfig.MAX_PATH_DEPTH)
            self.strict_validation = self._getenv_bool('TRANSITIONFLOW_STRICT_VALIDATION',
                                                       DefaultConfig.STRICT_VALIDATION)

            # Logging
            self.log_level = os.getenv('TRANSITIONFLOW_LOG_LEVEL', DefaultConfig.LOG_LEVEL)
            self.log_file = os.getenv('TRANSITIONFLOW_LOG_FILE')  # Opcional
            self.log_dir = os.getenv('TRANSITIONFLOW_LOG_DIR', DefaultConfig.LOG_DIR)
            self.auto_log_enabled = self._getenv_bool('TRANSITIONFLOW_AUTO_LOG_ENABLED',
                                                      DefaultConfig.AUTO_LOG_ENABLED)

            self._validate()

            Config._initialized = True

    @classmethod
    def get_instance(cls) -> 'Config':
        """Retorna instância singleton da configuração (método recomendado)"""
        return cls()

    @classmethod
    def reset_instance(cls) -> None:
        """
        Reseta instância singleton (útil para testes)

        WARNING: Use apenas em testes.
        """
        with cls._lock:
            cls._instance = None
            cls._initialized = False

    @staticmethod
    def _getenv_int(key: str, default: int) -> int:
        """Obtém variável de ambiente como int"""
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def _getenv_bool(key: str, default: bool = False) -> bool:
        """Obtém variável de ambiente como bool"""
        value = os.getenv(key, '').lower()
        if not value:
            return default
        return value in ('true', '1', 'yes', 'on')

    def _validate(self) -> None:
        """Valida configurações"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"Log level deve ser um de: {valid_levels}")

        if self.max_path_depth < 1:
            raise ValueError("Max path depth deve ser pelo menos 1")

        if not self.file_extension:
            raise ValueError("Extensão de arquivo não pode ser vazia")

    def __repr__(self) -> str:
        return (f"Config(transitions_dir={self.transitions_dir}, output_dir={self.output_dir}, "
                f"max_path_depth={self.max_path_depth}, env_loaded={self._env_loaded})")


def get_config() -> Config:
    """
    Retorna instância global de configuração (singleton)

    Returns:
        Instância de Config
    """
    return Config.get_instance()


def reload_config() -> Config:
    """
    Recarrega configuração (útil para testes)

    Returns:
        Nova instância de Config
    """
    Config.reset_instance()
    return Config.get_instance()
