"""
Loader de documentos de transição a partir de arquivos JSON
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any, Union

from transitionflow.core.models import DocumentLoadError, ValidationError

logger = logging.getLogger(__name__)


def load_json_file(file_path: Union[str, Path]) -> Any:
    """
    Lê um arquivo JSON

    Raises:
        DocumentLoadError: Se o arquivo não existir ou não for JSON válido
    """
    path = Path(file_path)
    if not path.is_file():
        raise DocumentLoadError(f"Arquivo não encontrado: {file_path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except UnicodeDecodeError as e:
        logger.error(f"Erro de codificação ao ler {path}: {e}")
        raise DocumentLoadError(f"Erro ao decodificar arquivo {path}: {e}")
    except json.JSONDecodeError as e:
        logger.error(f"JSON inválido em {path}: {e}")
        raise DocumentLoadError(f"JSON inválido em {path}: {e}")


def _unwrap_list(data: Any, keys: tuple, what: str, file_path: Union[str, Path]) -> List[Any]:
    """Aceita uma lista direta ou um objeto com a lista em uma das chaves"""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                return data[key]
    raise DocumentLoadError(
        f"Formato inválido para {what} em {file_path}: esperado lista ou objeto com {list(keys)}"
    )


def load_schema(file_path: Union[str, Path]) -> List[Any]:
    """Carrega schema de testData (lista ou {"fields": [...]} / {"schema": [...]})"""
    return _unwrap_list(load_json_file(file_path), ('fields', 'schema'), 'schema', file_path)


def load_prior_variables(file_path: Union[str, Path]) -> List[Any]:
    """Carrega variáveis disponíveis de estados anteriores"""
    return _unwrap_list(load_json_file(file_path), ('variables', 'storedVariables'), 'variáveis', file_path)


def load_transitions(file_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Carrega lista de transições (lista ou {"transitions": [...]})"""
    data = _unwrap_list(load_json_file(file_path), ('transitions',), 'transições', file_path)
    return [t for t in data if isinstance(t, dict)]


def load_states(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Carrega mapa de estados ({"states": {...}} ou mapa direto)"""
    data = load_json_file(file_path)
    if isinstance(data, dict) and isinstance(data.get('states'), dict):
        return data['states']
    if isinstance(data, dict):
        return data
    raise DocumentLoadError(f"Formato inválido para estados em {file_path}: esperado objeto")


class DocumentLoader:
    """Loader de documentos de transição a partir de arquivos .json"""

    def __init__(self, directory_path: str, extension: str = "json"):
        """
        Inicializa o loader de arquivos

        Args:
            directory_path: Caminho do diretório com arquivos
            extension: Extensão dos arquivos (padrão: "json")
        """
        self.directory_path = directory_path
        self.extension = extension

    def load_documents(self) -> Dict[str, Any]:
        """
        Carrega documentos de transição de arquivos

        Returns:
            Dict com caminho relativo (sem extensão) como chave e documento como valor

        Raises:
            DocumentLoadError: Se houver erro ao carregar arquivos
            ValidationError: Se a extensão for inválida
        """
        if not self.extension or not self.extension.strip():
            raise ValidationError("Extensão de arquivo não pode ser vazia")

        doc_dir = Path(self.directory_path)
        if not doc_dir.exists():
            raise DocumentLoadError(f"Diretório não encontrado: {self.directory_path}")

        if not doc_dir.is_dir():
            raise DocumentLoadError(f"Caminho não é um diretório: {self.directory_path}")

        documents = {}

        for file_path in sorted(doc_dir.rglob(f"*.{self.extension.lstrip('.')}")):
            if not file_path.is_file():
                continue
            if not file_path.read_bytes().strip():
                logger.warning(f"Arquivo vazio ignorado: {file_path.name}")
                continue

            name = file_path.relative_to(doc_dir).with_suffix('').as_posix()
            documents[name] = load_json_file(file_path)
            logger.info(f"Carregado: {file_path.name}")

        if not documents:
            raise DocumentLoadError(
                f"Nenhum arquivo .{self.extension} encontrado em {self.directory_path}"
            )

        logger.info(f"Total de {len(documents)} documentos carregados de {self.directory_path}")
        return documents
