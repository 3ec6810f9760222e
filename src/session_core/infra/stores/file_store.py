"""Key-value store em arquivo JSON local.

Análogo ao localStorage de um cliente desktop: um único arquivo com o
mapa chave → string, regravado de forma atômica a cada escrita.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path

from session_core.protocols.stores import KeyValueStoreProtocol
from utils.errors import StoreCorruptedError, StoreUnavailableError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStoreProtocol):
    """Store durável em arquivo JSON.

    Args:
        path: Caminho do arquivo (diretórios são criados na primeira escrita)
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._cache: dict[str, str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._flush(data)

    def delete(self, key: str) -> bool:
        data = dict(self._load())
        if key not in data:
            return False
        del data[key]
        self._flush(data)
        return True

    def _load(self) -> dict[str, str]:
        if self._cache is not None:
            return self._cache
        if not self._path.exists():
            self._cache = {}
            return self._cache
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreCorruptedError(f"Arquivo de estado ilegível: {self._path}") from exc
        except OSError as exc:
            raise StoreUnavailableError(f"Falha ao ler {self._path}") from exc
        if not isinstance(raw, dict):
            raise StoreCorruptedError(f"Arquivo de estado não é um objeto JSON: {self._path}")
        self._cache = {str(k): str(v) for k, v in raw.items()}
        return self._cache

    def _flush(self, data: dict[str, str]) -> None:
        """Grava `data` e só então o adota como cache; em falha nada muda."""
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".state-")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StoreUnavailableError(f"Falha ao gravar {self._path}") from exc
        self._cache = data
        logger.debug("state_file_written", extra={"keys": len(data)})
