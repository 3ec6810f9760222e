"""Configuração do pytest para o homeserver-session."""

import sys
from pathlib import Path

# Adiciona raiz e src/ ao PYTHONPATH para permitir imports absolutos
root_path = Path(__file__).parent.parent
for path in (root_path, root_path / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
