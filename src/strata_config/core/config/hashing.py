# src/strata_config/core/config/hashing.py
"""
Hashing canônico de configuração.

O hash representa a **identidade estrutural** de uma configuração
resolvida e acompanha todo `ConfigResult`, permitindo que chamadores
detectem se uma recarga produziu de fato uma configuração diferente.

Política de hashing:
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Valores não nativos de JSON (ex.: datas vindas de YAML/TOML)
      serializados via `str`
    - Codificação UTF-8
    - Algoritmo SHA-256

Invariantes:
    - Configurações estruturalmente equivalentes produzem o mesmo hash
    - O valor gerado é sempre uma string hexadecimal de 64 caracteres
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico de uma configuração.

    Args:
        config (Dict[str, Any]): Configuração resolvida.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
