# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do Strata Config.

Este módulo contém testes mínimos cujo único objetivo é garantir que:
- o pacote pode ser importado
- a API pública está exposta no pacote raiz
- a descoberta e execução de testes ocorre sem erros

Invariantes:
    - Estes testes devem sempre passar em um setup correto
    - Não dependem de filesystem ou I/O

Limites explícitos:
    - Não testar lógica de merge, validação ou carregamento
"""

import strata_config


def test_smoke():
    """
    Smoke test mínimo do repositório.

    Valida que o pacote raiz importa sem falhas estruturais e que cada
    nome declarado em `__all__` existe.
    """
    missing = [name for name in strata_config.__all__ if not hasattr(strata_config, name)]
    assert missing == []
