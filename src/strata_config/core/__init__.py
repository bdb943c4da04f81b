# src/strata_config/core/__init__.py
"""
Core do Strata Config.

Reúne a implementação canônica, livre de adapters, da resolução de
configuração: descoberta, parsing, merge, validação e cache.
"""
