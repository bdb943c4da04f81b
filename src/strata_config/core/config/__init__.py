# src/strata_config/core/config/__init__.py

"""
Camada de configuração do Strata Config.

Este pacote contém as estruturas e utilitários responsáveis por descobrir,
parsear, mesclar, validar e identificar configurações de aplicações.

Responsabilidades do pacote:
    - Descoberta de arquivos base e de ambiente com ordem de prioridade
    - Parsing de JSON, JSON5, YAML, TOML e dotenv
    - Merge configurável (estratégias, listas, mergers por chave, filtros)
    - Validação declarativa com defaults, transforms e schemas aninhados
    - Cache por ambiente com invalidação dirigida por eventos de arquivo
    - Geração de hash canônico para rastreabilidade

Princípios fundamentais:
    - Merge e validação são funções puras e reentrantes
    - Colaboradores (parsers, watcher) são injetados, nunca globais
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não executa código de arquivos de configuração
    - Não implementa a observação do sistema de arquivos
    - Não interpola variáveis de ambiente
"""
