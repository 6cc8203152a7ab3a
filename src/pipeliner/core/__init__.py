# src/pipeliner/core/__init__.py
"""
Core do Pipeliner.

Reúne a implementação canônica do grafo de dependências do pipeline:
tipos e registries, o controlador `PipeLine`, o snapshot STAR, a
configuração e o Event Log.

O core é projetado para ser:
    - testável de forma isolada (o único efeito externo é o filesystem)
    - livre de dependências de UI ou de escalonadores de jobs
    - explícito: toda mutação do grafo passa pelo controlador

Limites explícitos:
    - Não executa jobs
    - Não possui locking (um único dono muta o grafo)
"""
