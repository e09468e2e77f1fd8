"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan los adaptadores concretos
  (clientes HTTP, caches).
- Permite invertir dependencias: el Core depende de abstracciones y se
  testea con dobles sin red.
"""
