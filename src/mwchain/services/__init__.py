"""Service layer: chain execution, error boundary, binding, inspection.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
