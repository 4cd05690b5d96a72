"""Infrastructure layer: interceptor registry and runtime wiring.

The registry depends only on the domain layer. The runtime facade wires
configuration, plugins, and services together with deferred imports.
"""
