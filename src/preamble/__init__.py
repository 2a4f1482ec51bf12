"""
Conditional Preamble Composition Package

Composes a document preamble (an ordered set of text fragments) by
evaluating a registry of named, conditionally-included snippet providers
against a per-pass, memoized resolution context.

LAYERING:
---------
    expressions / requirements_parser   Requirement ASTs and how they are built
    model / snippets                    Registry, bindings and provider registrations
    context / evaluator                 Per-pass cache, resolver and boolean evaluation
    assembler                           Drives a pass and emits the ordered fragments
    serialization / analyzer / backends Configuration, diagnostics and diagrams

This package contains ZERO knowledge of:
    - How the host document is parsed or rendered
    - Where the registry configuration is persisted

Every pass owns its own cache. Nothing is shared between passes.
"""

__version__ = "0.1.0"
