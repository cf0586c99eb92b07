"""
bookkeeping_services -- Package init.

Responsibility:
    Orchestration over the module services and engines: the workflow
    executor, the report generator, the personal-funds linker and the
    ``Ledger`` facade that wires them to a persistence gateway.

Architecture position:
    Services -- the top layer.

    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        bookkeeping_services/ -> bookkeeping_modules/  (allowed)
        bookkeeping_services/ -> bookkeeping_engines/  (allowed)
        bookkeeping_services/ -> bookkeeping_kernel/   (allowed)
        bookkeeping_engines/  -> bookkeeping_services/ (FORBIDDEN)
        bookkeeping_kernel/   -> bookkeeping_services/ (FORBIDDEN)

    Module services import ``workflow_executor`` from here, so this init
    imports nothing from ``bookkeeping_modules``.  Import the facade from
    its own module: ``from bookkeeping_services.ledger import Ledger``.
"""

from bookkeeping_services.workflow_executor import WorkflowExecutor

__all__ = ["WorkflowExecutor"]
