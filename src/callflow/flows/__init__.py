"""Flows defined in Python and registered in a catalog."""

from callflow.flows.registry import FlowCatalog, FlowDefinition, flow, import_flows

__all__ = ["FlowCatalog", "FlowDefinition", "flow", "import_flows"]
