"""Graph assembly — builds and compiles the PermitState graph with all nodes and edges."""

from functools import partial

from langgraph.graph import StateGraph, START
from langgraph.checkpoint.memory import MemorySaver

from validator.client import ValidationClient
from wizard.state import PermitState
from wizard.router import router, STEP_NODE_MAP, SCREEN_NODE_MAP
from wizard.nodes import wizard_screen_node, submit_application_node


def build_graph(client: ValidationClient | None = None, checkpointer=None):
    """
    Assemble the permit wizard graph.
    Returns a compiled graph ready for ainvoke / aget_state.
    """
    builder = StateGraph(PermitState)
    screen_nodes = [*SCREEN_NODE_MAP.values(), *STEP_NODE_MAP.values()]

    # ── Register screen + step nodes ────────────────────────────────
    for node_name in screen_nodes:
        node_func = partial(wizard_screen_node, node_name=node_name)
        node_func.__name__ = node_name
        builder.add_node(node_name, node_func)

    # ── Register submission node ────────────────────────────────────
    submit_func = partial(submit_application_node, client=client or ValidationClient())
    submit_func.__name__ = "submit_application"
    builder.add_node("submit_application", submit_func)

    # ── Entry edge ──────────────────────────────────────────────────
    builder.add_edge(START, "landing_screen")

    # ── Conditional edges: every node → router ──────────────────────
    for node_name in [*screen_nodes, "submit_application"]:
        builder.add_conditional_edges(node_name, router)

    # ── Compile with checkpointer (required for interrupt) ──────────
    # In-memory only: applications never outlive the process.
    if checkpointer is None:
        checkpointer = MemorySaver()

    return builder.compile(checkpointer=checkpointer)
