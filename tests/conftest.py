"""Shared graph fixtures."""

import pytest

from stepgraph.core import GraphStore


@pytest.fixture
def graph():
    return GraphStore()


@pytest.fixture
def pair(graph):
    """Nodes a, b and one edge a->b."""
    a = graph.add_node(0, 0, "a")
    b = graph.add_node(300, 0, "b")
    e = graph.add_edge(a, b)
    return graph, a, b, e


@pytest.fixture
def two_triangles(graph):
    """Two 3-cycles a->b->c->a and d->e->f->d joined by a bridge c->d."""
    a, b, c, d, e, f = (graph.add_node(i * 60.0, 0, label) for i, label in enumerate("abcdef"))
    for source, target in [(a, b), (b, c), (c, a), (d, e), (e, f), (f, d), (c, d)]:
        graph.add_edge(source, target)
    return graph, (a, b, c, d, e, f)
