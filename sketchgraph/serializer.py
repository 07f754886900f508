"""
Conversion between a GraphStore and the JSON document format.

Document format:
{
  "nodes": [{"id": 1, "title": "A", "x": 0, "y": 0}],
  "edges": [{"source": 1, "target": 2, "label": "go"}]
}

There is no version field. "label" may be absent on edges (older documents
were written without it) and "title" may be absent on nodes.

Loading is all-or-nothing: the document is fully validated and resolved
before the store is touched.
"""

import json
import logging
import numbers
from typing import Any, Dict, List, Tuple, Union

from sketchgraph.errors import DocumentFormatError
from sketchgraph.model import Edge, Node
from sketchgraph.store import GraphStore

logger = logging.getLogger(__name__)


def serialize(store: GraphStore) -> Dict[str, Any]:
    """Project the store onto a plain dict. Edges are written as endpoint ids."""
    return {
        "nodes": [
            {"id": n.id, "title": n.title, "x": n.x, "y": n.y}
            for n in store.nodes
        ],
        "edges": [
            {"source": e.source, "target": e.target, "label": e.label}
            for e in store.edges
        ],
    }


def _require_int(value: Any, where: str) -> int:
    # bool is an int subclass but never a valid id
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise DocumentFormatError(f"{where}: expected an integer id, got {value!r}")
    return int(value)


def _require_number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise DocumentFormatError(f"{where}: expected a number, got {value!r}")
    return float(value)


def _require_list(document: Dict[str, Any], key: str) -> List[Any]:
    value = document.get(key, [])
    if not isinstance(value, list):
        raise DocumentFormatError(f"'{key}' must be a list")
    return value


def parse_document(document: Any) -> Tuple[List[Node], List[Edge]]:
    """
    Validate a document and build unattached Node and Edge objects.

    Raises:
        DocumentFormatError: the document is malformed
    """
    if not isinstance(document, dict):
        raise DocumentFormatError("Document must be an object with 'nodes' and 'edges'")

    nodes = []
    for i, raw in enumerate(_require_list(document, "nodes")):
        where = f"nodes[{i}]"
        if not isinstance(raw, dict):
            raise DocumentFormatError(f"{where}: expected an object")
        if "id" not in raw:
            raise DocumentFormatError(f"{where}: missing 'id'")
        node_id = _require_int(raw["id"], where)
        title = raw.get("title")
        nodes.append(Node(
            id=node_id,
            title=str(node_id) if title is None else str(title),
            x=_require_number(raw.get("x", 0), where),
            y=_require_number(raw.get("y", 0), where),
        ))

    edges = []
    for i, raw in enumerate(_require_list(document, "edges")):
        where = f"edges[{i}]"
        if not isinstance(raw, dict):
            raise DocumentFormatError(f"{where}: expected an object")
        for key in ("source", "target"):
            if key not in raw:
                raise DocumentFormatError(f"{where}: missing '{key}'")
        label = raw.get("label")
        edges.append(Edge(
            source=_require_int(raw["source"], where),
            target=_require_int(raw["target"], where),
            label="" if label is None else str(label),
        ))

    return nodes, edges


def deserialize(document: Any, store: GraphStore) -> None:
    """
    Replace the contents of store with the document.

    Raises:
        DocumentFormatError: the document is malformed
        DanglingReferenceError: an edge references a node id not in the document
    """
    nodes, edges = parse_document(document)
    store.replace_all(nodes, edges)


def dumps(store: GraphStore) -> str:
    return json.dumps(serialize(store), indent=2, ensure_ascii=False)


def parse_json(text: Union[str, bytes]) -> Any:
    """Decode document text. Bytes may be in any encoding json accepts."""
    try:
        return json.loads(text)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise DocumentFormatError(f"Invalid JSON: {e}") from e


def loads(text: Union[str, bytes], store: GraphStore) -> None:
    deserialize(parse_json(text), store)
