"""
ESTree Loader

Converts ESTree JSON (as produced by esprima or acorn with `range`/`loc`
enabled, or `start`/`end` offsets) into the node classes of `nodes.py`, so
pre-parsed trees can be loaded into a buffer.
"""

from dataclasses import MISSING, fields
from typing import Any, Dict, Optional

from .errors import JsRenameError, UnsupportedNodeError
from .nodes import NODE_CLASSES, Node
from .source_location import LineIndex, SourceLocation


def from_estree(data: Dict[str, Any], file: str = "", source: Optional[str] = None) -> Node:
    """
    Convert an ESTree dict (and everything below it) into AST nodes.

    Line and column come from each node's `loc`. A tree with offsets only
    needs `source` to compute them; without it such a tree is rejected.
    """
    index = LineIndex(source) if source is not None else None
    return _from_estree(data, file, index)


def _from_estree(data: Dict[str, Any], file: str, index: Optional[LineIndex]) -> Node:
    node_type = data.get("type")
    cls = NODE_CLASSES.get(node_type)
    if cls is None:
        raise UnsupportedNodeError(str(node_type), context="ESTree node")

    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name == "location":
            continue
        if f.name in data:
            kwargs[f.name] = _convert(data[f.name], file, index)
        elif f.default is MISSING and f.default_factory is MISSING:
            kwargs[f.name] = None

    if node_type == "TryStatement" and "handler" not in data:
        # Older esprima releases emit a `handlers` list instead
        handlers = data.get("handlers") or []
        kwargs["handler"] = _convert(handlers[0], file, index) if handlers else None
    elif node_type == "Literal" and "regex" in data:
        kwargs["value"] = None
        kwargs["regex"] = data.get("raw") or "/{pattern}/{flags}".format(**data["regex"])
    elif node_type == "Program":
        kwargs["file"] = file
    elif node_type in ("ArrayExpression", "CallExpression", "NewExpression"):
        for name in ("elements", "arguments"):
            if name in kwargs and kwargs[name] is None:
                kwargs[name] = []

    return cls(**kwargs, location=_location(data, file, index))


def _convert(value: Any, file: str, index: Optional[LineIndex]) -> Any:
    if isinstance(value, dict) and "type" in value:
        return _from_estree(value, file, index)
    if isinstance(value, list):
        return [_convert(item, file, index) for item in value]
    return value


def _location(data: Dict[str, Any], file: str, index: Optional[LineIndex]) -> Optional[SourceLocation]:
    if "range" in data:
        start, end = data["range"]
    elif "start" in data and "end" in data:
        start, end = data["start"], data["end"]
    else:
        return None

    loc = data.get("loc")
    if loc:
        return SourceLocation(file=file, line=loc["start"]["line"], column=loc["start"]["column"],
                              start=start, end=end,
                              end_line=loc["end"]["line"], end_column=loc["end"]["column"])
    if index is None:
        raise JsRenameError(f"ESTree {data.get('type')} node at offset {start} has no `loc`; "
                            f"pass the source text to compute lines and columns")
    first, last = index.position(start), index.position(end)
    return SourceLocation(file=file, line=first.line, column=first.column, start=start, end=end,
                          end_line=last.line, end_column=last.column)
