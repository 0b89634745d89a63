"""
Analysis passes: scopes, type inference, classification and renaming.
"""

from .base import AnalysisContext, BasePass
from .type_graph import TypeGraph, TypeNode, TypeUnifier
from .scope_analysis import ScopeAnalysisPass
from .type_inference import (
    InferenceContext, TypeInferencer, infer_types, expression_type,
)
from .classification import IdKind, IdClass, classify_id
from .renaming import (
    RenameResult, identifier_range, get_label_decl, compute_renaming,
    compute_local_variable_renaming, compute_global_variable_renaming,
    compute_label_renaming, compute_property_renaming,
)

__all__ = [
    'AnalysisContext', 'BasePass',
    'TypeGraph', 'TypeNode', 'TypeUnifier',
    'ScopeAnalysisPass',
    'InferenceContext', 'TypeInferencer', 'infer_types', 'expression_type',
    'IdKind', 'IdClass', 'classify_id',
    'RenameResult', 'identifier_range', 'get_label_decl', 'compute_renaming',
    'compute_local_variable_renaming', 'compute_global_variable_renaming',
    'compute_label_renaming', 'compute_property_renaming',
]
