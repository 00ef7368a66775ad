"""Analyzer - class parsing, collaborators, control flow and error paths."""

from .dependencies import DependencyModel, DependencyUsage, analyze_dependencies
from .error_paths import analyze_error_paths
from .method_flow import MethodFlowAnalysis, analyze_method_flow, analyze_method_flows
from .models import ClassModel, ErrorPath, MethodInfo, ParameterInfo, SideEffect
from .parser import extract_classes, find_class, parse_module
from .policy import DEFAULT_POLICY, AnalysisPolicy, DefaultPolicy
from .type_classifier import TypeClassification, classify, classify_parameter

__all__ = [
    "parse_module",
    "extract_classes",
    "find_class",
    "ClassModel",
    "MethodInfo",
    "ParameterInfo",
    "ErrorPath",
    "SideEffect",
    "analyze_dependencies",
    "DependencyModel",
    "DependencyUsage",
    "analyze_method_flows",
    "analyze_method_flow",
    "MethodFlowAnalysis",
    "analyze_error_paths",
    "classify",
    "classify_parameter",
    "TypeClassification",
    "AnalysisPolicy",
    "DefaultPolicy",
    "DEFAULT_POLICY",
]
