"""Class Parser - Parse Python code using AST and build ClassModel snapshots."""

import ast
import logging

from ...constants import MAX_NODES_PER_METHOD
from ..errors import ClassNotFoundError, SourceSyntaxError
from .models import ClassModel, MethodInfo, ParameterInfo

logger = logging.getLogger(__name__)

# Bodies of these nodes belong to another scope
_SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)


def parse_module(code: str) -> ast.Module:
    """
    Parse source into an AST module.

    Raises:
        SourceSyntaxError: The source is not valid Python.
    """
    try:
        return ast.parse(code)
    except SyntaxError as e:
        raise SourceSyntaxError(f"Syntax error at line {e.lineno}: {e.msg}", e.lineno) from e


def extract_classes(
    tree: ast.Module,
    max_nodes: int = MAX_NODES_PER_METHOD
) -> list[ClassModel]:
    """Extract top-level classes (and their methods) from an AST module."""

    classes = []

    for node in ast.iter_child_nodes(tree):
        if isinstance(node, ast.ClassDef):
            classes.append(_parse_class(node, max_nodes))

    return classes


def find_class(classes: list[ClassModel], class_name: str | None = None) -> ClassModel:
    """
    Pick the class to analyze.

    Without a name the first top-level class is used.

    Raises:
        ClassNotFoundError: No class matches; lists the classes available.
    """
    available = [c.name for c in classes]

    if not classes:
        raise ClassNotFoundError("No class definition found in source", available)

    if class_name is None:
        return classes[0]

    for cls in classes:
        if cls.name == class_name:
            return cls

    raise ClassNotFoundError(
        f"Class '{class_name}' not found. Available classes: {', '.join(available)}",
        available
    )


def _parse_class(node: ast.ClassDef, max_nodes: int) -> ClassModel:
    """Parse a class node into ClassModel."""

    constructor = None
    methods = []
    for item in node.body:
        if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
            method_info = _parse_method(item, max_nodes)
            if item.name == "__init__":
                constructor = method_info
            else:
                methods.append(method_info)

    constructor_params: tuple[ParameterInfo, ...] = ()
    attribute_map: dict[str, str] = {}
    if constructor is not None:
        constructor_params = tuple(
            p for p in constructor.parameters if p.kind not in ("var_positional", "var_keyword")
        )
        attribute_map = _collect_attribute_map(constructor, {p.name for p in constructor_params})

    # Extract base classes
    base_classes = []
    for base in node.bases:
        if isinstance(base, ast.Name):
            base_classes.append(base.id)
        elif isinstance(base, ast.Attribute):
            base_classes.append(_get_attribute_string(base))

    return ClassModel(
        name=node.name,
        methods=tuple(methods),
        constructor=constructor,
        constructor_params=constructor_params,
        attribute_map=attribute_map,
        base_classes=tuple(base_classes),
        decorators=tuple(ast.unparse(d) for d in node.decorator_list),
        docstring=ast.get_docstring(node),
        line_number=node.lineno,
        source=ast.unparse(node)
    )


def _parse_method(
    node: ast.FunctionDef | ast.AsyncFunctionDef,
    max_nodes: int
) -> MethodInfo:
    """Parse a method node into MethodInfo."""

    # Check decorators for static/classmethod
    is_static = False
    is_classmethod = False
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Name):
            if decorator.id == 'staticmethod':
                is_static = True
            elif decorator.id == 'classmethod':
                is_classmethod = True

    parameters = _parse_parameters(node.args)
    if not is_static and parameters and parameters[0].name in ("self", "cls"):
        parameters = parameters[1:]

    nodes, parents, truncated = _collect_body(node, max_nodes)
    if truncated:
        logger.warning(
            f"Method '{node.name}' exceeds {max_nodes} AST nodes; analysis is truncated"
        )

    return MethodInfo(
        name=node.name,
        parameters=tuple(parameters),
        return_type=_get_annotation_string(node.returns) if node.returns else None,
        docstring=ast.get_docstring(node),
        is_async=isinstance(node, ast.AsyncFunctionDef),
        is_static=is_static,
        is_classmethod=is_classmethod,
        decorators=tuple(ast.unparse(d) for d in node.decorator_list),
        line_number=node.lineno,
        source=ast.unparse(node),
        truncated=truncated,
        node=node,
        nodes=nodes,
        parents=parents
    )


def _collect_body(
    node: ast.FunctionDef | ast.AsyncFunctionDef,
    max_nodes: int
) -> tuple[tuple[ast.AST, ...], dict[ast.AST, ast.AST], bool]:
    """
    Collect descendants of a method body in source order.

    Nested functions and classes are recorded as nodes but their bodies
    are not entered. Stops after ``max_nodes`` nodes.

    Returns:
        (nodes, parent index, truncated flag)
    """
    nodes: list[ast.AST] = []
    parents: dict[ast.AST, ast.AST] = {}
    stack = [(stmt, node) for stmt in reversed(node.body)]

    while stack:
        if len(nodes) >= max_nodes:
            return tuple(nodes), parents, True

        child, parent = stack.pop()
        parents[child] = parent
        nodes.append(child)

        if isinstance(child, _SCOPE_NODES):
            continue
        grandchildren = list(ast.iter_child_nodes(child))
        stack.extend((grand, child) for grand in reversed(grandchildren))

    return tuple(nodes), parents, False


def _collect_attribute_map(constructor: MethodInfo, param_names: set[str]) -> dict[str, str]:
    """Map ``self.<attr>`` assignments in __init__ to the constructor parameter they store."""

    attribute_map: dict[str, str] = {}

    for node in constructor.nodes:
        if isinstance(node, ast.Assign):
            targets, value = node.targets, node.value
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            targets, value = [node.target], node.value
        else:
            continue

        # First parameter name referenced on the right-hand side (handles `repo or Default()`)
        source_param = next(
            (n.id for n in ast.walk(value) if isinstance(n, ast.Name) and n.id in param_names),
            None
        )
        if source_param is None:
            continue

        for target in targets:
            if (
                isinstance(target, ast.Attribute)
                and isinstance(target.value, ast.Name)
                and target.value.id == "self"
            ):
                attribute_map[target.attr] = source_param

    return attribute_map


def _parse_parameters(args: ast.arguments) -> list[ParameterInfo]:
    """
    Parse function arguments into ParameterInfo list.

    Handles all Python parameter kinds:
    - Positional-only (before /)
    - Positional-or-keyword (normal)
    - *args (var_positional)
    - Keyword-only (after * or *args)
    - **kwargs (var_keyword)
    """
    parameters = []

    # defaults are right-aligned across posonlyargs + args combined
    positional = [(arg, "positional_only") for arg in args.posonlyargs]
    positional += [(arg, "positional_or_keyword") for arg in args.args]
    defaults_start = len(positional) - len(args.defaults)

    for i, (arg, kind) in enumerate(positional):
        default_index = i - defaults_start
        has_default = default_index >= 0
        parameters.append(ParameterInfo(
            name=arg.arg,
            type_hint=_get_annotation_string(arg.annotation) if arg.annotation else None,
            default_value=_get_default_string(args.defaults[default_index]) if has_default else None,
            has_default=has_default,
            kind=kind
        ))

    if args.vararg:
        parameters.append(ParameterInfo(
            name=f"*{args.vararg.arg}",
            type_hint=_get_annotation_string(args.vararg.annotation) if args.vararg.annotation else None,
            kind="var_positional"
        ))

    # kw_defaults aligns with kwonlyargs (same length, None for no default)
    for i, arg in enumerate(args.kwonlyargs):
        kw_default = args.kw_defaults[i] if i < len(args.kw_defaults) else None
        parameters.append(ParameterInfo(
            name=arg.arg,
            type_hint=_get_annotation_string(arg.annotation) if arg.annotation else None,
            default_value=_get_default_string(kw_default) if kw_default else None,
            has_default=kw_default is not None,
            kind="keyword_only"
        ))

    if args.kwarg:
        parameters.append(ParameterInfo(
            name=f"**{args.kwarg.arg}",
            type_hint=_get_annotation_string(args.kwarg.annotation) if args.kwarg.annotation else None,
            kind="var_keyword"
        ))

    return parameters


def _get_annotation_string(node: ast.expr) -> str:
    """Convert annotation AST node to string."""
    if isinstance(node, ast.Name):
        return node.id
    elif isinstance(node, ast.Constant):
        # String annotations ("UserRepository") are kept unquoted
        return node.value if isinstance(node.value, str) else repr(node.value)
    elif isinstance(node, ast.Subscript):
        # Handle generics like list[int], Optional[str]
        base = _get_annotation_string(node.value)
        slice_val = _get_annotation_string(node.slice)
        return f"{base}[{slice_val}]"
    elif isinstance(node, ast.Attribute):
        return _get_attribute_string(node)
    elif isinstance(node, ast.Tuple):
        # Handle tuple types like tuple[int, str]
        elements = [_get_annotation_string(el) for el in node.elts]
        return ", ".join(elements)
    elif isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        # Handle union types like int | None
        left = _get_annotation_string(node.left)
        right = _get_annotation_string(node.right)
        return f"{left} | {right}"
    else:
        return ast.unparse(node)


def _get_attribute_string(node: ast.Attribute) -> str:
    """Convert attribute access to string (e.g., typing.Optional)."""
    if isinstance(node.value, ast.Name):
        return f"{node.value.id}.{node.attr}"
    elif isinstance(node.value, ast.Attribute):
        return f"{_get_attribute_string(node.value)}.{node.attr}"
    return node.attr


def _get_default_string(node: ast.expr) -> str:
    """Convert default value AST node to string."""
    if isinstance(node, ast.Constant):
        return repr(node.value)
    elif isinstance(node, ast.Name):
        return node.id
    elif isinstance(node, ast.List):
        return "[]"
    elif isinstance(node, ast.Dict):
        return "{}"
    elif isinstance(node, ast.Tuple):
        return "()"
    elif isinstance(node, ast.Call):
        if isinstance(node.func, ast.Name):
            return f"{node.func.id}()"
        return "..."
    else:
        return "..."
