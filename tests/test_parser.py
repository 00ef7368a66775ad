"""
Tests for the class parser.

Covers:
- ClassModel construction (constructor params, attribute map, bases)
- MethodInfo signatures for every parameter kind
- Body snapshots, nesting and truncation
- Syntax and lookup errors
"""

import textwrap

import pytest

from pytest_planner_mcp.core.analyzer.models import NodeKind
from pytest_planner_mcp.core.analyzer.parser import extract_classes, find_class, parse_module
from pytest_planner_mcp.core.errors import ClassNotFoundError, SourceSyntaxError

USER_SERVICE = textwrap.dedent('''
    class UserService(BaseService):
        """Manages users."""

        def __init__(self, user_repository: UserRepository, email_service, logger=None):
            self.repo = user_repository
            self._email = email_service
            self.logger = logger

        def create_user(self, email: str, age: int = 18) -> User:
            if not email:
                raise ValueError("Email is required")
            user = self.repo.save(email)
            self._email.send(email)
            return user

        async def fetch(self, *ids: int, **options) -> list[User]:
            return await self.repo.find_many(ids)

        @staticmethod
        def helper(a, /, b, *, c=1):
            return a + b + c

        def _private(self):
            pass

        def __secret(self):
            pass

        def __len__(self):
            return 0
''')


def _parse(code: str, **kwargs):
    return extract_classes(parse_module(code), **kwargs)


# =============================================================================
# Class structure
# =============================================================================

class TestClassModel:
    """Tests for class-level extraction."""

    def test_extracts_top_level_classes(self):
        """Only top-level classes are returned, in source order."""
        code = textwrap.dedent('''
            class First:
                class Inner:
                    pass

            def function():
                pass

            class Second:
                pass
        ''')

        classes = _parse(code)

        assert [c.name for c in classes] == ["First", "Second"]

    def test_constructor_params_exclude_self(self):
        cls = _parse(USER_SERVICE)[0]

        assert [p.name for p in cls.constructor_params] == ["user_repository", "email_service", "logger"]
        assert cls.constructor.name == "__init__"

    def test_attribute_map_links_attributes_to_params(self):
        """self.<attr> = <param> assignments are recorded."""
        cls = _parse(USER_SERVICE)[0]

        assert cls.attribute_map == {
            "repo": "user_repository",
            "_email": "email_service",
            "logger": "logger",
        }
        assert cls.attributes_for("user_repository") == ["repo"]

    def test_attribute_map_handles_default_expression(self):
        code = textwrap.dedent('''
            class Cache:
                def __init__(self, store=None):
                    self._store = store or {}
        ''')

        cls = _parse(code)[0]

        assert cls.attribute_map == {"_store": "store"}

    def test_unassigned_param_maps_to_itself(self):
        code = textwrap.dedent('''
            class Worker:
                def __init__(self, queue):
                    pass
        ''')

        cls = _parse(code)[0]

        assert cls.attributes_for("queue") == ["queue"]

    def test_methods_exclude_constructor(self):
        cls = _parse(USER_SERVICE)[0]

        assert cls.method_names == ["create_user", "fetch", "helper", "_private", "__secret", "__len__"]

    def test_base_classes_and_docstring(self):
        cls = _parse(USER_SERVICE)[0]

        assert cls.base_classes == ("BaseService",)
        assert cls.docstring == "Manages users."

    def test_decorators_are_recorded(self):
        code = textwrap.dedent('''
            @dataclass(frozen=True)
            class Point:
                x: int
        ''')

        cls = _parse(code)[0]

        assert cls.decorators == ("dataclass(frozen=True)",)

    def test_get_method(self):
        cls = _parse(USER_SERVICE)[0]

        assert cls.get_method("fetch").is_async is True
        assert cls.get_method("missing") is None


# =============================================================================
# Method signatures
# =============================================================================

class TestMethodSignatures:
    """Tests for parameter parsing."""

    def test_typed_parameters_and_defaults(self):
        method = _parse(USER_SERVICE)[0].get_method("create_user")

        email, age = method.parameters
        assert email.name == "email"
        assert email.type_hint == "str"
        assert email.has_default is False
        assert age.default_value == "18"
        assert age.is_optional is True
        assert method.return_type == "User"

    def test_variadic_parameters(self):
        method = _parse(USER_SERVICE)[0].get_method("fetch")

        assert [p.name for p in method.parameters] == ["*ids", "**options"]
        assert [p.kind for p in method.parameters] == ["var_positional", "var_keyword"]
        assert method.parameters[0].type_hint == "int"
        assert method.return_type == "list[User]"

    def test_static_method_keeps_first_parameter(self):
        """Static methods have no self to strip; all parameter kinds are kept."""
        method = _parse(USER_SERVICE)[0].get_method("helper")

        assert method.is_static is True
        assert [(p.name, p.kind) for p in method.parameters] == [
            ("a", "positional_only"),
            ("b", "positional_or_keyword"),
            ("c", "keyword_only"),
        ]
        assert method.parameters[2].default_value == "1"

    def test_classmethod_strips_cls(self):
        code = textwrap.dedent('''
            class Factory:
                @classmethod
                def build(cls, name: str):
                    return cls()
        ''')

        method = _parse(code)[0].get_method("build")

        assert method.is_classmethod is True
        assert [p.name for p in method.parameters] == ["name"]

    def test_annotation_forms(self):
        """Optional, unions, generics and forward references become text."""
        code = textwrap.dedent('''
            class Forms:
                def method(self, a: Optional[int], b: int | None, c: dict[str, int],
                           d: "UserRepository", e: typing.List[str]):
                    pass
        ''')

        params = _parse(code)[0].get_method("method").parameters

        assert [p.type_hint for p in params] == [
            "Optional[int]",
            "int | None",
            "dict[str, int]",
            "UserRepository",
            "typing.List[str]",
        ]

    def test_optional_annotation_without_default(self):
        code = textwrap.dedent('''
            class Forms:
                def method(self, a: Optional[int], b: int):
                    pass
        ''')

        a, b = _parse(code)[0].get_method("method").parameters

        assert a.is_optional is True
        assert b.is_optional is False

    def test_visibility(self):
        cls = _parse(USER_SERVICE)[0]

        assert cls.get_method("create_user").visibility == "public"
        assert cls.get_method("_private").visibility == "protected"
        assert cls.get_method("__secret").visibility == "private"
        assert cls.get_method("__len__").visibility == "special"
        assert cls.get_method("__len__").is_public is False


# =============================================================================
# Body snapshot
# =============================================================================

class TestMethodBody:
    """Tests for the collected body nodes."""

    def test_descendants_by_kind(self):
        method = _parse(USER_SERVICE)[0].get_method("create_user")

        assert len(method.descendants(NodeKind.CONDITIONAL)) == 1
        assert len(method.descendants(NodeKind.RAISE)) == 1
        assert method.has(NodeKind.LOOP) is False

    def test_nested_function_bodies_are_not_entered(self):
        code = textwrap.dedent('''
            class Outer:
                def method(self):
                    def inner():
                        if True:
                            raise ValueError("inner")
                    return inner
        ''')

        method = _parse(code)[0].get_method("method")

        assert method.descendants(NodeKind.RAISE) == []
        assert method.descendants(NodeKind.CONDITIONAL) == []

    def test_nesting_level(self):
        code = textwrap.dedent('''
            class Nested:
                def method(self, items):
                    for item in items:
                        if item:
                            raise ValueError("bad")
        ''')

        method = _parse(code)[0].get_method("method")
        raise_node = method.descendants(NodeKind.RAISE)[0]

        assert method.nesting_level(raise_node) == 2

    def test_truncation_is_flagged(self):
        """Bodies larger than the node ceiling are cut short and marked."""
        code = textwrap.dedent('''
            class Big:
                def method(self):
                    a = 1
                    b = 2
                    c = 3
                    d = 4
        ''')

        method = _parse(code, max_nodes=3)[0].get_method("method")

        assert method.truncated is True
        assert len(method.nodes) == 3

    def test_small_body_not_truncated(self):
        method = _parse(USER_SERVICE)[0].get_method("helper")

        assert method.truncated is False


# =============================================================================
# Errors
# =============================================================================

class TestParserErrors:
    """Tests for syntax and lookup failures."""

    def test_syntax_error(self):
        with pytest.raises(SourceSyntaxError) as exc_info:
            parse_module("class Broken(:\n    pass")

        assert exc_info.value.line == 1

    def test_find_class_default_is_first(self):
        classes = _parse("class A:\n    pass\n\nclass B:\n    pass\n")

        assert find_class(classes).name == "A"
        assert find_class(classes, "B").name == "B"

    def test_find_class_unknown_lists_available(self):
        classes = _parse("class A:\n    pass\n\nclass B:\n    pass\n")

        with pytest.raises(ClassNotFoundError) as exc_info:
            find_class(classes, "C")

        assert exc_info.value.available == ["A", "B"]
        assert "Available classes: A, B" in str(exc_info.value)

    def test_find_class_without_classes(self):
        with pytest.raises(ClassNotFoundError, match="No class definition"):
            find_class(_parse("def function():\n    pass\n"))
