"""Compilation and invocation of fragment source code.

The rest of the pipeline only sees the :class:`Evaluator` protocol: text goes
in, a :class:`CompiledFragment` comes out, and invoking it against an
environment yields the raw return value. :class:`PythonEvaluator` runs code
with full privileges; a restricted evaluator can be slotted in behind the
same two methods.

Statement fragments run as module-level code against the shared namespace.
A fragment may also end with a top-level ``return``; such a fragment becomes
the body of a zero-argument function instead. Every name it binds at its top
level is declared ``global`` inside that function, and ``from module import *``
is rewritten into a call that copies the exported names into the namespace,
so assignments, imports, and definitions land where module-level code would
put them.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from enum import Enum
import importlib
import types
from typing import Any, Protocol, runtime_checkable

from .environment import ExecutionEnvironment
from .exceptions import CompileError


_FRAGMENT_FUNCTION = "__execsmith_fragment__"
_TEMPLATE = f"def {_FRAGMENT_FUNCTION}():\n    pass\n"
_STAR_IMPORT = "__execsmith_import_star__"


class CompileMode(Enum):
    """How fragment text is compiled."""

    EXPRESSION = "expression"
    STATEMENTS = "statements"


@dataclass(frozen=True, slots=True)
class CompiledFragment:
    """Compiled fragment code, ready to run against a namespace."""

    mode: CompileMode
    code: types.CodeType

    def __call__(self, namespace: dict[str, Any]) -> Any:
        if self.mode is CompileMode.EXPRESSION:
            return eval(self.code, namespace)  # noqa: S307 - trusted document code
        if self.code.co_name != _FRAGMENT_FUNCTION:
            exec(self.code, namespace)  # noqa: S102 - trusted document code
            return None
        namespace.setdefault(_STAR_IMPORT, import_star)
        function = types.FunctionType(self.code, namespace, _FRAGMENT_FUNCTION)
        return function()


@runtime_checkable
class Evaluator(Protocol):
    """Interface used by the executor to compile and run fragments."""

    def compile(self, text: str, mode: CompileMode) -> CompiledFragment: ...

    def invoke(self, compiled: CompiledFragment, environment: ExecutionEnvironment) -> Any: ...


class PythonEvaluator:
    """Evaluator running fragments as unrestricted Python code."""

    def __init__(self, filename: str = "<fragment>") -> None:
        self.filename = filename

    def compile(self, text: str, mode: CompileMode) -> CompiledFragment:
        try:
            if mode is CompileMode.EXPRESSION:
                code = compile(text, self.filename, "eval")
            else:
                code = self._compile_statements(text)
        except (SyntaxError, ValueError) as exc:
            raise CompileError(_format_syntax_error(exc)) from exc
        return CompiledFragment(mode, code)

    def invoke(self, compiled: CompiledFragment, environment: ExecutionEnvironment) -> Any:
        return compiled(environment.namespace)

    def _compile_statements(self, text: str) -> types.CodeType:
        module = ast.parse(text, self.filename, mode="exec")
        if not has_top_level_return(module.body):
            return compile(module, self.filename, "exec")
        names = sorted(collect_bound_names(module.body))
        body = _GlobalStatementRemover().visit_body(module.body)

        wrapper = ast.parse(_TEMPLATE, self.filename, mode="exec")
        function = wrapper.body[0]
        if not isinstance(function, ast.FunctionDef):  # pragma: no cover
            raise CompileError("Fragment body could not be compiled.")
        statements: list[ast.stmt] = []
        if names:
            statements.append(ast.Global(names=names))
        statements.extend(body)
        if not statements:
            statements.append(ast.Pass())
        function.body = statements
        ast.fix_missing_locations(wrapper)

        module_code = compile(wrapper, self.filename, "exec")
        for constant in module_code.co_consts:
            if isinstance(constant, types.CodeType) and constant.co_name == _FRAGMENT_FUNCTION:
                return constant
        raise CompileError("Fragment body could not be compiled.")  # pragma: no cover


def has_top_level_return(statements: list[ast.stmt]) -> bool:
    """Return True when a ``return`` appears outside any nested scope."""
    pending: list[ast.AST] = list(statements)
    while pending:
        node = pending.pop()
        if isinstance(node, ast.Return):
            return True
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)):
            continue
        pending.extend(ast.iter_child_nodes(node))
    return False


def import_star(module_name: str, level: int, namespace: dict[str, Any]) -> None:
    """Copy the public names of ``module_name`` into ``namespace``."""
    if level:
        raise ImportError("attempted relative import with no known parent package")
    module = importlib.import_module(module_name)
    names = getattr(module, "__all__", None)
    if names is None:
        names = [name for name in vars(module) if not name.startswith("_")]
    for name in names:
        namespace[name] = getattr(module, name)


def collect_bound_names(statements: list[ast.stmt]) -> set[str]:
    """Return the names bound at the top level of ``statements``."""
    collector = _BoundNameCollector()
    for statement in statements:
        collector.visit(statement)
    return collector.names


class _BoundNameCollector(ast.NodeVisitor):
    """Collect names bound in the current scope without entering nested scopes."""

    def __init__(self) -> None:
        self.names: set[str] = set()

    def visit_Name(self, node: ast.Name) -> None:  # noqa: N802 - ast API
        if isinstance(node.ctx, (ast.Store, ast.Del)):
            self.names.add(node.id)

    def visit_Global(self, node: ast.Global) -> None:  # noqa: N802
        self.names.update(node.names)

    def visit_FunctionDef(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:  # noqa: N802
        self.names.add(node.name)
        for decorator in node.decorator_list:
            self.visit(decorator)
        for default in (*node.args.defaults, *node.args.kw_defaults):
            if default is not None:
                self.visit(default)

    visit_AsyncFunctionDef = visit_FunctionDef  # noqa: N815

    def visit_ClassDef(self, node: ast.ClassDef) -> None:  # noqa: N802
        self.names.add(node.name)
        for expression in (*node.decorator_list, *node.bases, *node.keywords):
            self.visit(expression)

    def visit_Lambda(self, node: ast.Lambda) -> None:  # noqa: N802
        for default in (*node.args.defaults, *node.args.kw_defaults):
            if default is not None:
                self.visit(default)

    def visit_Import(self, node: ast.Import | ast.ImportFrom) -> None:  # noqa: N802
        for alias in node.names:
            if alias.name == "*":
                continue
            self.names.add(alias.asname or alias.name.split(".", 1)[0])

    visit_ImportFrom = visit_Import  # noqa: N815

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:  # noqa: N802
        if node.name:
            self.names.add(node.name)
        self.generic_visit(node)

    def visit_MatchAs(self, node: ast.MatchAs) -> None:  # noqa: N802
        if node.name:
            self.names.add(node.name)
        self.generic_visit(node)

    def visit_MatchStar(self, node: ast.MatchStar) -> None:  # noqa: N802
        if node.name:
            self.names.add(node.name)

    def visit_MatchMapping(self, node: ast.MatchMapping) -> None:  # noqa: N802
        if node.rest:
            self.names.add(node.rest)
        self.generic_visit(node)

    def _visit_comprehension(
        self, node: ast.ListComp | ast.SetComp | ast.DictComp | ast.GeneratorExp
    ) -> None:
        # Comprehension targets are local; only walrus targets leak out.
        for child in ast.walk(node):
            if isinstance(child, ast.NamedExpr) and isinstance(child.target, ast.Name):
                self.names.add(child.target.id)

    visit_ListComp = _visit_comprehension  # noqa: N815
    visit_SetComp = _visit_comprehension  # noqa: N815
    visit_DictComp = _visit_comprehension  # noqa: N815
    visit_GeneratorExp = _visit_comprehension  # noqa: N815


class _GlobalStatementRemover(ast.NodeTransformer):
    """Rewrite statements that are not allowed in the wrapper function body.

    Explicit ``global`` statements are already folded into the declaration,
    and annotated names cannot be declared global, so ``x: int = 1`` becomes
    ``x = 1`` and a bare ``x: int`` disappears. Star imports become calls to
    :func:`import_star`.
    """

    def visit_body(self, statements: list[ast.stmt]) -> list[ast.stmt]:
        return [self.visit(statement) for statement in statements]

    def visit_Global(self, node: ast.Global) -> ast.AST:  # noqa: N802
        return ast.copy_location(ast.Pass(), node)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> ast.AST:  # noqa: N802
        if not isinstance(node.target, ast.Name):
            return node
        if node.value is None:
            return ast.copy_location(ast.Pass(), node)
        target = ast.copy_location(ast.Name(id=node.target.id, ctx=ast.Store()), node.target)
        assignment = ast.Assign(targets=[target], value=node.value)
        return ast.copy_location(assignment, node)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> ast.AST:  # noqa: N802
        if node.names[0].name != "*":
            return node
        call = ast.Call(
            func=ast.Name(id=_STAR_IMPORT, ctx=ast.Load()),
            args=[
                ast.Constant(node.module or ""),
                ast.Constant(node.level),
                ast.Call(func=ast.Name(id="globals", ctx=ast.Load()), args=[], keywords=[]),
            ],
            keywords=[],
        )
        return ast.copy_location(ast.Expr(value=call), node)

    def visit_FunctionDef(self, node: ast.AST) -> ast.AST:  # noqa: N802
        return node

    visit_AsyncFunctionDef = visit_FunctionDef  # noqa: N815
    visit_ClassDef = visit_FunctionDef  # noqa: N815
    visit_Lambda = visit_FunctionDef  # noqa: N815


def _format_syntax_error(exc: SyntaxError | ValueError) -> str:
    if not isinstance(exc, SyntaxError):
        return str(exc)
    message = exc.msg or str(exc)
    if exc.lineno is None:
        return message
    location = f"line {exc.lineno}"
    if exc.offset:
        location += f", column {exc.offset}"
    snippet = (exc.text or "").rstrip("\n")
    detail = f"{message} ({location})"
    return f"{detail}\n    {snippet.strip()}" if snippet.strip() else detail


__all__ = [
    "CompileMode",
    "CompiledFragment",
    "Evaluator",
    "PythonEvaluator",
    "collect_bound_names",
    "has_top_level_return",
    "import_star",
]
