"""
PythonAnalyzer: ast-based checks for Python sources.

Rules:
- LONG_FUNC   (warning) function spans at least `long_function_lines` lines
- MISSING_DOC (info)    function has no docstring; fix inserts a stub
- WEAK_NAME   (info)    vague local/parameter name; fix renames a local
                        everywhere in its function

All edit offsets are byte offsets into the file as read. ast column offsets
are UTF-8 byte offsets within a line, so they combine directly with line
start offsets.
"""

import ast
import keyword
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Union

from fixforge.logging_config import logger
from fixforge.schemas import Edit, Issue, Location, Severity
from .base import Analyzer, AnalyzeOptions, SuggestionProvider

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]
FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)

NESTED_SCOPES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)
COMPREHENSIONS = (ast.ListComp, ast.SetComp, ast.DictComp, ast.GeneratorExp)
IGNORED_NAMES = {"i", "j", "k", "_", "self", "cls"}
# match statements (3.10+) bind capture names as plain strings
MATCH_CAPTURES = tuple(
    getattr(ast, name) for name in ("MatchAs", "MatchStar", "MatchMapping") if hasattr(ast, name)
)


def line_start_offsets(content: bytes) -> List[int]:
    """Byte offset at which each line starts (index 0 is line 1)."""
    offsets = [0]
    for line in content.splitlines(keepends=True):
        offsets.append(offsets[-1] + len(line))
    return offsets


def string_bindings(node: ast.AST) -> Iterator[str]:
    """
    Names bound by syntax that ast records as plain strings rather than
    Name nodes: except-as, import aliases, def/class names, match captures.
    """
    for sub in ast.walk(node):
        if isinstance(sub, ast.ExceptHandler) and sub.name:
            yield sub.name
        elif isinstance(sub, ast.alias):
            yield sub.asname or sub.name.split(".")[0]
        elif isinstance(sub, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            yield sub.name
        elif MATCH_CAPTURES and isinstance(sub, MATCH_CAPTURES):
            captured = getattr(sub, "name", None) or getattr(sub, "rest", None)
            if captured:
                yield captured


def names_in(node: ast.AST) -> Set[str]:
    """Every identifier bound or referenced anywhere under `node`."""
    names = {n.id for n in ast.walk(node) if isinstance(n, ast.Name)}
    names.update(a.arg for a in ast.walk(node) if isinstance(a, ast.arg))
    names.update(string_bindings(node))
    return names


def literal_type_hint(value: Optional[ast.expr]) -> str:
    """Best-effort type name for an assigned value."""
    if value is None:
        return ""
    if isinstance(value, ast.Constant) and value.value is not None:
        return type(value.value).__name__
    if isinstance(value, (ast.List, ast.ListComp)):
        return "list"
    if isinstance(value, (ast.Dict, ast.DictComp)):
        return "dict"
    if isinstance(value, (ast.Set, ast.SetComp)):
        return "set"
    if isinstance(value, ast.Tuple):
        return "tuple"
    if isinstance(value, ast.Call) and isinstance(value.func, ast.Name):
        return value.func.id
    if isinstance(value, ast.Compare) or (isinstance(value, ast.UnaryOp) and isinstance(value.op, ast.Not)):
        return "bool"
    return ""


class _ScopeCollector(ast.NodeVisitor):
    """
    Walk a function body without entering nested scopes.

    Records local bindings (first binding wins) with a type hint, plus names
    declared global/nonlocal.
    """

    def __init__(self):
        self.bindings: Dict[str, ast.Name] = {}
        self.type_hints: Dict[str, str] = {}
        self.declared: Set[str] = set()

    def visit_FunctionDef(self, node):
        pass

    visit_AsyncFunctionDef = visit_FunctionDef
    visit_ClassDef = visit_FunctionDef
    visit_Lambda = visit_FunctionDef
    visit_ListComp = visit_FunctionDef
    visit_SetComp = visit_FunctionDef
    visit_DictComp = visit_FunctionDef
    visit_GeneratorExp = visit_FunctionDef

    def visit_Global(self, node):
        self.declared.update(node.names)

    visit_Nonlocal = visit_Global

    def visit_Assign(self, node):
        for target in node.targets:
            self._bind(target, literal_type_hint(node.value))
        self.visit(node.value)

    def visit_AnnAssign(self, node):
        self._bind(node.target, ast.unparse(node.annotation))
        if node.value is not None:
            self.visit(node.value)

    def visit_Name(self, node):
        if isinstance(node.ctx, ast.Store):
            self._bind(node, "")

    def _bind(self, target, type_hint):
        if isinstance(target, ast.Name):
            if target.id not in self.bindings:
                self.bindings[target.id] = target
                self.type_hints[target.id] = type_hint
        else:
            self.visit(target)


class PythonAnalyzer(Analyzer):
    """Analyze .py files with the standard library ast module."""

    name = "python"
    extensions = (".py", ".pyi")

    def analyze_file(
        self,
        path: Path,
        options: AnalyzeOptions,
        suggester: Optional[SuggestionProvider] = None,
    ) -> List[Issue]:
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            return []

        try:
            tree = ast.parse(content, filename=str(path))
        except (SyntaxError, ValueError) as e:
            logger.warning(f"Skipping {path}: cannot parse ({e})")
            return []

        file = str(path)
        line_starts = line_start_offsets(content)
        issues: List[Issue] = []

        # ast.walk is breadth-first, so an enclosing function is always
        # checked before the functions nested in it
        enclosing: Dict[ast.AST, Optional[ast.AST]] = {}
        taken: Dict[ast.AST, Set[str]] = {}

        for node in ast.walk(tree):
            for child in ast.iter_child_nodes(node):
                enclosing[child] = node if isinstance(node, FUNCTION_NODES) else enclosing.get(node)
            if not isinstance(node, FUNCTION_NODES):
                continue
            issues.extend(self._check_length(file, node, options))
            issues.extend(self._check_docstring(file, node, content, line_starts, options, suggester))
            if options.suggest_names and suggester is not None:
                # Names of enclosing functions, including their planned renames, stay off limits
                used = names_in(node) | taken.get(enclosing.get(node), set())
                issues.extend(self._check_names(file, node, line_starts, suggester, used))
                taken[node] = used

        issues.sort(key=lambda issue: (issue.location.line, issue.location.column, issue.id))
        logger.debug(f"Detected {len(issues)} issues in {file}")
        return issues

    def _check_length(self, file: str, node: FunctionNode, options: AnalyzeOptions) -> List[Issue]:
        lines = (node.end_lineno or node.lineno) - node.lineno + 1
        if lines < options.long_function_lines:
            return []
        return [Issue(
            id="LONG_FUNC",
            severity=Severity.WARNING,
            message=(
                f"Function '{node.name}' is {lines} lines "
                f"(threshold {options.long_function_lines})"
            ),
            location=Location(file=file, line=node.lineno, column=node.col_offset + 1),
        )]

    def _check_docstring(
        self,
        file: str,
        node: FunctionNode,
        content: bytes,
        line_starts: List[int],
        options: AnalyzeOptions,
        suggester: Optional[SuggestionProvider],
    ) -> List[Issue]:
        if ast.get_docstring(node, clean=False) is not None:
            return []

        edits = []
        if options.suggest_docs and suggester is not None:
            doc = suggester.doc_for_signature(self._signature(node))
            first = node.body[0]
            line_start = line_starts[first.lineno - 1]
            offset = line_start + first.col_offset
            indent = content[line_start:offset]
            # Only when the body starts on its own line ("def f(): return 1" is left alone)
            if doc and first.lineno > node.lineno and indent.strip() == b"":
                edits.append(Edit(
                    file=file,
                    offset=offset,
                    length=0,
                    replacement=self._docstring_literal(doc, indent.decode("utf-8")).encode("utf-8") + indent,
                    note="Insert docstring stub",
                ))

        return [Issue(
            id="MISSING_DOC",
            severity=Severity.INFO,
            message=f"Missing docstring for function '{node.name}'",
            location=Location(file=file, line=node.lineno, column=node.col_offset + 1),
            edits=tuple(edits),
        )]

    def _check_names(
        self,
        file: str,
        node: FunctionNode,
        line_starts: List[int],
        suggester: SuggestionProvider,
        used: Set[str],
    ) -> List[Issue]:
        """
        Report weak parameter and local names. `used` holds every name the
        function can see and gains each accepted rename target.
        """
        issues = []
        args = node.args
        all_args = args.posonlyargs + args.args + args.kwonlyargs
        all_args += [a for a in (args.vararg, args.kwarg) if a is not None]

        # Parameters: report only, renaming would change the call signature
        for arg in all_args:
            if arg.arg in IGNORED_NAMES:
                continue
            type_hint = ast.unparse(arg.annotation) if arg.annotation is not None else ""
            suggestion = suggester.suggest_identifier(arg.arg, type_hint, "")
            if not suggestion:
                continue
            issues.append(Issue(
                id="WEAK_NAME",
                severity=Severity.INFO,
                message=(
                    f"Parameter '{arg.arg}' could be clearer, e.g. '{suggestion}' "
                    f"(not renamed automatically: it is part of the call signature)"
                ),
                location=Location(file=file, line=arg.lineno, column=arg.col_offset + 1),
            ))

        collector = _ScopeCollector()
        for stmt in node.body:
            collector.visit(stmt)

        param_names = {a.arg for a in all_args}
        for name, first in collector.bindings.items():
            if name in IGNORED_NAMES or name in param_names or name in collector.declared:
                continue
            suggestion = suggester.suggest_identifier(name, collector.type_hints.get(name, ""), "")
            if not suggestion:
                continue

            edits = []
            if self._can_rename(node, name, suggestion, used):
                for occurrence in self._occurrences(node, name):
                    edits.append(Edit(
                        file=file,
                        offset=line_starts[occurrence.lineno - 1] + occurrence.col_offset,
                        length=len(name.encode("utf-8")),
                        replacement=suggestion.encode("utf-8"),
                        note=f"Rename '{name}' to '{suggestion}'",
                    ))
                used.add(suggestion)

            issues.append(Issue(
                id="WEAK_NAME",
                severity=Severity.INFO,
                message=f"Variable '{name}' could be clearer, e.g. '{suggestion}'",
                location=Location(file=file, line=first.lineno, column=first.col_offset + 1),
                edits=tuple(edits),
            ))

        return issues

    def _can_rename(self, node: FunctionNode, name: str, suggestion: str, used: Set[str]) -> bool:
        """A rename is offered only when it is unambiguous within the function."""
        if not suggestion.isidentifier() or keyword.iskeyword(suggestion) or suggestion in used:
            return False

        # Bound without a Name node (except-as, import, def, match): not renamable
        if any(name in string_bindings(stmt) for stmt in node.body):
            return False

        for inner in (n for stmt in node.body for n in ast.walk(stmt)):
            # Rebound in a nested scope: a blind rename could change meaning
            if isinstance(inner, NESTED_SCOPES + COMPREHENSIONS):
                for sub in ast.walk(inner):
                    if isinstance(sub, ast.arg) and sub.arg == name:
                        return False
                    if isinstance(sub, ast.Name) and sub.id == name and not isinstance(sub.ctx, ast.Load):
                        return False
                    if isinstance(sub, (ast.Global, ast.Nonlocal)) and name in sub.names:
                        return False
            # f-string expression positions are unreliable on older interpreters
            if isinstance(inner, ast.JoinedStr):
                if any(isinstance(sub, ast.Name) and sub.id == name for sub in ast.walk(inner)):
                    return False
        return True

    @staticmethod
    def _occurrences(node: FunctionNode, name: str) -> List[ast.Name]:
        # Body only: defaults, decorators and annotations resolve in the enclosing scope
        found = [
            n for stmt in node.body for n in ast.walk(stmt)
            if isinstance(n, ast.Name) and n.id == name
        ]
        return sorted(found, key=lambda n: (n.lineno, n.col_offset))

    @staticmethod
    def _signature(node: FunctionNode) -> str:
        params = [a.arg for a in node.args.posonlyargs + node.args.args]
        if node.args.vararg is not None:
            params.append("*" + node.args.vararg.arg)
        params.extend(a.arg for a in node.args.kwonlyargs)
        if node.args.kwarg is not None:
            params.append("**" + node.args.kwarg.arg)
        signature = f"{node.name}({', '.join(params)})"
        if node.returns is not None:
            signature += f" -> {ast.unparse(node.returns)}"
        return signature

    @staticmethod
    def _docstring_literal(doc: str, indent: str) -> str:
        text = doc.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
        if text.endswith('"'):
            text += " "
        lines = text.splitlines() or [""]
        if len(lines) == 1:
            return f'"""{lines[0]}"""\n'
        body = "\n".join((indent + line) if line else "" for line in lines[1:])
        return f'"""{lines[0]}\n{body}\n{indent}"""\n'
