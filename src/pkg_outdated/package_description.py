"""Reader and finalizer for ``.cabal`` package descriptions.

Purpose
-------
Turn the package description of the working directory into a flat list of
dependencies. Reading yields a generic description that still contains
flags and conditionals; finalizing resolves them for one compiler and one
platform.

Contents
--------
* :func:`find_package_description` - locate the single ``*.cabal`` file
* :func:`parse_package_description` / :func:`read_package_description`
* :func:`finalize` - resolve flags, conditionals and components
* :func:`always_true`, :func:`default_flags`, :func:`libraries_and_executables`
  - ready-made policies for :func:`finalize`

Supported Syntax
----------------
Top-level ``name`` and ``version`` fields; ``flag``, ``common``,
``library``, ``executable``, ``test-suite`` and ``benchmark`` stanzas with
``build-depends``, ``buildable`` and ``import`` fields; nested
``if``/``elif``/``else`` blocks over ``true``, ``false``, ``flag()``, ``os()``,
``arch()`` and ``impl()`` combined with ``!``, ``&&``, ``||`` and
parentheses. Other stanzas and fields are skipped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import NoReturn

from .errors import DescriptionError, FinalizationError, VersionParseError
from .models import CompilerId, Dependency, Platform
from .version import Version
from .version_range import AnyVersion, VersionRange, parse_version_range

logger = logging.getLogger(__name__)

_RE_FIELD = re.compile(r"^([A-Za-z][A-Za-z0-9_-]*)\s*:(.*)$", re.DOTALL)
_RE_CONDITION_TOKEN = re.compile(
    r"\s*(?:"
    r"(?P<func>[A-Za-z][A-Za-z0-9_-]*)\s*\((?P<arg>[^()]*)\)"
    r"|(?P<op>&&|\|\||!|\(|\))"
    r"|(?P<lit>[Tt]rue|[Ff]alse)"
    r")"
)
_RE_IMPL = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_-]*)\s*(.*)$", re.DOTALL)

_OS_ALIASES = {"mingw32": "windows", "win32": "windows", "cygwin32": "windows", "darwin": "osx"}
_ARCH_ALIASES = {"amd64": "x86_64", "x64": "x86_64", "arm64": "aarch64", "x86": "i386"}
_CONDITION_FUNCTIONS = frozenset({"flag", "os", "arch", "impl"})
_SKIPPED_STANZAS = frozenset({"source-repository", "custom-setup", "foreign-library"})


class ComponentKind(str, Enum):
    """Kinds of buildable components a package description declares."""

    LIBRARY = "library"
    EXECUTABLE = "executable"
    TEST_SUITE = "test-suite"
    BENCHMARK = "benchmark"


# ════════════════════════════════════════════════════════════════════════════
# Conditions
# ════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class _Environment:
    flags: dict[str, bool]
    compiler: CompilerId
    platform: Platform


@dataclass(frozen=True, slots=True)
class BoolLiteral:
    value: bool

    def evaluate(self, env: _Environment) -> bool:
        return self.value


@dataclass(frozen=True, slots=True)
class FlagTest:
    name: str

    def evaluate(self, env: _Environment) -> bool:
        try:
            return env.flags[self.name]
        except KeyError:
            msg = f"condition refers to undeclared flag {self.name!r}"
            raise FinalizationError(msg) from None


@dataclass(frozen=True, slots=True)
class OsTest:
    name: str

    def evaluate(self, env: _Environment) -> bool:
        return _OS_ALIASES.get(self.name, self.name) == _OS_ALIASES.get(env.platform.os, env.platform.os)


@dataclass(frozen=True, slots=True)
class ArchTest:
    name: str

    def evaluate(self, env: _Environment) -> bool:
        return _ARCH_ALIASES.get(self.name, self.name) == _ARCH_ALIASES.get(env.platform.arch, env.platform.arch)


@dataclass(frozen=True, slots=True)
class ImplTest:
    flavour: str
    version_range: VersionRange = field(default_factory=AnyVersion)

    def evaluate(self, env: _Environment) -> bool:
        return env.compiler.flavour == self.flavour and self.version_range.contains(env.compiler.version)


@dataclass(frozen=True, slots=True)
class Not:
    inner: Condition

    def evaluate(self, env: _Environment) -> bool:
        return not self.inner.evaluate(env)


@dataclass(frozen=True, slots=True)
class And:
    left: Condition
    right: Condition

    def evaluate(self, env: _Environment) -> bool:
        return self.left.evaluate(env) and self.right.evaluate(env)


@dataclass(frozen=True, slots=True)
class Or:
    left: Condition
    right: Condition

    def evaluate(self, env: _Environment) -> bool:
        return self.left.evaluate(env) or self.right.evaluate(env)


Condition = BoolLiteral | FlagTest | OsTest | ArchTest | ImplTest | Not | And | Or


def _condition_atom(func: str, arg: str) -> Condition:
    func = func.lower()
    arg = arg.strip()
    if func not in _CONDITION_FUNCTIONS:
        msg = f"unknown condition function {func!r}"
        raise DescriptionError(msg)
    if func == "flag":
        return FlagTest(arg.lower())
    if func == "os":
        return OsTest(arg.lower())
    if func == "arch":
        return ArchTest(arg.lower())
    match = _RE_IMPL.match(arg)
    if not match:
        msg = f"invalid impl() condition: {arg!r}"
        raise DescriptionError(msg)
    try:
        return ImplTest(match.group(1).lower(), parse_version_range(match.group(2)))
    except VersionParseError as exc:
        msg = f"invalid impl() condition {arg!r}: {exc}"
        raise DescriptionError(msg) from exc


class _ConditionParser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens: list[tuple[str, str, str]] = []
        pos = 0
        text = text.rstrip()
        while pos < len(text):
            match = _RE_CONDITION_TOKEN.match(text, pos)
            if not match:
                self._fail(f"unexpected input at position {pos}")
            kind = match.lastgroup or "op"
            if kind == "arg":
                kind = "func"
            self.tokens.append((kind, match.group(kind), match.group("arg") or ""))
            pos = match.end()
        self.pos = 0

    def _fail(self, reason: str) -> NoReturn:
        msg = f"Invalid condition {self.text!r}: {reason}"
        raise DescriptionError(msg)

    def _peek(self) -> str | None:
        return self.tokens[self.pos][1] if self.pos < len(self.tokens) else None

    def parse(self) -> Condition:
        if not self.tokens:
            self._fail("empty condition")
        result = self._or()
        if self.pos != len(self.tokens):
            self._fail(f"unexpected {self._peek()!r}")
        return result

    def _or(self) -> Condition:
        result = self._and()
        while self._peek() == "||":
            self.pos += 1
            result = Or(result, self._and())
        return result

    def _and(self) -> Condition:
        result = self._unary()
        while self._peek() == "&&":
            self.pos += 1
            result = And(result, self._unary())
        return result

    def _unary(self) -> Condition:
        if self.pos >= len(self.tokens):
            self._fail("unexpected end of condition")
        kind, value, arg = self.tokens[self.pos]
        self.pos += 1
        if kind == "func":
            return _condition_atom(value, arg)
        if kind == "lit":
            return BoolLiteral(value.lower() == "true")
        if value == "!":
            return Not(self._unary())
        if value == "(":
            inner = self._or()
            if self._peek() != ")":
                self._fail("missing ')'")
            self.pos += 1
            return inner
        self._fail(f"unexpected {value!r}")


def parse_condition(text: str) -> Condition:
    """Parse an ``if`` condition such as ``flag(dev) && !os(windows)``.

    Raises:
        DescriptionError: If the condition is malformed.
    """
    return _ConditionParser(text).parse()


# ════════════════════════════════════════════════════════════════════════════
# Generic description
# ════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class FlagDecl:
    """A ``flag`` stanza."""

    name: str
    default: bool = True
    manual: bool = False
    description: str = ""


@dataclass(frozen=True, slots=True)
class CondBranch:
    """An ``if`` block with its optional ``else``."""

    condition: Condition
    then: CondTree
    otherwise: CondTree | None = None


@dataclass(frozen=True, slots=True)
class CondTree:
    """Fields of a stanza body plus its conditional blocks."""

    build_depends: tuple[Dependency, ...] = ()
    buildable: bool = True
    imports: tuple[str, ...] = ()
    branches: tuple[CondBranch, ...] = ()


@dataclass(frozen=True, slots=True)
class Component:
    """A buildable component before conditionals are resolved."""

    kind: ComponentKind
    name: str
    tree: CondTree


@dataclass(frozen=True, slots=True)
class GenericPackageDescription:
    """A parsed package description, not yet finalized."""

    name: str
    version: Version | None
    flags: tuple[FlagDecl, ...] = ()
    components: tuple[Component, ...] = ()
    common_stanzas: dict[str, CondTree] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ResolvedComponent:
    kind: ComponentKind
    name: str
    build_depends: tuple[Dependency, ...]


@dataclass(frozen=True, slots=True)
class PackageDescription:
    """A finalized package description."""

    name: str
    version: Version | None
    components: tuple[ResolvedComponent, ...]

    @property
    def build_depends(self) -> list[Dependency]:
        """Dependencies of every included component, in declaration order."""
        return [dep for component in self.components for dep in component.build_depends]


# ════════════════════════════════════════════════════════════════════════════
# Layout parsing
# ════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class _Line:
    indent: int
    text: str
    number: int
    children: list[_Line] = field(default_factory=list)

    def flattened(self) -> list[str]:
        return [text for child in self.children for text in (child.text, *child.flattened())]


def _layout(text: str) -> list[_Line]:
    """Group lines into a tree by indentation, skipping blanks and comments."""
    root = _Line(-1, "", 0)
    stack = [root]
    for number, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith("--"):
            continue
        indent = len(raw.expandtabs(8)) - len(raw.expandtabs(8).lstrip())
        while stack[-1].indent >= indent:
            stack.pop()
        line = _Line(indent, stripped, number)
        stack[-1].children.append(line)
        stack.append(line)
    return root.children


def _field_value(line: _Line, first: str) -> str:
    return " ".join(part for part in (first.strip(), *line.flattened()) if part)


def _parse_bool(value: str, line: _Line) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    msg = f"line {line.number}: expected True or False, got {value.strip()!r}"
    raise DescriptionError(msg)


def _parse_build_depends(value: str, line: _Line) -> list[Dependency]:
    deps: list[Dependency] = []
    for item in value.split(","):
        if not item.strip():
            continue
        try:
            deps.append(Dependency.from_string(item))
        except VersionParseError as exc:
            msg = f"line {line.number}: {exc}"
            raise DescriptionError(msg) from exc
    return deps


def _extend_chain(branch: CondBranch, tree: CondTree) -> CondBranch:
    """Hang ``tree`` on the last open ``else`` slot of an ``if``/``elif`` chain."""
    if branch.otherwise is None:
        return CondBranch(branch.condition, branch.then, tree)
    inner = _extend_chain(branch.otherwise.branches[-1], tree)
    return CondBranch(branch.condition, branch.then, CondTree(branches=(inner,)))


def _parse_tree(lines: list[_Line]) -> CondTree:
    build_depends: list[Dependency] = []
    imports: list[str] = []
    branches: list[CondBranch] = []
    buildable = True
    chain_open = False

    for line in lines:
        keyword, _, rest = line.text.partition(" ")
        keyword = keyword.lower()
        if keyword == "if":
            branches.append(CondBranch(parse_condition(rest), _parse_tree(line.children)))
            chain_open = True
            continue
        if keyword in ("elif", "else"):
            if not chain_open:
                msg = f"line {line.number}: '{keyword}' without matching 'if'"
                raise DescriptionError(msg)
            tree = _parse_tree(line.children)
            if keyword == "elif":
                # elif nests as an if inside the previous else
                tree = CondTree(branches=(CondBranch(parse_condition(rest), tree),))
            branches[-1] = _extend_chain(branches[-1], tree)
            chain_open = keyword == "elif"
            continue
        match = _RE_FIELD.match(line.text)
        if not match:
            logger.debug("Skipping unsupported line %d: %s", line.number, line.text)
            continue
        name, value = match.group(1).lower(), _field_value(line, match.group(2))
        if name == "build-depends":
            build_depends.extend(_parse_build_depends(value, line))
        elif name == "buildable":
            buildable = _parse_bool(value, line)
        elif name == "import":
            imports.extend(i.strip() for i in value.split(",") if i.strip())

    return CondTree(tuple(build_depends), buildable, tuple(imports), tuple(branches))


def _parse_flag(name: str, line: _Line) -> FlagDecl:
    default, manual, description = True, False, ""
    for child in line.children:
        match = _RE_FIELD.match(child.text)
        if not match:
            continue
        key, value = match.group(1).lower(), _field_value(child, match.group(2))
        if key == "default":
            default = _parse_bool(value, child)
        elif key == "manual":
            manual = _parse_bool(value, child)
        elif key == "description":
            description = value
    return FlagDecl(name.lower(), default, manual, description)


def parse_package_description(text: str) -> GenericPackageDescription:
    """Parse the text of a ``.cabal`` file.

    Raises:
        DescriptionError: If the text is malformed.
    """
    name = ""
    version: Version | None = None
    flags: list[FlagDecl] = []
    components: list[Component] = []
    commons: dict[str, CondTree] = {}

    for line in _layout(text):
        match = _RE_FIELD.match(line.text)
        if match:
            key, value = match.group(1).lower(), _field_value(line, match.group(2))
            if key == "name":
                name = value
            elif key == "version":
                try:
                    version = Version.parse(value)
                except VersionParseError as exc:
                    msg = f"line {line.number}: {exc}"
                    raise DescriptionError(msg) from exc
            continue

        stanza, _, argument = line.text.partition(" ")
        stanza, argument = stanza.lower(), argument.strip()
        if stanza == "flag":
            flags.append(_parse_flag(argument, line))
        elif stanza == "common":
            commons[argument] = _parse_tree(line.children)
        elif stanza in {kind.value for kind in ComponentKind}:
            kind = ComponentKind(stanza)
            component_name = argument or name
            components.append(Component(kind, component_name, _parse_tree(line.children)))
        elif stanza in _SKIPPED_STANZAS:
            continue
        else:
            msg = f"line {line.number}: unknown stanza {line.text!r}"
            raise DescriptionError(msg)

    if not name:
        msg = "package description has no 'name' field"
        raise DescriptionError(msg)
    return GenericPackageDescription(name, version, tuple(flags), tuple(components), commons)


def find_package_description(working_dir: Path) -> Path:
    """Return the single ``*.cabal`` file in ``working_dir``.

    Raises:
        DescriptionError: If there is no such file, or more than one.
    """
    candidates = sorted(p for p in working_dir.glob("*.cabal") if p.is_file())
    if not candidates:
        msg = f"No package description (*.cabal) found in {working_dir}"
        raise DescriptionError(msg)
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        msg = f"Multiple package descriptions found in {working_dir}: {names}"
        raise DescriptionError(msg)
    return candidates[0]


def read_package_description(path: Path) -> GenericPackageDescription:
    """Read and parse a ``.cabal`` file.

    Raises:
        DescriptionError: If the file is unreadable or malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read package description {path}: {exc.strerror or exc}"
        raise DescriptionError(msg) from exc
    try:
        return parse_package_description(text)
    except DescriptionError as exc:
        msg = f"{path.name}: {exc}"
        raise DescriptionError(msg) from exc


# ════════════════════════════════════════════════════════════════════════════
# Finalization
# ════════════════════════════════════════════════════════════════════════════

ComponentPredicate = Callable[[Component], bool]
FlagPredicate = Callable[[FlagDecl], bool]


def always_true(_: object) -> bool:
    """Policy that includes every component and turns every flag on."""
    return True


def default_flags(flag: FlagDecl) -> bool:
    """Flag policy that keeps each flag at its declared default."""
    return flag.default


def libraries_and_executables(component: Component) -> bool:
    """Component policy that leaves test suites and benchmarks out."""
    return component.kind in (ComponentKind.LIBRARY, ComponentKind.EXECUTABLE)


def _resolve(
    tree: CondTree,
    env: _Environment,
    commons: dict[str, CondTree],
    seen: tuple[str, ...] = (),
) -> tuple[list[Dependency], bool]:
    deps: list[Dependency] = []
    buildable = tree.buildable
    for name in tree.imports:
        if name not in commons:
            msg = f"import of unknown common stanza {name!r}"
            raise FinalizationError(msg)
        if name in seen:
            msg = f"cyclic import of common stanza {name!r}"
            raise FinalizationError(msg)
        imported, imported_buildable = _resolve(commons[name], env, commons, (*seen, name))
        deps.extend(imported)
        buildable = buildable and imported_buildable
    deps.extend(tree.build_depends)
    for branch in tree.branches:
        chosen = branch.then if branch.condition.evaluate(env) else branch.otherwise
        if chosen is None:
            continue
        branch_deps, branch_buildable = _resolve(chosen, env, commons, seen)
        deps.extend(branch_deps)
        buildable = buildable and branch_buildable
    return deps, buildable


def finalize(
    description: GenericPackageDescription,
    compiler: CompilerId,
    platform: Platform,
    component_predicate: ComponentPredicate = always_true,
    flag_predicate: FlagPredicate = always_true,
) -> PackageDescription:
    """Resolve flags and conditionals for one compiler and platform.

    Args:
        description: The generic description to finalize.
        compiler: Compiler identity that ``impl()`` conditions test.
        platform: Platform that ``os()`` and ``arch()`` conditions test.
        component_predicate: Decides which components are considered.
        flag_predicate: Decides the value assigned to each declared flag.

    Returns:
        The finalized description.

    Raises:
        FinalizationError: If a condition refers to an undeclared flag, an
            unknown common stanza is imported, or no buildable component
            remains.
    """
    env = _Environment(
        flags={flag.name: bool(flag_predicate(flag)) for flag in description.flags},
        compiler=compiler,
        platform=platform,
    )
    logger.debug("Flag assignment: %s", env.flags)

    resolved: list[ResolvedComponent] = []
    for component in description.components:
        if not component_predicate(component):
            logger.debug("Component %s %s not requested", component.kind.value, component.name)
            continue
        deps, buildable = _resolve(component.tree, env, description.common_stanzas)
        if not buildable:
            logger.debug("Component %s %s is not buildable", component.kind.value, component.name)
            continue
        resolved.append(ResolvedComponent(component.kind, component.name, tuple(deps)))

    if not resolved:
        msg = f"package {description.name!r} has no buildable components for {compiler} on {platform}"
        raise FinalizationError(msg)
    return PackageDescription(description.name, description.version, tuple(resolved))


__all__ = [
    "CondBranch",
    "CondTree",
    "Component",
    "ComponentKind",
    "ComponentPredicate",
    "FlagDecl",
    "FlagPredicate",
    "GenericPackageDescription",
    "PackageDescription",
    "ResolvedComponent",
    "always_true",
    "default_flags",
    "find_package_description",
    "finalize",
    "libraries_and_executables",
    "parse_condition",
    "parse_package_description",
    "read_package_description",
]
