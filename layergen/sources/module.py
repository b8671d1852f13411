"""
Append-only builders for generated Python modules.

Generators add imports and methods; nothing added is ever reordered or
dropped. `render` joins the collected parts into module text without any
further formatting.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from layergen.ir.models import join_package, to_snake_case

TAB = "    "


@dataclass
class Method:
    """A generated module level function."""

    name: str
    return_type: Optional[str] = None
    docstring: Optional[str] = None
    parameters: List[Tuple[str, str]] = field(default_factory=list)
    lines: List[str] = field(default_factory=list)

    def add_parameter(self, type_decl: Optional[str], name: str) -> None:
        self.parameters.append((type_decl or "", name))

    def add_line(self, text: str, *args: object) -> None:
        self.lines.append(text % args if args else text)

    def add_empty_line(self) -> None:
        self.lines.append("")

    def signature(self) -> str:
        parameters = ", ".join(f"{name}: {type_decl}" if type_decl else name for type_decl, name in self.parameters)
        returns = f" -> {self.return_type}" if self.return_type else ""
        return f"def {self.name}({parameters}){returns}:"

    def render(self) -> List[str]:
        rendered = [self.signature()]
        if self.docstring:
            rendered.append(f'{TAB}"""{self.docstring}"""')
        body = self.lines if any(line.strip() for line in self.lines) else ["pass"]
        rendered.extend(f"{TAB}{line}" if line else "" for line in body)
        return rendered


@dataclass
class SourceModule:
    """
    A generated module named after the class it stands for.

    `name` is the class style name (e.g. ``ContentTransportMapper``); the file
    is its snake case form inside `package`.
    """

    package: str
    name: str
    description: Optional[str] = None
    imports: Set[str] = field(default_factory=set)
    methods: List[Method] = field(default_factory=list)

    @property
    def module_name(self) -> str:
        return to_snake_case(self.name)

    @property
    def qualified_name(self) -> str:
        return join_package(self.package, self.module_name)

    @property
    def relative_path(self) -> Path:
        segments = self.package.split(".") if self.package else []
        return Path(*segments, f"{self.module_name}.py")

    def add_import(self, qualified_name: str) -> None:
        """Register an import given as ``package.module.Name``."""

        self.imports.add(qualified_name)

    def add_method(self, method: Method) -> None:
        self.methods.append(method)

    def method_names(self) -> List[str]:
        return [method.name for method in self.methods]

    def render(self) -> str:
        lines: List[str] = []
        if self.description:
            lines.append(f'"""{self.description}"""')

        import_lines = _render_imports(self.imports, own_module=self.qualified_name)
        if import_lines:
            if lines:
                lines.append("")
            lines.extend(import_lines)

        for method in self.methods:
            if lines:
                lines.extend(["", ""])
            lines.extend(method.render())

        return "\n".join(lines) + "\n"


def _render_imports(imports: Set[str], own_module: str) -> List[str]:
    by_module: Dict[str, Set[str]] = defaultdict(set)
    plain: Set[str] = set()
    for qualified_name in imports:
        module, _, name = qualified_name.rpartition(".")
        if not module:
            plain.add(name)
        elif module != own_module:
            by_module[module].add(name)

    rendered = [f"import {name}" for name in sorted(plain)]
    rendered.extend(
        f"from {module} import {', '.join(sorted(names))}" for module, names in sorted(by_module.items())
    )
    return rendered
