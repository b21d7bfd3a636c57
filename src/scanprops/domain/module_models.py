from __future__ import annotations

"""
Module Tree Domain Models.

Defines the declarative description of a host build module (ModuleSpec) and
the read-only arena (ModuleTree of ModuleNode records) that the property
computer walks. The arena is built once at the start of a computation so the
algorithm never depends on the identity or laziness of host objects.
"""

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
    from scanprops.core.processing.property_bag import PropertyBag

OverrideCallback = Callable[["PropertyBag"], None]

ROOT_PATH = ":"

# -----------------------------------------------------------------------------
# HOST MODULE DESCRIPTION
# -----------------------------------------------------------------------------

@dataclass
class JdkSettings:
    release: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    jdk_home: Optional[str] = None
    enable_preview: bool = False


@dataclass
class ModuleSpec:
    """
    Snapshot of one host build module and the metadata it declares.

    Attributes:
        path: Host module path (':' for the root, ':a:b' below it).
        name: Module name.
        project_dir: Absolute base directory of the module.
        group: Group/organisation identifier (may be empty).
        description: Optional human readable description.
        version: Declared version.
        build_dir: Build output directory (defaults to '<project_dir>/build').
        build_file: Build script of the module, if any.
        skip: Whether the module is excluded from analysis.
        language: 'java', 'groovy' or 'kotlin'.
        source_dirs: Declared main source directories.
        test_dirs: Declared test source directories.
        main_output_dirs: Compiled main class directories.
        test_output_dirs: Compiled test class directories.
        compile_classpath: Resolved main compile classpath entries.
        test_compile_classpath: Resolved test compile classpath entries.
        source_encoding: Compiler source encoding.
        jdk: JDK compiler settings, if known.
        test_results_dir: JUnit XML results directory.
        jacoco_xml_report: JaCoCo XML coverage report file.
        overrides: Deferred user override callbacks, in registration order.
        children: Child modules, in host enumeration order.
    """
    path: str
    name: str
    project_dir: str
    group: str = ""
    description: Optional[str] = None
    version: str = "unspecified"
    build_dir: Optional[str] = None
    build_file: Optional[str] = None
    skip: bool = False
    language: str = "java"

    source_dirs: List[str] = field(default_factory=list)
    test_dirs: List[str] = field(default_factory=list)
    main_output_dirs: List[str] = field(default_factory=list)
    test_output_dirs: List[str] = field(default_factory=list)
    compile_classpath: List[str] = field(default_factory=list)
    test_compile_classpath: List[str] = field(default_factory=list)

    source_encoding: Optional[str] = None
    jdk: Optional[JdkSettings] = None
    test_results_dir: Optional[str] = None
    jacoco_xml_report: Optional[str] = None

    overrides: List[OverrideCallback] = field(default_factory=list)
    children: List[ModuleSpec] = field(default_factory=list)

    @property
    def effective_build_dir(self) -> str:
        return self.build_dir or os.path.join(self.project_dir, "build")


# -----------------------------------------------------------------------------
# READ-ONLY ARENA
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ModuleNode:
    index: int
    path: str
    parent: Optional[int]
    children: Tuple[int, ...]
    skip: bool
    spec: ModuleSpec

    @property
    def is_root(self) -> bool:
        return self.parent is None


class ModuleTree:
    """
    Immutable arena of ModuleNode records linked by parent/child indices.

    Node 0 is always the host root. Children keep the host enumeration
    order; nothing here re-sorts modules.
    """

    def __init__(self, nodes: Tuple[ModuleNode, ...]):
        if not nodes:
            raise ValueError("A module tree needs at least a root module.")
        self._nodes = nodes
        self._by_path: Dict[str, int] = {n.path: n.index for n in nodes}

    @classmethod
    def snapshot(cls, root: ModuleSpec) -> ModuleTree:
        """
        Flatten a ModuleSpec hierarchy into an index-linked arena.

        Args:
            root: Host root module.

        Returns:
            ModuleTree: The frozen arena.
        """
        staged: List[Tuple[ModuleSpec, Optional[int], List[int]]] = []

        def _visit(spec: ModuleSpec, parent: Optional[int]) -> int:
            index = len(staged)
            child_ids: List[int] = []
            staged.append((spec, parent, child_ids))
            for child in spec.children:
                child_ids.append(_visit(child, index))
            return index

        _visit(root, None)

        nodes = tuple(
            ModuleNode(
                index=i,
                path=spec.path,
                parent=parent,
                children=tuple(child_ids),
                skip=spec.skip,
                spec=spec,
            )
            for i, (spec, parent, child_ids) in enumerate(staged)
        )
        return cls(nodes)

    @property
    def root(self) -> ModuleNode:
        return self._nodes[0]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ModuleNode]:
        return iter(self._nodes)

    def node(self, index: int) -> ModuleNode:
        return self._nodes[index]

    def find(self, path: str) -> Optional[ModuleNode]:
        index = self._by_path.get(path)
        return None if index is None else self._nodes[index]

    def children_of(self, node: ModuleNode) -> List[ModuleNode]:
        return [self._nodes[i] for i in node.children]

    def descendants_of(self, node: ModuleNode) -> List[ModuleNode]:
        """Return the node and every module below it, in pre-order."""
        out = [node]
        for child in self.children_of(node):
            out.extend(self.descendants_of(child))
        return out


# -----------------------------------------------------------------------------
# PATH HELPERS
# -----------------------------------------------------------------------------

def module_prefix(module_path: str) -> str:
    """
    Produce the property-key prefix used for a module in the flat map.

    The prefix chains the path of every ancestor below the root, so that
    ':a:b' becomes ':a.:a:b'. The root module has an empty prefix.
    """
    parts = [p for p in module_path.split(":") if p.strip()]
    chain = [":" + ":".join(parts[: i + 1]) for i in range(len(parts))]
    return ".".join(chain)
