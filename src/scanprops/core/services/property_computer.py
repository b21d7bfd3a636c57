from __future__ import annotations

"""
Hierarchical Property Computer.

Walks the module tree in pre-order and builds the flat analysis property
map. For every non-skipped module it gathers defaults, runs platform
extractors, applies user overrides and (for the target module only) the
environment, then flattens the result under the module's key prefix.

The computation only reads the module snapshot, the injected environment
and the filesystem; calling it twice on the same inputs yields the same map.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set

from scanprops.core.processing.paths import (
    contains_junit_report,
    existing_paths,
    find_project_base_dir,
)
from scanprops.core.processing.property_bag import PropertyBag, convert_value
from scanprops.core.services.environment import EnvironmentSnapshot
from scanprops.domain import constants as props
from scanprops.domain.errors import MalformedOverrideError, MissingCollaboratorDataError
from scanprops.domain.module_models import ModuleNode, ModuleSpec, ModuleTree, OverrideCallback
from scanprops.domain.pipeline_models import ComputedProperties
from scanprops.domain.property_key import prefixed_key

logger = logging.getLogger(__name__)

Extractor = Callable[[ModuleSpec, PropertyBag], None]

KOTLIN_SETTINGS_FILE = "settings.gradle.kts"


class PropertyComputer:
    """
    Computes the property map of a module tree.

    Args:
        tree: Snapshot of the host module tree.
        overrides: Extra override callbacks keyed by module path. They run
                   after the callbacks declared on the module itself.
        environment: Environment and system properties for the target.
        extractors: Platform-specific default providers, run after the
                    built-in defaults and before user overrides.
    """

    def __init__(
            self,
            tree: ModuleTree,
            overrides: Optional[Mapping[str, Sequence[OverrideCallback]]] = None,
            environment: Optional[EnvironmentSnapshot] = None,
            extractors: Sequence[Extractor] = (),
    ):
        self.tree = tree
        self.overrides: Dict[str, List[OverrideCallback]] = {
            path: list(callbacks) for path, callbacks in (overrides or {}).items()
        }
        self.environment = environment or EnvironmentSnapshot.empty()
        self.extractors = list(extractors)

    # ==========================================================================
    # PUBLIC API
    # ==========================================================================

    def compute(self, target_path: Optional[str] = None) -> ComputedProperties:
        """
        Compute the flat property map for the target module and its descendants.

        Args:
            target_path: Path of the analysis target. Defaults to the root.

        Returns:
            ComputedProperties: The ordered map and its user-defined keys.

        Raises:
            ValueError: If the target path is not part of the tree.
            MalformedOverrideError: If a user override callback fails.
        """
        target = self.target_node(target_path)
        properties: Dict[str, str] = {}
        user_defined: Set[str] = set()

        self._compute_module(target, target, "", properties, user_defined)

        if props.PROJECT_BASE_DIR in properties:
            properties[props.PROJECT_BASE_DIR] = find_project_base_dir(properties)

        logger.debug(f"Computed {len(properties)} properties for {target.path}")
        return ComputedProperties(properties=properties, user_defined_keys=frozenset(user_defined))

    def module_prefixes(self, target_path: Optional[str] = None) -> Dict[str, str]:
        """Map every processed module path to its key prefix ('' for the target)."""
        out: Dict[str, str] = {}

        def _walk(node: ModuleNode, prefix: str) -> None:
            if node.skip:
                return
            out[node.path] = prefix
            for child in self.tree.children_of(node):
                _walk(child, f"{prefix}.{child.path}" if prefix else child.path)

        _walk(self.target_node(target_path), "")
        return out

    # ==========================================================================
    # RECURSION
    # ==========================================================================

    def target_node(self, target_path: Optional[str]) -> ModuleNode:
        if target_path is None:
            return self.tree.root
        node = self.tree.find(target_path)
        if node is None:
            raise ValueError(f"Unknown target module: {target_path}")
        return node

    def _compute_module(
            self,
            node: ModuleNode,
            target: ModuleNode,
            prefix: str,
            properties: Dict[str, str],
            user_defined: Set[str],
    ) -> None:
        if node.skip:
            return

        is_target = node.index == target.index
        bag = PropertyBag()

        self._add_defaults(node, bag, is_target)
        self._run_extractors(node, bag)
        self._apply_overrides(node, bag)

        if is_target:
            for key, value in self.environment.merged().items():
                bag.put(key, value)
                bag.mark_user_defined(key)

        bag.put_if_absent(props.PROJECT_SOURCE_DIRS, "")

        if is_target:
            bag.put_if_absent(props.PROJECT_KEY, self._compute_project_key(target))
        else:
            project_key = properties.get(props.PROJECT_KEY, "")
            bag.put_if_absent(props.MODULE_KEY, f"{project_key}{node.path}")

        for key, raw in bag.items():
            value = convert_value(raw)
            if value is not None:
                properties[prefixed_key(key, prefix)] = value
        for key in bag.user_defined_keys:
            user_defined.add(prefixed_key(key, prefix))

        children = self.tree.children_of(node)
        skipped = [c.path for c in children if c.skip]
        if skipped:
            logger.debug(f"Skipping collecting properties on: {skipped}")

        module_ids: List[str] = []
        for child in children:
            if child.skip:
                continue
            child_prefix = f"{prefix}.{child.path}" if prefix else child.path
            self._compute_module(child, target, child_prefix, properties, user_defined)
            module_ids.append(child.path)

        if module_ids:
            properties[prefixed_key(props.MODULES, prefix)] = ",".join(module_ids)

    def _compute_project_key(self, target: ModuleNode) -> str:
        root = self.tree.root.spec
        root_key = f"{root.group}:{root.name}" if root.group else root.name
        if target.is_root:
            return root_key
        return root_key + target.path

    # ==========================================================================
    # MODULE STAGES
    # ==========================================================================

    def _run_extractors(self, node: ModuleNode, bag: PropertyBag) -> None:
        for extractor in self.extractors:
            try:
                extractor(node.spec, bag)
            except MissingCollaboratorDataError as e:
                logger.warning(f"Incomplete metadata for module {node.path}, continuing without it: {e}")

    def _apply_overrides(self, node: ModuleNode, bag: PropertyBag) -> None:
        callbacks = list(node.spec.overrides) + self.overrides.get(node.path, [])
        for index, callback in enumerate(callbacks):
            try:
                callback(bag)
            except Exception as e:
                raise MalformedOverrideError(node.path, index, e) from e

    def _add_defaults(self, node: ModuleNode, bag: PropertyBag, is_target: bool) -> None:
        spec = node.spec
        bag.put(props.PROJECT_NAME, spec.name)
        bag.put(props.PROJECT_DESCRIPTION, spec.description)
        bag.put(props.PROJECT_VERSION, spec.version)
        bag.put(props.PROJECT_BASE_DIR, os.path.abspath(spec.project_dir))
        bag.put(props.KOTLIN_GRADLE_PROJECT_ROOT, os.path.abspath(self.tree.root.spec.project_dir))

        self._add_kotlin_build_scripts(node, bag)

        if is_target:
            bag.put(props.WORKING_DIRECTORY, Path(spec.effective_build_dir) / "sonar")

        source_dirs = existing_paths(spec.source_dirs)
        test_dirs = existing_paths(spec.test_dirs)
        if source_dirs:
            bag.append(props.PROJECT_SOURCE_DIRS, [Path(p) for p in source_dirs])
        if test_dirs:
            bag.append(props.PROJECT_TEST_DIRS, [Path(p) for p in test_dirs])

        if source_dirs or test_dirs:
            if spec.source_encoding:
                bag.put(props.SOURCE_ENCODING, spec.source_encoding)
            self._add_test_reports(spec, bag)

        if spec.language in ("java", "groovy"):
            self._add_jdk_properties(spec, bag)

        self._add_classpath(spec, bag)

    def _add_kotlin_build_scripts(self, node: ModuleNode, bag: PropertyBag) -> None:
        scripts = [
            Path(n.spec.build_file)
            for n in self.tree.descendants_of(node)
            if n.spec.build_file and n.spec.build_file.endswith("kts")
        ]
        settings = os.path.join(node.spec.project_dir, KOTLIN_SETTINGS_FILE)
        if os.path.exists(settings):
            scripts.append(Path(settings))
        if scripts:
            bag.append(props.PROJECT_SOURCE_DIRS, scripts)

    @staticmethod
    def _add_test_reports(spec: ModuleSpec, bag: PropertyBag) -> None:
        results_dir = spec.test_results_dir
        if results_dir and os.path.isdir(results_dir) and contains_junit_report(results_dir):
            for key in (props.JUNIT_REPORT_PATHS, props.JUNIT_REPORTS_PATH, props.SUREFIRE_REPORTS_PATH):
                bag.append(key, [Path(results_dir)])

        report = spec.jacoco_xml_report
        if report and os.path.exists(report):
            bag.append(props.JACOCO_XML_REPORT_PATHS, [Path(report)])
        elif report:
            logger.info("JaCoCo XML report was not produced. Coverage for this module will not be reported.")

    @staticmethod
    def _add_jdk_properties(spec: ModuleSpec, bag: PropertyBag) -> None:
        jdk = spec.jdk
        if jdk is None:
            return
        if jdk.jdk_home:
            bag.put(props.JAVA_JDK_HOME, jdk.jdk_home)
        if jdk.release:
            bag.put(props.JAVA_SOURCE, jdk.release)
            bag.put(props.JAVA_TARGET, jdk.release)
        else:
            if jdk.source:
                bag.put(props.JAVA_SOURCE, jdk.source)
            if jdk.target:
                bag.put(props.JAVA_TARGET, jdk.target)
        bag.put(props.JAVA_ENABLE_PREVIEW, jdk.enable_preview)

    @staticmethod
    def _add_classpath(spec: ModuleSpec, bag: PropertyBag) -> None:
        main_binaries = [Path(p) for p in existing_paths(spec.main_output_dirs)]
        main_libraries = [Path(p) for p in existing_paths(spec.compile_classpath)]

        bag.append(props.JAVA_BINARIES, main_binaries)
        if spec.language == "groovy":
            bag.append(props.GROOVY_BINARIES, main_binaries)
        bag.append(props.BINARIES, main_binaries)
        bag.append(props.JAVA_LIBRARIES, main_libraries)
        bag.append(props.LIBRARIES, main_libraries)

        bag.append(props.JAVA_TEST_BINARIES, [Path(p) for p in existing_paths(spec.test_output_dirs)])
        bag.append(props.JAVA_TEST_LIBRARIES, [Path(p) for p in existing_paths(spec.test_compile_classpath)])


# -----------------------------------------------------------------------------
# FUNCTIONAL ENTRY POINT
# -----------------------------------------------------------------------------

def compute_properties(
        root: ModuleSpec,
        target_path: Optional[str] = None,
        environment: Optional[EnvironmentSnapshot] = None,
        extractors: Sequence[Extractor] = (),
) -> Dict[str, str]:
    """
    Snapshot a module hierarchy and return its flat property map.

    Args:
        root: Host root module.
        target_path: Analysis target path (defaults to the root).
        environment: Environment snapshot applied to the target.
        extractors: Platform-specific default providers.

    Returns:
        Dict[str, str]: The insertion-ordered property map.
    """
    computer = PropertyComputer(ModuleTree.snapshot(root), environment=environment, extractors=extractors)
    return computer.compute(target_path).properties
