from __future__ import annotations

"""
Classpath Resolution Data Models.

Immutable transfer objects carrying resolved dependency information from the
resolve phase to the analyze phase. They never hold live host objects, only
absolute path strings, so they can cross a process or cache boundary.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from scanprops.domain.constants import (
    COMPILE_CLASSPATH,
    MAIN_LIBRARIES,
    TEST_COMPILE_CLASSPATH,
    TEST_LIBRARIES,
)


@dataclass(frozen=True)
class ResolvedClasspathRecord:
    """
    Resolved classpath entries of one module.

    Attributes:
        module_name: Host module path (e.g. ':sub'); empty for the top level.
        is_top_level: Whether the module is the target of the analysis.
        compile_classpath: Absolute paths of the main compile classpath.
        test_compile_classpath: Absolute paths of the test compile classpath.
        main_libraries: Filtered main libraries (platform extractors only).
        test_libraries: Filtered test libraries (platform extractors only).
    """
    module_name: str
    is_top_level: bool
    compile_classpath: Tuple[str, ...] = field(default_factory=tuple)
    test_compile_classpath: Tuple[str, ...] = field(default_factory=tuple)
    main_libraries: Tuple[str, ...] = field(default_factory=tuple)
    test_libraries: Tuple[str, ...] = field(default_factory=tuple)

    def classpaths(self) -> Dict[str, List[str]]:
        """Return the four lists keyed by their interchange name."""
        return {
            COMPILE_CLASSPATH: list(self.compile_classpath),
            TEST_COMPILE_CLASSPATH: list(self.test_compile_classpath),
            MAIN_LIBRARIES: list(self.main_libraries),
            TEST_LIBRARIES: list(self.test_libraries),
        }

    @property
    def display_name(self) -> str:
        return "top-level project" if self.is_top_level else self.module_name
