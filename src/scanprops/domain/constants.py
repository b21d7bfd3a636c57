from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Provides centralized access to the analysis property names, the environment
contract, and the fixed heuristic tables used by the orphan source collector.
"""

from typing import FrozenSet, Tuple

APP_NAME = "scanprops"
CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# ANALYSIS PROPERTY NAMES
# -----------------------------------------------------------------------------

# General
SKIP = "sonar.skip"
GRADLE_SCAN_ALL = "sonar.gradle.scanAll"
VERBOSE = "sonar.verbose"

# Project structure
PROJECT_KEY = "sonar.projectKey"
MODULE_KEY = "sonar.moduleKey"
MODULES = "sonar.modules"
PROJECT_NAME = "sonar.projectName"
PROJECT_DESCRIPTION = "sonar.projectDescription"
PROJECT_VERSION = "sonar.projectVersion"
PROJECT_BASE_DIR = "sonar.projectBaseDir"
WORKING_DIRECTORY = "sonar.working.directory"

# Sources and tests
PROJECT_SOURCE_DIRS = "sonar.sources"
PROJECT_TEST_DIRS = "sonar.tests"
SOURCE_ENCODING = "sonar.sourceEncoding"

# Java configuration
JAVA_SOURCE = "sonar.java.source"
JAVA_TARGET = "sonar.java.target"
JAVA_ENABLE_PREVIEW = "sonar.java.enablePreview"
JAVA_JDK_HOME = "sonar.java.jdkHome"
JAVA_BINARIES = "sonar.java.binaries"
JAVA_LIBRARIES = "sonar.java.libraries"
JAVA_TEST_BINARIES = "sonar.java.test.binaries"
JAVA_TEST_LIBRARIES = "sonar.java.test.libraries"
LIBRARIES = "sonar.libraries"  # legacy alias of JAVA_LIBRARIES
BINARIES = "sonar.binaries"  # legacy alias of JAVA_BINARIES

# Groovy / Kotlin
GROOVY_BINARIES = "sonar.groovy.binaries"
KOTLIN_GRADLE_PROJECT_ROOT = "sonar.kotlin.gradleProjectRoot"

# Reports
JUNIT_REPORT_PATHS = "sonar.junit.reportPaths"
JUNIT_REPORTS_PATH = "sonar.junit.reportsPath"  # legacy
SUREFIRE_REPORTS_PATH = "sonar.surefire.reportsPath"  # legacy
JACOCO_XML_REPORT_PATHS = "sonar.coverage.jacoco.xmlReportPaths"
ANDROID_LINT_REPORT_PATHS = "sonar.androidLint.reportPaths"

ALL_PROPERTIES: FrozenSet[str] = frozenset({
    SKIP, GRADLE_SCAN_ALL, VERBOSE,
    PROJECT_KEY, MODULE_KEY, MODULES, PROJECT_NAME, PROJECT_DESCRIPTION,
    PROJECT_VERSION, PROJECT_BASE_DIR, WORKING_DIRECTORY,
    PROJECT_SOURCE_DIRS, PROJECT_TEST_DIRS, SOURCE_ENCODING,
    JAVA_SOURCE, JAVA_TARGET, JAVA_ENABLE_PREVIEW, JAVA_JDK_HOME,
    JAVA_BINARIES, JAVA_LIBRARIES, JAVA_TEST_BINARIES, JAVA_TEST_LIBRARIES,
    LIBRARIES, BINARIES, GROOVY_BINARIES, KOTLIN_GRADLE_PROJECT_ROOT,
    JUNIT_REPORT_PATHS, JUNIT_REPORTS_PATH, SUREFIRE_REPORTS_PATH,
    JACOCO_XML_REPORT_PATHS, ANDROID_LINT_REPORT_PATHS,
})

# -----------------------------------------------------------------------------
# ENVIRONMENT CONTRACT
# -----------------------------------------------------------------------------

PROPERTY_PREFIX = "sonar"
ENV_PREFIX = "SONAR_"
ENV_JSON_PARAMS = "SONARQUBE_SCANNER_PARAMS"

# -----------------------------------------------------------------------------
# RESOLUTION INTERCHANGE
# -----------------------------------------------------------------------------

COMPILE_CLASSPATH = "compileClasspath"
TEST_COMPILE_CLASSPATH = "testCompileClasspath"
MAIN_LIBRARIES = "mainLibraries"
TEST_LIBRARIES = "testLibraries"

CLASSPATH_KINDS: Tuple[str, ...] = (
    COMPILE_CLASSPATH,
    TEST_COMPILE_CLASSPATH,
    MAIN_LIBRARIES,
    TEST_LIBRARIES,
)

RESOLUTION_FILE_SUFFIX = ".properties"
DEFAULT_RESOLUTION_FILE = "properties"

# -----------------------------------------------------------------------------
# SOURCE COLLECTOR HEURISTICS
# -----------------------------------------------------------------------------

EXCLUDED_DIRECTORIES: FrozenSet[str] = frozenset({
    "bin", "build", "dist", "nbbuild", "nbdist", "out", "target", "tmp",
    ".git", ".gradle", ".idea", ".scannerwork", ".sonar", "node_modules",
})

EXCLUDED_EXTENSIONS: FrozenSet[str] = frozenset({
    # JVM artifacts
    ".jar", ".war", ".class", ".ear", ".nar",
    # Archives
    ".ds_store", ".zip", ".7z", ".rar", ".gz", ".tar", ".xz",
    # Logs
    ".log",
    # Temp files
    ".bak", ".tmp", ".swp",
    # IDE files
    ".iml", ".ipr", ".iws", ".nib",
})

# Languages already covered by a dedicated analyzer
COVERED_LANGUAGE_EXTENSIONS: FrozenSet[str] = frozenset({".java", ".jav", ".kt"})

SENSITIVE_KEYWORDS: Tuple[str, ...] = (
    "env", "config", "secret", "credential", "password", "passwd",
    "token", "apikey", "api_key", "api-key", "private", "auth", "cert",
)

HIDDEN_FILE_EXTENSIONS: FrozenSet[str] = frozenset({
    ".txt", ".json", ".yaml", ".yml", ".xml", ".properties", ".conf",
    ".cfg", ".ini", ".toml", ".sh", ".env",
})

# Hidden directories are still walked up to this depth below the scan root
HIDDEN_DIRECTORY_MAX_DEPTH = 2

# -----------------------------------------------------------------------------
# REPORTS
# -----------------------------------------------------------------------------

TEST_RESULT_FILE_PATTERN = r"TESTS?-.*\.xml"
WILDCARD_TOKENS: Tuple[str, ...] = ("*", "?", "${")
