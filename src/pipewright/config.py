# src/pipewright/config.py

"""Centralized settings loaded from the project manifest and environment variables (+ optional .env).

- One Settings object per project root.
- Library facts (main artifact, entry module, export name) come from package.json.
- Everything else has a default that can be overridden with PIPEWRIGHT_* variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "PIPEWRIGHT"

DEFAULT_MAIN = "dist/library.js"
DEFAULT_ENTRY = "src/index"
DEFAULT_VAR_NAME = "Library"

DEFAULT_WATCH_PATTERNS = ["src/**/*", "test/**/*", "package.json", "**/.eslintrc", ".jscsrc"]


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def load_manifest(path: Path) -> dict[str, Any]:
    """Read package.json; a missing file yields an empty manifest."""
    if not path.exists():
        logger.debug("No manifest at %s, using defaults", path)
        return {}
    data = json.loads(path.read_text("utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Manifest {path} is not a JSON object")
    return data


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Project ----
    project_root: Path
    manifest_path: Path

    # ---- Logging ----
    log_level: str
    log_dir: Path

    # ---- Library (from package.json) ----
    main_file: str
    entry_file: Path
    export_name: str

    # ---- Layout ----
    tmp_dir: Path
    grammar_path: Path
    src_patterns: list[str]
    test_patterns: list[str]
    build_script_patterns: list[str]
    watch_patterns: list[str]

    # ---- Tests ----
    node_setup_file: str
    browser_setup_file: str
    unit_test_patterns: list[str]
    integration_test_patterns: list[str]
    mocha_globals_path: Path
    test_env_var: str
    test_env_value: str

    # ---- Browser bundle / live reload ----
    browser_bundle_name: str
    livereload_host: str
    livereload_port: int

    # ---- Coverage ----
    coverage_reporters: list[str]
    coverage_dir: Path

    # ---- Misc ----
    alerts_enabled: bool

    @property
    def dist_dir(self) -> Path:
        """Output directory derived from the main artifact path."""
        return self.project_root / PurePosixPath(self.main_file).parent

    @property
    def export_file_name(self) -> str:
        return PurePosixPath(self.main_file).stem

    @property
    def browser_bundle_path(self) -> Path:
        return self.tmp_dir / self.browser_bundle_name

    def relative(self, path: Path) -> str:
        """Project-relative POSIX form of `path` (used in logs and reload messages)."""
        try:
            return path.resolve().relative_to(self.project_root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    @staticmethod
    def from_env(root: str | Path | None = None) -> "Settings":
        project_root = Path(root or _env(_k("ROOT"), ".")).expanduser().resolve()
        load_dotenv(project_root / ".env", override=False)

        manifest_path = project_root / _env(_k("MANIFEST"), "package.json")
        manifest = load_manifest(manifest_path)
        options = manifest.get("babelBoilerplateOptions") or {}

        main_file = str(manifest.get("main") or DEFAULT_MAIN)
        entry_name = str(options.get("entryFileName") or DEFAULT_ENTRY)
        export_name = str(options.get("mainVarName") or DEFAULT_VAR_NAME)

        grammar_path = project_root / _env(
            _k("GRAMMAR"), "src/grammar-parser/grammar-parser.jison"
        )

        return Settings(
            project_root=project_root,
            manifest_path=manifest_path,
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            log_dir=project_root / _env(_k("LOG_DIR"), ".local/pipewright"),
            main_file=main_file,
            entry_file=project_root / f"{entry_name}.js",
            export_name=export_name,
            tmp_dir=project_root / _env(_k("TMP_DIR"), "tmp"),
            grammar_path=grammar_path,
            src_patterns=_env_list(_k("SRC_PATTERNS"), ["src/**/*.js"]),
            test_patterns=_env_list(_k("TEST_PATTERNS"), ["test/**/*.js"]),
            build_script_patterns=_env_list(
                _k("BUILD_SCRIPT_PATTERNS"), ["gulpfile.babel.js", "*.config.js"]
            ),
            watch_patterns=_env_list(_k("WATCH_PATTERNS"), DEFAULT_WATCH_PATTERNS),
            node_setup_file=_env(_k("NODE_SETUP"), "test/setup/node.js"),
            browser_setup_file=_env(_k("BROWSER_SETUP"), "test/setup/browser.js"),
            unit_test_patterns=_env_list(_k("UNIT_TESTS"), ["test/unit/**/*.js"]),
            integration_test_patterns=_env_list(
                _k("INTEGRATION_TESTS"), ["test/integration/**/*.js"]
            ),
            mocha_globals_path=project_root / _env(_k("MOCHA_GLOBALS"), "test/setup/.globals"),
            test_env_var=_env(_k("TEST_ENV_VAR"), "NODE_ENV"),
            test_env_value=_env(_k("TEST_ENV_VALUE"), "test"),
            browser_bundle_name=_env(_k("BROWSER_BUNDLE"), "__spec-build.js"),
            livereload_host=_env(_k("LIVERELOAD_HOST"), "localhost"),
            livereload_port=_env_int(_k("LIVERELOAD_PORT"), 35729),
            coverage_reporters=_env_list(_k("COVERAGE_REPORTERS"), ["text-summary", "lcov"]),
            coverage_dir=project_root / _env(_k("COVERAGE_DIR"), "coverage"),
            alerts_enabled=_env_bool(_k("ALERTS"), True),
        )


def get_settings(root: str | Path | None = None) -> Settings:
    return Settings.from_env(root)
