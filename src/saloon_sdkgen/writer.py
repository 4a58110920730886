"""Persist a GeneratedCode bundle: to a directory, to a zip archive, or as a dry-run plan.

Every candidate file is decided on its own, in this order:

1. the existing file carries the never-override marker -> skipped, even with ``force``
2. the file exists and ``force`` is off -> skipped, reported as already existing
3. otherwise -> written, parent directories created as needed

The marker is ``@sdk-never-override`` anywhere in the text of a source
file, and a top-level ``"x-sdk-never-override": true`` in a JSON file.
"""

import json
import logging
import zipfile
from enum import Enum
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import GeneratedCode
from saloon_sdkgen.phpgen import PhpFile

logger = logging.getLogger(__name__)

NEVER_OVERRIDE_ANNOTATION = "@sdk-never-override"
NEVER_OVERRIDE_JSON_FIELD = "x-sdk-never-override"

TEST_TAGS = ("phpunit", "pest")

# Fixed entry timestamp so archives of the same bundle are byte-identical.
ZIP_DATE_TIME = (2024, 1, 1, 0, 0, 0)


class WriteAction(str, Enum):
    CREATED = "created"
    SKIPPED_EXISTS = "skipped-exists"
    SKIPPED_PROTECTED = "skipped-protected"
    FAILED = "failed"


_MESSAGES = {
    WriteAction.CREATED: "- Created: {path}",
    WriteAction.SKIPPED_EXISTS: "- File already exists: {path}",
    WriteAction.SKIPPED_PROTECTED: "- Protected by @sdk-never-override: {path}",
    WriteAction.FAILED: "- Failed to write: {path}",
}


class WriteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    action: WriteAction
    error: str | None = None

    @property
    def message(self) -> str:
        return _MESSAGES[self.action].format(path=self.path)


class OutputFile(BaseModel):
    """One file of the bundle, with its path relative to the output root."""

    model_config = ConfigDict(frozen=True)

    group: str
    path: str
    content: str


def class_file_path(file: PhpFile, config: GeneratorConfig) -> str:
    """``src/<namespace relative to the composer root>/<Class>.php``."""
    namespace = file.namespace.name
    root = config.root_namespace
    if namespace == root:
        relative = ""
    elif namespace.startswith(root + "\\"):
        relative = namespace[len(root) + 1:]
    else:
        relative = namespace
    parts = ["src", *[p for p in relative.split("\\") if p], f"{file.class_type.name}.php"]
    return "/".join(parts)


def collect_output_files(code: GeneratedCode, config: GeneratorConfig) -> list[OutputFile]:
    """All files of the bundle in write order: connector, resources, requests, DTOs, tests, the rest."""
    files = []

    def add_classes(group: str, classes) -> None:
        for php_file in classes:
            files.append(
                OutputFile(group=group, path=class_file_path(php_file, config), content=str(php_file))
            )

    add_classes("Connector", [code.connector_class] if code.connector_class else [])
    add_classes("Resources", code.resource_classes)
    add_classes("Requests", code.request_classes)
    add_classes("DTOs", code.dto_classes.values())

    for tagged in code.additional_files:
        if tagged.tag in TEST_TAGS:
            files.append(OutputFile(group="Tests", path=tagged.path, content=tagged.file))
    for tagged in code.additional_files:
        if tagged.tag not in TEST_TAGS:
            files.append(OutputFile(group="Project Files", path=tagged.path, content=tagged.file))

    return files


def plan_output_files(code: GeneratedCode, config: GeneratorConfig) -> dict[str, list[str]]:
    """Dry-run view: relative output paths grouped by kind. Touches nothing."""
    plan: dict[str, list[str]] = {}
    for output in collect_output_files(code, config):
        plan.setdefault(output.group, []).append(output.path)
    return plan


def is_protected(path: Path) -> bool:
    """Whether an existing file carries the never-override marker.

    Missing or unreadable files are not protected. For ``.json`` files only
    the top-level field counts; invalid JSON is not protected.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False

    if path.suffix == ".json":
        try:
            decoded = json.loads(content)
        except json.JSONDecodeError:
            return False
        return isinstance(decoded, dict) and decoded.get(NEVER_OVERRIDE_JSON_FIELD) is True

    return NEVER_OVERRIDE_ANNOTATION in content


class OutputWriter:
    """Writes files under ``output_dir``, reporting one WriteResult per file."""

    def __init__(
        self,
        output_dir: Path,
        force: bool = False,
        on_result: Callable[[WriteResult], None] | None = None,
    ):
        self.output_dir = Path(output_dir)
        self.force = force
        self.on_result = on_result

    def write(self, code: GeneratedCode, config: GeneratorConfig) -> list[WriteResult]:
        return [self.write_file(f.path, f.content) for f in collect_output_files(code, config)]

    def write_file(self, relative_path: str, content: str) -> WriteResult:
        result = self._write(self.output_dir / relative_path, content)
        logger.debug("%s %s", result.action.value, result.path)
        if self.on_result is not None:
            self.on_result(result)
        return result

    def _write(self, path: Path, content: str) -> WriteResult:
        if is_protected(path):
            return WriteResult(path=path, action=WriteAction.SKIPPED_PROTECTED)
        if path.exists() and not self.force:
            return WriteResult(path=path, action=WriteAction.SKIPPED_EXISTS)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to write %s: %s", path, e)
            return WriteResult(path=path, action=WriteAction.FAILED, error=str(e))
        return WriteResult(path=path, action=WriteAction.CREATED)


def zip_archive_path(output_dir: Path, config: GeneratorConfig, code: GeneratedCode) -> Path:
    name = code.connector_class.class_type.name if code.connector_class else config.connector_name
    return Path(output_dir) / f"{name}_sdk.zip"


def write_zip_archive(
    code: GeneratedCode,
    config: GeneratorConfig,
    output_dir: Path,
    force: bool = False,
) -> WriteResult:
    """Bundle every file into ``<output>/<Connector>_sdk.zip``.

    Entries use the same relative paths as a directory write. Individual
    files are not protection-checked; only an existing archive without
    ``force`` stops the write.
    """
    zip_path = zip_archive_path(output_dir, config, code)
    if zip_path.exists() and not force:
        return WriteResult(path=zip_path, action=WriteAction.SKIPPED_EXISTS)

    try:
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for output in collect_output_files(code, config):
                info = zipfile.ZipInfo(output.path, date_time=ZIP_DATE_TIME)
                info.compress_type = zipfile.ZIP_DEFLATED
                archive.writestr(info, output.content)
    except OSError as e:
        logger.warning("Failed to create zip archive %s: %s", zip_path, e)
        return WriteResult(path=zip_path, action=WriteAction.FAILED, error=str(e))

    return WriteResult(path=zip_path, action=WriteAction.CREATED)
