"""``badge`` regions: shields.io badge lines for a configured badge group."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import quote, urlencode

import yaml

from syncrdme.domain.config import BadgeItem, Workflow
from syncrdme.domain.config import value_objects as badges
from syncrdme.domain.errors import AggregateError, Collector, ContentsError, SyncRdmeError

from ..context import PackageContext

SHIELDS_IO = "https://img.shields.io/"
GITHUB_PREFIX = "https://github.com/"
WORKFLOWS_DIR = Path(".github") / "workflows"
ALT_ESCAPES = "\\`_[]()!"

MAINTENANCE_COLORS = {
    "actively-developed": "brightgreen",
    "passively-maintained": "yellowgreen",
    "as-is": "yellow",
    "experimental": "blue",
    "looking-for-maintainer": "orange",
    "deprecated": "red",
}
MAINTENANCE_LINK = "https://doc.rust-lang.org/cargo/reference/manifest.html#the-badges-section"
RUST_VERSION_LINK = "https://doc.rust-lang.org/cargo/reference/manifest.html#the-rust-version-field"
RUST_VERSION_COLOR = "93450a"


class BadgeError(ContentsError):
    default_code = "BADGE_INVALID_REPOSITORY"


class CreateAllBadgesError(AggregateError):
    def __init__(self, errors: List[SyncRdmeError]) -> None:
        super().__init__("failed to create badges of README", errors, code="CONTENTS_FAILED")


def escape_markdown(text: str, chars: str = ALT_ESCAPES) -> str:
    return "".join("\\" + char if char in chars else char for char in text)


def static_message(message: str) -> str:
    """Escape a shields.io static badge path segment."""

    return message.replace("-", "--").replace("_", "__").replace(" ", "_")


@dataclass(frozen=True)
class ShieldsIo:
    path: str
    label: Optional[str] = None
    logo: Optional[str] = None

    @classmethod
    def static(cls, label: str, message: str, color: str, **kwargs: str) -> "ShieldsIo":
        return cls(f"badge/{label}-{static_message(message)}-{color}.svg", **kwargs)

    def build(self, style: Optional[str]) -> str:
        query = [(key, value) for key, value in (("label", self.label), ("logo", self.logo), ("style", style)) if value]
        url = SHIELDS_IO + quote(self.path, safe="/:@!$&'()*+,;=-._~")
        if query:
            url += "?" + urlencode(query)
        return url


@dataclass(frozen=True)
class BadgeLink:
    alt: str
    image: str
    link: Optional[str] = None

    def __str__(self) -> str:
        image = f"![{escape_markdown(self.alt)}]({self.image})"
        if self.link is None:
            return image
        return f"[{image}]({self.link})"


def create(context: PackageContext, group: str) -> str:
    """Render every badge of ``group``, one markdown line each."""

    collector: Collector[List[BadgeLink]] = Collector()
    for item in context.config.group(group).items:
        collector.run(lambda item=item: _create_item(context, item, collector))
    lines = collector.finish(CreateAllBadgesError)
    return "".join(f"{badge}\n" for batch in lines for badge in batch)


def _create_item(context: PackageContext, item: BadgeItem, collector: Collector) -> List[BadgeLink]:
    style = context.config.badge_style
    manifest = context.manifest
    name = context.name

    if item.kind == badges.MAINTENANCE:
        status = manifest.require("badges.maintenance.status")
        color = MAINTENANCE_COLORS.get(status)
        if color is None:
            return []
        image = ShieldsIo.static("maintenance", status, color).build(style)
        return [BadgeLink(f"Maintenance: {status}", image, MAINTENANCE_LINK)]

    if item.kind == badges.LICENSE:
        if manifest.license is None and manifest.license_file is None:
            manifest.require("package.license")
        license_name = manifest.license or "non-standard"
        link = item.link or manifest.license_file
        image = ShieldsIo(f"crates/l/{name}.svg").build(style)
        return [BadgeLink(f"License: {license_name}", image, link)]

    if item.kind == badges.CRATES_IO:
        image = ShieldsIo(f"crates/v/{name}.svg", logo="rust").build(style)
        return [BadgeLink("crates.io", image, f"https://crates.io/crates/{name}")]

    if item.kind == badges.DOCS_RS:
        image = ShieldsIo(f"docsrs/{name}.svg", logo="docs.rs").build(style)
        return [BadgeLink("docs.rs", image, f"https://docs.rs/{name}")]

    if item.kind == badges.RUST_VERSION:
        version = manifest.require("package.rust-version")
        image = ShieldsIo.static("rust", version, RUST_VERSION_COLOR, logo="rust").build(style)
        return [BadgeLink(f"Rust: {version}", image, RUST_VERSION_LINK)]

    if item.kind == badges.GITHUB_ACTIONS:
        repository, repo_path = _github_repository(context)
        links = []
        for workflow_name, file in _workflows(context, item.workflows, collector):
            image = ShieldsIo(
                f"github/actions/workflow/status/{repo_path.rstrip('/')}/{file}",
                label=workflow_name,
                logo="github",
            ).build(style)
            link = f"{repository.rstrip('/')}/actions/workflows/{file}"
            links.append(BadgeLink(f"GitHub Actions: {workflow_name}", image, link))
        return links

    if item.kind == badges.CODECOV:
        _, repo_path = _github_repository(context)
        image = ShieldsIo(f"codecov/c/github/{repo_path.rstrip('/')}.svg", label="codecov", logo="codecov").build(style)
        return [BadgeLink("Codecov", image, f"https://codecov.io/gh/{repo_path.rstrip('/')}")]

    raise BadgeError(f"unsupported badge kind: {item.kind}")


def _github_repository(context: PackageContext) -> Tuple[str, str]:
    repository = context.manifest.require("package.repository")
    if not repository.startswith(GITHUB_PREFIX):
        raise BadgeError(f"`package.repository` must start with `{GITHUB_PREFIX}`: {repository}")
    return repository, repository[len(GITHUB_PREFIX) :]


def _workflows(
    context: PackageContext, configured: Tuple[Workflow, ...], collector: Collector
) -> List[Tuple[str, str]]:
    """``(name, file)`` pairs; failures are pushed onto ``collector``."""

    directory = context.workspace.root / WORKFLOWS_DIR
    if configured:
        found = []
        for workflow in configured:
            if workflow.name is not None:
                found.append((workflow.name, workflow.file))
                continue
            try:
                found.append((read_workflow_name(context.workspace.root, directory / workflow.file), workflow.file))
            except BadgeError as exc:
                collector.push_error(exc)
        return found

    if not directory.is_dir():
        context.warn(f"workflows directory does not exist: {directory}")
        return []
    found = []
    for path in directory.iterdir():
        if not path.is_file() or path.suffix not in {".yml", ".yaml"}:
            continue
        try:
            found.append((read_workflow_name(context.workspace.root, path), path.name))
        except BadgeError as exc:
            collector.push_error(exc)
    return sorted(found)


def read_workflow_name(workspace_root: Path, path: Path) -> str:
    """The workflow's ``name``, or its path relative to the workspace root."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BadgeError(f"failed to read GitHub Action's workflow file: {path}: {exc}", code="BADGE_WORKFLOW_UNREADABLE") from exc
    try:
        workflow = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise BadgeError(f"failed to parse GitHub Action's workflow file: {path}: {exc}", code="BADGE_WORKFLOW_UNREADABLE") from exc
    name = workflow.get("name") if isinstance(workflow, dict) else None
    if isinstance(name, str) and name:
        return name
    try:
        return path.relative_to(workspace_root).as_posix()
    except ValueError:
        return path.as_posix()
