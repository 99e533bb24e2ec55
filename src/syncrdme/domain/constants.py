"""Error codes and remediation hints shared by the sync-rdme domain."""

from __future__ import annotations

MAGIC = "sync-rdme"

ERROR_REMEDIATIONS = {
    "MARKER_NO_REPLACE": "Add a replace specifier after the keyword, e.g. `<!-- sync-rdme title -->`.",
    "MARKER_UNKNOWN_REPLACE": "Use one of `title`, `badge`, `badge:<group>` or `doc-summary`.",
    "MARKER_UNDECLARED_BADGE_GROUP": "Declare the group as `badge.badges-<group>` in .sync-rdme.yaml.",
    "MARKER_UNEXPECTED_END": "Remove the stray end marker or add the matching start marker before it.",
    "MARKER_END_NOT_FOUND": "Close the region with `<!-- sync-rdme ]] -->`.",
    "MARKER_NESTED": "Close the previous region before opening a new one; regions cannot nest.",
    "README_PARSE_FAILED": "Fix the marker errors listed above and rerun sync.",
    "CONTENTS_FAILED": "Fix the generator errors listed above and rerun sync.",
    "CONFIG_KEY_NOT_SET": "Set the missing key in Cargo.toml or drop the badge that needs it.",
    "BADGE_INVALID_REPOSITORY": "Point `package.repository` at https://github.com/<owner>/<repo>.",
    "BADGE_WORKFLOW_UNREADABLE": "Check that the workflow file exists and is valid YAML.",
    "RUSTDOC_FAILED": "Run `cargo +nightly rustdoc -- -Z unstable-options --output-format json` manually to inspect the failure.",
    "RUSTDOC_OUTPUT_INVALID": "Regenerate the rustdoc JSON with a toolchain matching the expected format.",
    "SYNC_CONFIG_INVALID": "Update .sync-rdme.yaml to match the schema shipped with sync-rdme.",
    "MANIFEST_INVALID": "Check that Cargo.toml parses and declares [package].",
    "NO_TARGETS": "Set `package.readme` in Cargo.toml or list files under `extra-targets`.",
    "README_READ_FAILED": "Check the README path configured for the package.",
    "README_WRITE_FAILED": "Check permissions of the README directory.",
    "README_NOT_SYNCED": "Run `sync-rdme sync` and commit the result.",
    "README_DIRTY": "Commit or stash the README changes, or pass --allow-dirty.",
    "README_STAGED": "Commit the staged README changes, or pass --allow-staged.",
    "VCS_NOT_FOUND": "Run inside a git checkout or pass --allow-no-vcs.",
    "WORKSPACE_METADATA_FAILED": "Run `cargo metadata --no-deps` manually to inspect the failure.",
    "PACKAGE_NOT_FOUND": "Pass a package name that is a member of the workspace.",
}


def remediation_for(code: str) -> str | None:
    """Return default remediation text for a given error code."""

    return ERROR_REMEDIATIONS.get(code)
