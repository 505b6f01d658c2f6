"""
Git collaborator for RefactorScore

Reads commit metadata, file changes and file contents from a local
repository through the git CLI. Language and source-code detection are
based on the file extension only.
"""

import logging
import subprocess
from datetime import datetime, timezone
from pathlib import Path

from ..pipeline.entities import UNKNOWN_LANGUAGE, CommitData, FileChange, FileChangeType

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

GIT_TIMEOUT_SECONDS = 60
MAX_FILE_SIZE = 200 * 1024  # 200KB per file, larger files are not read

# ASCII unit / record separators, never present in commit metadata
FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"
COMMIT_FORMAT = FIELD_SEPARATOR.join(["%H", "%an", "%ae", "%aI", "%s"])

EXTENSION_TO_LANGUAGE = {
    ".py": "Python",
    ".js": "JavaScript", ".jsx": "JavaScript", ".mjs": "JavaScript",
    ".ts": "TypeScript", ".tsx": "TypeScript",
    ".java": "Java",
    ".cs": "C#",
    ".go": "Go",
    ".rb": "Ruby",
    ".rs": "Rust",
    ".c": "C", ".h": "C",
    ".cpp": "C++", ".cc": "C++", ".hpp": "C++",
    ".php": "PHP",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".scala": "Scala",
    ".vue": "Vue", ".svelte": "Svelte",
    ".sql": "SQL",
    ".sh": "Shell", ".bash": "Shell",
    # Recognized but not source code
    ".md": "Markdown",
    ".json": "JSON",
    ".yml": "YAML", ".yaml": "YAML",
    ".xml": "XML",
    ".html": "HTML",
    ".css": "CSS",
}

NON_SOURCE_LANGUAGES = {"Markdown", "JSON", "YAML", "XML", "HTML", "CSS"}

STATUS_TO_CHANGE_TYPE = {
    "A": FileChangeType.ADDED,
    "M": FileChangeType.MODIFIED,
    "D": FileChangeType.DELETED,
    "R": FileChangeType.RENAMED,
    "C": FileChangeType.ADDED,  # copy: a new file as far as the commit is concerned
    "T": FileChangeType.MODIFIED,
}


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def detect_language(file_path: str) -> str:
    """Language for a path based on its extension, 'Unknown' if not recognized."""
    return EXTENSION_TO_LANGUAGE.get(Path(file_path).suffix.lower(), UNKNOWN_LANGUAGE)


def is_source_code(file_path: str) -> bool:
    language = detect_language(file_path)
    return language != UNKNOWN_LANGUAGE and language not in NON_SOURCE_LANGUAGES


def _git_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S +0000")


def _parse_commit(record: str) -> CommitData | None:
    parts = record.strip("\n").split(FIELD_SEPARATOR)
    if len(parts) < 4:
        return None
    return CommitData(
        id=parts[0],
        author=parts[1],
        email=parts[2],
        date=datetime.fromisoformat(parts[3]),
        message=parts[4] if len(parts) > 4 else "",
    )


def _parse_name_status(output: str) -> list[tuple[FileChangeType, str]]:
    """
    Parse `git diff-tree --name-status -z` output.

    Renames and copies carry two paths (old, new); only the new path is kept.
    """
    tokens = output.split("\0")
    entries = []
    i = 0
    while i < len(tokens):
        status = tokens[i]
        if not status:
            i += 1
            continue
        code = status[0]
        if code in ("R", "C"):
            path = tokens[i + 2]
            i += 3
        else:
            path = tokens[i + 1]
            i += 2
        entries.append((STATUS_TO_CHANGE_TYPE.get(code, FileChangeType.MODIFIED), path))
    return entries


def _parse_numstat(output: str) -> dict[str, tuple[int, int]]:
    """
    Parse `git diff-tree --numstat -z` output into path -> (added, removed).

    Binary files report '-' for both counts and are counted as 0.
    """
    tokens = output.split("\0")
    stats = {}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if not token:
            i += 1
            continue
        added, removed, path = token.split("\t", 2)
        if path:
            i += 1
        else:
            # Rename: the old and new paths follow as separate tokens
            path = tokens[i + 2]
            i += 3
        stats[path] = (
            int(added) if added != "-" else 0,
            int(removed) if removed != "-" else 0,
        )
    return stats


# =============================================================================
# REPOSITORY
# =============================================================================

class GitRepository:
    """Git collaborator over a local working copy"""

    def __init__(self, repo_path: str | Path = "."):
        self.repo_path = Path(repo_path)

    def _run(self, *args: str) -> str | None:
        """Run a git command, returning stdout or None on failure."""
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=GIT_TIMEOUT_SECONDS,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"git {args[0]} timed out for {self.repo_path}")
            return None
        except OSError as e:
            logger.error(f"Could not run git in {self.repo_path}: {e}")
            return None

        if result.returncode != 0:
            logger.warning(f"git {args[0]} failed in {self.repo_path}: {result.stderr.strip()}")
            return None
        return result.stdout

    def get_commit_by_id(self, commit_id: str) -> CommitData | None:
        output = self._run("show", "-s", f"--format={COMMIT_FORMAT}", commit_id, "--")
        if not output:
            return None
        return _parse_commit(output)

    def get_commit_changes(self, commit_id: str) -> list[FileChange]:
        name_status = self._run("diff-tree", "--root", "--no-commit-id", "-r", "-M", "-z", "--name-status", commit_id)
        numstat = self._run("diff-tree", "--root", "--no-commit-id", "-r", "-M", "-z", "--numstat", commit_id)
        if name_status is None or numstat is None:
            return []

        stats = _parse_numstat(numstat)
        changes = []
        for change_type, path in _parse_name_status(name_status):
            added, removed = stats.get(path, (0, 0))
            content = "" if change_type == FileChangeType.DELETED else self.get_file_content(commit_id, path)
            changes.append(FileChange(
                path=path,
                language=detect_language(path),
                added_lines=added,
                removed_lines=removed,
                content=content,
                change_type=change_type,
                is_source_code=is_source_code(path),
            ))

        logger.debug(f"Commit {commit_id} touches {len(changes)} files")
        return changes

    def get_file_content(self, commit_id: str, path: str) -> str:
        """File content at `commit_id`, empty for missing or oversized files."""
        size = self._run("cat-file", "-s", f"{commit_id}:{path}")
        if size is None or int(size.strip() or 0) > MAX_FILE_SIZE:
            return ""
        return self._run("show", f"{commit_id}:{path}") or ""

    def get_commits_by_period(self, since: datetime, until: datetime) -> list[CommitData]:
        """Commits authored in [since, until], newest first."""
        output = self._run(
            "log",
            f"--since={_git_date(since)}",
            f"--until={_git_date(until)}",
            f"--format={COMMIT_FORMAT}{RECORD_SEPARATOR}",
        )
        if not output:
            return []

        commits = []
        for record in output.split(RECORD_SEPARATOR):
            if not record.strip():
                continue
            commit = _parse_commit(record)
            if commit is not None:
                commits.append(commit)
        return commits
