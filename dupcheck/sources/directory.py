"""Candidate source backed by a directory tree.

Layout::

    <root>/<project_id>/scripts/**/*          one script per file, id = relative path
    <root>/<project_id>/test_cases/*.json     {"id", "title", "description", "steps", "expectedResult"}
    <root>/sessions/<session_id>.json         {"projectId", "files": [{"id", "path", "fileType", "content"}]}

Used by the command-line entry point to check content against a local corpus.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Union

from dupcheck.models import steps_from_data, steps_from_json
from dupcheck.utils.logger import log_warning

from .base import (
    CandidateSource,
    GenerationSession,
    ScriptRecord,
    SessionFile,
    TestCaseRecord,
)

SCRIPT_SUFFIXES = {".ts", ".tsx", ".js", ".jsx", ".py", ".java", ".kt", ".rb", ".cs", ".go", ".feature", ".yaml", ".yml"}


class DirectoryCandidateSource(CandidateSource):
    """Reads candidates from files under ``root``."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    async def list_scripts(
        self, project_id: str, exclude_id: Optional[str] = None
    ) -> List[ScriptRecord]:
        scripts_dir = self.root / project_id / "scripts"
        if not scripts_dir.is_dir():
            return []
        records = []
        for path in sorted(scripts_dir.rglob("*")):
            if not path.is_file() or path.suffix not in SCRIPT_SUFFIXES:
                continue
            script_id = path.relative_to(scripts_dir).as_posix()
            if script_id == exclude_id:
                continue
            records.append(
                ScriptRecord(
                    id=script_id,
                    name=path.name,
                    code=path.read_text(encoding="utf-8"),
                    path=script_id,
                )
            )
        return records

    async def list_test_cases(
        self, project_id: str, exclude_id: Optional[str] = None
    ) -> List[TestCaseRecord]:
        cases_dir = self.root / project_id / "test_cases"
        if not cases_dir.is_dir():
            return []
        records = []
        for path in sorted(cases_dir.glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                log_warning("Skipping unreadable test case file", path=str(path), error=str(e))
                continue
            case_id = str(data.get("id") or path.stem)
            if case_id == exclude_id:
                continue
            records.append(
                TestCaseRecord(
                    id=case_id,
                    title=data.get("title", ""),
                    description=data.get("description"),
                    steps=tuple(_load_steps(data.get("steps"))),
                    expected_result=data.get("expectedResult"),
                )
            )
        return records

    async def get_session(self, session_id: str) -> Optional[GenerationSession]:
        path = self.root / "sessions" / f"{session_id}.json"
        if not path.is_file():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        files = tuple(
            SessionFile(
                id=str(f.get("id") or f.get("path") or i),
                path=f.get("path", ""),
                content=f.get("content", ""),
                file_type=f.get("fileType", "test"),
            )
            for i, f in enumerate(data.get("files") or [])
        )
        return GenerationSession(id=session_id, project_id=data.get("projectId"), files=files)


def _load_steps(raw):
    if raw is None:
        return []
    if isinstance(raw, str):
        return steps_from_json(raw)
    return steps_from_data(raw)
