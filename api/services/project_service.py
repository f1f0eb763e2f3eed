"""
Project service - saved report projects under PROJECT_DIR
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from src.stage2_narrator import ProjectConfigError, ProjectConfigLoader
from src.stage2_narrator.config import PROJECT_CONFIG_FILENAME

from ..config import settings

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Each subdirectory of the projects directory holding a
    report-pipeline.config.json is one project; its id is the directory name.
    """

    def __init__(self, project_dir: Optional[str] = None):
        self.project_dir = Path(project_dir or settings.PROJECT_DIR).expanduser()

    def list_projects(self) -> List[Dict[str, Any]]:
        """All loadable projects, most recently modified config first"""
        if not self.project_dir.is_dir():
            self.project_dir.mkdir(parents=True, exist_ok=True)
            return []

        projects = []
        for entry in self.project_dir.iterdir():
            if not (entry / PROJECT_CONFIG_FILENAME).is_file():
                continue
            project = self._load(entry.name)
            if project is not None:
                projects.append(project)

        return sorted(projects, key=lambda p: p["last_modified"], reverse=True)

    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        """Project by id, or None when it does not exist or fails to load"""
        # Ids are plain directory names
        if not project_id or Path(project_id).name != project_id or project_id in (".", ".."):
            return None
        if not (self.project_dir / project_id / PROJECT_CONFIG_FILENAME).is_file():
            return None
        return self._load(project_id)

    def _load(self, project_id: str) -> Optional[Dict[str, Any]]:
        project_path = self.project_dir / project_id
        config_path = project_path / PROJECT_CONFIG_FILENAME
        try:
            config = ProjectConfigLoader.load(str(config_path))
        except ProjectConfigError as e:
            logger.error(f"❌ Failed to load project {project_id}: {e}")
            return None

        return {
            "id": project_id,
            "name": config.report_name or project_id,
            "path": str(project_path),
            "config_path": str(config_path),
            "config": config,
            "last_modified": datetime.fromtimestamp(config_path.stat().st_mtime, tz=timezone.utc),
        }
