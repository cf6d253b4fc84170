"""Copy the Appforge template set over a generated project."""
import shutil
from pathlib import Path
from typing import List, Optional

from appforge.core.logger import get_logger
from appforge.core.template_loader import TemplateLayout, TemplateLoader

logger = get_logger(__name__)


class OverlayEngine:
    """Lays the template set over a target directory.

    Every copy overwrites whatever is already at the destination. Copy steps
    whose source is missing from the template set are skipped.
    """

    def __init__(self, layout: Optional[TemplateLayout] = None):
        self.layout = layout

    def overlay(self, source_root: Path, target_root: Path) -> List[str]:
        """Overlay source_root onto target_root.

        Args:
            source_root: Installed template set
            target_root: Generated project directory

        Returns:
            Destination paths (relative to target_root) that were written

        Raises:
            OSError: On any copy or removal failure
        """
        source_root = Path(source_root)
        target_root = Path(target_root)
        layout = self.layout or TemplateLoader(source_root).load_layout()
        written = []

        for directory in layout.directories:
            if self._copy_tree(source_root / directory, target_root / directory):
                written.append(directory)

        for source, dest in list(layout.files.items()) + list(layout.assets.items()):
            if self._copy_file(source_root / source, target_root / dest):
                written.append(dest)

        for relative in layout.remove:
            path = target_root / relative
            if path.is_file() or path.is_symlink():
                path.unlink()
                logger.debug(f"Removed generator default {relative}")

        logger.info(f"📁 Overlaid {len(written)} template paths onto {target_root}")
        return written

    def _copy_tree(self, source: Path, dest: Path) -> bool:
        if not source.is_dir():
            logger.debug(f"Template directory {source} not present, skipping")
            return False
        shutil.copytree(source, dest, dirs_exist_ok=True)
        return True

    def _copy_file(self, source: Path, dest: Path) -> bool:
        if not source.is_file():
            logger.debug(f"Template file {source} not present, skipping")
            return False
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest)
        return True
