"""Loading of the installed template set and its layout description."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from appforge.core.errors import TemplateError

LAYOUT_FILE = "layout.yml"


@dataclass
class ManifestLayout:
    """Where the dependency block lives and how it is delimited."""

    source: str
    target: str
    start: str
    end: str
    user_start: str
    user_end: str


@dataclass
class StripBlock:
    """A delimited region removed from a file before shipping."""

    path: str
    start: str
    end: str


@dataclass
class TemplateLayout:
    """What the overlay copies, removes and patches."""

    directories: List[str]
    files: Dict[str, str]
    assets: Dict[str, str]
    remove: List[str]
    manifest: ManifestLayout
    namespace_files: List[str]
    module_file: str
    strip_blocks: List[StripBlock] = field(default_factory=list)
    template_namespace: str = "Appforge"
    template_namespace_files: List[str] = field(default_factory=list)


class TemplateLoader:
    """Loads the template set shipped with Appforge."""

    def __init__(self, templates_dir: Optional[Path] = None):
        """Initialize template loader.

        Args:
            templates_dir: Path to templates directory. Defaults to appforge/templates/
        """
        if templates_dir is None:
            # Loader is in appforge/core/, templates are in appforge/templates/
            templates_dir = Path(__file__).parent.parent / "templates"
        self.templates_dir = Path(templates_dir)

    def load_layout(self) -> TemplateLayout:
        """Load and validate layout.yml.

        Raises:
            TemplateError: If the layout file is missing or malformed
        """
        layout_path = self.templates_dir / LAYOUT_FILE
        if not layout_path.exists():
            raise TemplateError(f"Template layout not found at {layout_path}")

        with open(layout_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise TemplateError(f"Invalid YAML in {layout_path}: {e}") from e

        try:
            manifest = ManifestLayout(**data['manifest'])
            strip_blocks = [StripBlock(**block) for block in data.get('strip_blocks') or []]
            return TemplateLayout(
                directories=list(data.get('directories') or []),
                files=dict(data.get('files') or {}),
                assets=dict(data.get('assets') or {}),
                remove=list(data.get('remove') or []),
                manifest=manifest,
                namespace_files=list(data['namespace_files']),
                module_file=data['module_file'],
                strip_blocks=strip_blocks,
                template_namespace=data.get('template_namespace', "Appforge"),
                template_namespace_files=list(data.get('template_namespace_files') or []),
            )
        except (KeyError, TypeError) as e:
            raise TemplateError(f"Malformed template layout {layout_path}: {e}") from e
