"""Targeted text patches for a generated project.

Patches are declared as PatchSpec data (see ``build_patch_table``) and
applied by ``PatchEngine`` relative to the project root. Literal, regex and
block-removal patches are idempotent. Manifest augmentation is not: running
it twice appends the dependency blocks twice.
"""
import re
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from appforge.core.errors import ManifestMarkerError, MarkerError
from appforge.core.logger import get_logger
from appforge.core.template_loader import ManifestLayout, TemplateLayout
from appforge.models.patch import Block, PatchSpec

logger = get_logger(__name__)


def derive_namespace(name: str) -> str:
    """Camel-case a directory name into a Ruby constant.

    Examples:
        >>> derive_namespace("my-app")
        'MyApp'
        >>> derive_namespace("my_app_2")
        'MyApp2'
    """
    segments = [s for s in re.split(r'[^A-Za-z0-9]+', name) if s]
    if not segments:
        raise ValueError(f"Cannot derive a namespace from '{name}'")
    return "".join(s[0].upper() + s[1:] for s in segments)


def find_blocks(text: str, block: Block) -> List[Tuple[int, int]]:
    """Locate every region delimited by block's marker lines.

    A marker matches a whole line, ignoring surrounding whitespace. Each span
    runs from the start of the start-marker line to the end of the end-marker
    line, newline included.

    Raises:
        MarkerError: If a marker appears without its partner
    """
    spans = []
    offset = 0
    open_at = None
    for line in text.splitlines(keepends=True):
        marker = line.strip()
        if marker == block.start:
            if open_at is not None:
                raise MarkerError(f"'{block.start}' appears again before '{block.end}'")
            open_at = offset
        elif marker == block.end:
            if open_at is None:
                raise MarkerError(f"'{block.end}' has no matching '{block.start}'")
            spans.append((open_at, offset + len(line)))
            open_at = None
        offset += len(line)

    if open_at is not None:
        raise MarkerError(f"'{block.start}' is never closed by '{block.end}'")
    return spans


def substitute(text: str, spec: PatchSpec) -> str:
    """Return text with every match of spec.matcher replaced."""
    replacement = spec.replacement or ""
    if isinstance(spec.matcher, Block):
        for start, end in reversed(find_blocks(text, spec.matcher)):
            text = text[:start] + replacement + text[end:]
        return text
    if isinstance(spec.matcher, re.Pattern):
        return spec.matcher.sub(replacement, text)
    return text.replace(spec.matcher, replacement)


def _reference_patches(paths: Sequence[str], old: str, new: str) -> List[PatchSpec]:
    reference = re.compile(rf'(?<![A-Za-z0-9_:]){re.escape(old)}::Application\b')
    return [PatchSpec(path, reference, f"{new}::Application") for path in paths]


def build_patch_table(layout: TemplateLayout, derived: str, namespace: str) -> List[PatchSpec]:
    """Build the ordered patch list for a project whose namespace is derived.

    Overlaid files ship with the template namespace; they are renamed too
    when a different namespace is configured.
    """
    table = _reference_patches(layout.namespace_files, derived, namespace)
    if layout.template_namespace != namespace:
        table.extend(_reference_patches(
            layout.template_namespace_files, layout.template_namespace, namespace
        ))
    table.append(PatchSpec(
        layout.module_file,
        re.compile(rf'^(\s*)module {re.escape(derived)}\b', re.MULTILINE),
        rf'\g<1>module {namespace}',
    ))
    for strip in layout.strip_blocks:
        table.append(PatchSpec(strip.path, Block(strip.start, strip.end), None))
    return table


class PatchEngine:
    """Applies patches to files under a project root."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def apply(self, spec: PatchSpec) -> bool:
        """Apply one patch in place.

        Returns:
            True if the file changed, False if it was missing or already patched
        """
        path = self.root / spec.path
        if not path.is_file():
            logger.debug(f"{spec.path} not present, skipping {spec.kind} patch")
            return False

        original = path.read_text(encoding="utf-8")
        patched = substitute(original, spec)
        if patched == original:
            return False

        path.write_text(patched, encoding="utf-8")
        logger.debug(f"Patched {spec.path} ({spec.kind})")
        return True

    def apply_all(self, specs: Iterable[PatchSpec]) -> List[str]:
        """Apply specs in order and return the files that changed."""
        changed = []
        for spec in specs:
            if self.apply(spec) and spec.path not in changed:
                changed.append(spec.path)
        return changed

    def augment_manifest(
        self,
        source_manifest: Path,
        manifest: ManifestLayout,
        extra_dependencies: Sequence[str],
    ) -> str:
        """Append the template dependency block and the user's gems.

        Args:
            source_manifest: Template Gemfile holding the delimited block
            manifest: Marker and target settings from the template layout
            extra_dependencies: Gem names, written in the given order

        Returns:
            The text appended to the project manifest

        Raises:
            ManifestMarkerError: If the template block cannot be located
        """
        block = Block(manifest.start, manifest.end)
        try:
            text = Path(source_manifest).read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ManifestMarkerError(f"Template manifest {source_manifest} is missing") from e

        try:
            spans = find_blocks(text, block)
        except MarkerError as e:
            raise ManifestMarkerError(f"Malformed dependency block in {source_manifest}: {e}") from e
        if len(spans) != 1:
            raise ManifestMarkerError(
                f"Expected exactly one '{manifest.start}' ... '{manifest.end}' block "
                f"in {source_manifest}, found {len(spans)}"
            )

        start, end = spans[0]
        user_lines = [f"gem '{name}'\n" for name in extra_dependencies]
        addition = "\n" + text[start:end] + "\n" + "".join(
            [manifest.user_start + "\n", *user_lines, manifest.user_end + "\n"]
        )

        target = self.root / manifest.target
        if not target.exists():
            logger.warning(f"{manifest.target} missing from generated project, creating it")
        current = target.read_text(encoding="utf-8") if target.exists() else ""
        if current and not current.endswith("\n"):
            addition = "\n" + addition

        with open(target, "a", encoding="utf-8") as f:
            f.write(addition)

        logger.info(f"📦 Added {len(extra_dependencies)} extra gem(s) to {manifest.target}")
        return addition
