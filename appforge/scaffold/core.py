"""Provisioning pipeline: generate, overlay, patch, install, deploy."""
from pathlib import Path
from typing import Optional

from appforge.core.config import AppforgeConfig, get_config
from appforge.core.errors import PipelineError, PreconditionError
from appforge.core.logger import get_logger
from appforge.core.template_loader import TemplateLoader
from appforge.models.options import Options
from appforge.models.run import CommandSpec, Run
from appforge.scaffold.overlay import OverlayEngine
from appforge.scaffold.patches import PatchEngine, build_patch_table, derive_namespace
from appforge.services.command_runner import CommandRunner

logger = get_logger(__name__)


class Provisioner:
    """Runs the whole scaffold pipeline for one set of options.

    Generator, overlay and patch failures raise and stop the run. Dependency
    install, database setup and deploy steps are soft: their status is
    recorded on the Run and the pipeline carries on.
    """

    def __init__(
        self,
        options: Options,
        runner: Optional[CommandRunner] = None,
        config: Optional[AppforgeConfig] = None,
    ):
        self.options = options
        self.config = config or get_config()
        self.runner = runner or CommandRunner(mock=options.dry_run)
        self.loader = TemplateLoader(self.config.template_dir)
        self.run_record = Run(options=options)

    @property
    def target(self) -> Path:
        return self.options.target_path

    def run(self) -> Run:
        """Execute every phase in order and return the run record."""
        self.validate()
        self.generate_skeleton()
        self.overlay()
        self.patch()
        self.install_dependencies()
        self.setup_database()
        if self.options.deploy_target:
            self.deploy()
        return self.run_record

    def validate(self) -> None:
        """Refuse to touch an existing target unless forced."""
        if self.target.exists() and not self.options.force:
            raise PreconditionError(
                f"{self.target} already exists. Use --force to generate over it."
            )

    def generate_skeleton(self) -> None:
        logger.info(f"✨ Generating {self.options.app_name} ({self.options.database.value})")
        command = f'{self.config.generator} "{self.target}" -d {self.options.database.value} --skip-bundle'
        if self.options.force:
            command += " --force"

        result = self._run("generate", CommandSpec(command, stream_output=True))
        if not result.ok:
            raise PipelineError(
                f"Generator exited with status {result.returncode}; "
                f"{self.target} has been left as-is for inspection"
            )

    def overlay(self) -> None:
        if self.options.dry_run:
            logger.info(f"MOCK: Would overlay {self.loader.templates_dir} onto {self.target}")
            return
        layout = self.loader.load_layout()
        written = OverlayEngine(layout).overlay(self.loader.templates_dir, self.target)
        self.run_record.changed_files.extend(written)

    def patch(self) -> None:
        if self.options.dry_run:
            logger.info(f"MOCK: Would patch Gemfile and rename namespace in {self.target}")
            return
        layout = self.loader.load_layout()
        engine = PatchEngine(self.target)

        # A broken template block raises before any file is touched
        engine.augment_manifest(
            self.loader.templates_dir / layout.manifest.source,
            layout.manifest,
            self.options.extra_dependencies,
        )

        derived = derive_namespace(self.options.app_name)
        table = build_patch_table(layout, derived, self.config.namespace)
        changed = engine.apply_all(table)
        self.run_record.changed_files.extend(changed)
        logger.info(f"🔧 Renamed {derived} to {self.config.namespace} in {len(changed)} file(s)")

    def install_dependencies(self) -> None:
        logger.info("📦 Installing dependencies")
        self._run_soft("install", self.config.installer)

    def setup_database(self) -> None:
        logger.info("🗄  Setting up the database")
        self._run_soft("database", self.config.db_task)

    def deploy(self) -> None:
        """Push the project to the remote provider.

        Every step runs even if an earlier one failed; nothing is rolled back.
        """
        name = self.options.deploy_target
        cli = self.config.deploy_cli
        logger.info(f"🚀 Deploying to {cli} app '{name}'")
        steps = [
            ("vcs", 'git init && git add . && git commit -q -m "Initial commit"'),
            ("remote", f"{cli} create {name} --remote {self.config.deploy_remote}"),
            ("push", f"git push {self.config.deploy_remote} master"),
            ("remote-database", f"{cli} run rake db:setup"),
            ("restart", f"{cli} restart"),
        ]
        for step, command in steps:
            self._run_soft(step, command)

    def _run(self, step: str, spec: CommandSpec, soft: bool = False):
        result = self.runner.run(spec)
        self.run_record.record(step, spec, result, soft=soft)
        return result

    def _run_soft(self, step: str, command: str) -> None:
        spec = CommandSpec(command, working_directory=self.target, stream_output=True)
        result = self._run(step, spec, soft=True)
        if not result.ok:
            logger.warning(f"'{command}' exited with status {result.returncode}, continuing")
