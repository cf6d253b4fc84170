"""Tests for the provisioning pipeline."""

import shutil

import pytest

from appforge.core.config import AppforgeConfig
from appforge.core.errors import ManifestMarkerError, PipelineError, PreconditionError
from appforge.models.options import Database, Options
from appforge.scaffold.core import Provisioner

from conftest import FakeRunner, RAILS_SKELETON


def _provisioner(target, runner, **options):
    return Provisioner(Options(target=target, **options), runner=runner, config=AppforgeConfig())


class TestValidate:
    """Test the existing-target precondition."""

    def test_existing_target_without_force_writes_nothing(self, tmp_path):
        target = tmp_path / "demo"
        target.mkdir()
        (target / "keep.txt").write_text("mine\n")
        runner = FakeRunner()

        with pytest.raises(PreconditionError, match="already exists"):
            _provisioner(target, runner).run()

        assert runner.specs == []
        assert [p.name for p in target.iterdir()] == ["keep.txt"]
        assert (target / "keep.txt").read_text() == "mine\n"

    def test_existing_target_with_force_passes_flag(self, tmp_path):
        target = tmp_path / "demo"
        target.mkdir()
        runner = FakeRunner()

        _provisioner(target, runner, force=True).run()

        assert runner.commands[0].endswith("--force")


class TestEndToEnd:
    """Run the full pipeline against a fake generator."""

    def test_demo_scenario(self, tmp_path, layout, templates_dir):
        target = tmp_path / "demo"
        runner = FakeRunner(namespace="Demo")

        run = _provisioner(
            target, runner, database=Database.SQLITE3, extra_dependencies=["foo", "bar"]
        ).run()

        # Generator invoked with the database flag from the process cwd
        generate = runner.specs[0]
        assert generate.command_line == f'rails new "{target}" -d sqlite3 --skip-bundle'
        assert generate.working_directory is None
        assert generate.stream_output is True

        # Overlay: four directories and the root files
        for directory in ("app", "db", "features", "spec"):
            assert (target / directory).is_dir()
        for dest in layout.files.values():
            assert (target / dest).exists(), dest

        # Manifest: template block plus a user block with two gems in order
        gemfile = (target / "Gemfile").read_text()
        assert gemfile.startswith(RAILS_SKELETON["Gemfile"])
        assert "# >>> appforge gems\ngem 'haml-rails'" in gemfile
        user_block = gemfile.split("# >>> user gems\n")[1].split("# <<< user gems")[0]
        assert user_block.splitlines() == ["gem 'foo'", "gem 'bar'"]

        # Namespace rewritten in all nine files
        assert len(layout.namespace_files) == 9
        for relative in layout.namespace_files:
            content = (target / relative).read_text()
            assert "Demo::Application" not in content, relative
            assert "Appforge" in content, relative

        # Development-only block stripped from the ignore file
        gitignore = (target / ".gitignore").read_text()
        assert "development-only" not in gitignore
        assert "/scratch" not in gitignore
        assert ".bundle" in gitignore

        # Provisioning commands ran in the target, deploy skipped
        assert [spec.command_line for spec in runner.specs[1:]] == [
            "bundle install",
            "bundle exec rake db:setup",
        ]
        assert all(spec.working_directory == target for spec in runner.specs[1:])
        assert run.soft_failures == []
        assert run.target_path == target

    def test_hyphenated_name_is_renamed(self, tmp_path):
        target = tmp_path / "my-app"
        _provisioner(target, FakeRunner(namespace="MyApp")).run()

        assert "module Appforge" in (target / "config" / "application.rb").read_text()
        assert "MyApp::Application" not in (target / "config.ru").read_text()

    def test_custom_namespace(self, tmp_path):
        target = tmp_path / "demo"
        config = AppforgeConfig(namespace="Storefront")
        Provisioner(Options(target=target), runner=FakeRunner(), config=config).run()
        assert "run Storefront::Application" in (target / "config.ru").read_text()
        assert "module Storefront\n" in (target / "config" / "application.rb").read_text()

        # Generated and overlaid Ruby files all agree on the namespace
        ruby_files = [p for p in target.rglob("*") if p.suffix in (".rb", ".ru") or p.name == "Rakefile"]
        for path in ruby_files:
            content = path.read_text()
            assert "Appforge::Application" not in content, path
            assert "Demo::Application" not in content, path
        assert (target / "config" / "routes.rb").read_text().startswith("Storefront::Application.routes.draw")
        assert (target / "config" / "environments" / "staging.rb").read_text().startswith(
            "Storefront::Application.configure"
        )


class TestFatalErrors:
    """Generator, overlay and patch failures stop the run."""

    def test_generator_failure_aborts(self, tmp_path):
        runner = FakeRunner(failures={"rails new": 1})

        with pytest.raises(PipelineError, match="status 1"):
            _provisioner(tmp_path / "demo", runner).run()

        assert len(runner.specs) == 1

    def test_missing_manifest_markers_abort(self, tmp_path, templates_dir):
        templates = tmp_path / "templates"
        shutil.copytree(templates_dir, templates)
        (templates / "Gemfile").write_text("gem 'haml-rails'\n")

        target = tmp_path / "demo"
        runner = FakeRunner()
        config = AppforgeConfig(template_dir=templates)

        with pytest.raises(ManifestMarkerError):
            Provisioner(Options(target=target), runner=runner, config=config).run()

        # Nothing after the patch phase ran, and the namespace was not touched
        assert runner.commands == [f'rails new "{target}" -d sqlite3 --skip-bundle']
        assert "Demo::Application" in (target / "config.ru").read_text()
        # Partial state is left for inspection
        assert (target / "features").is_dir()


class TestSoftErrors:
    """Install, database and deploy failures are recorded, not raised."""

    def test_install_and_database_failures_continue(self, tmp_path):
        runner = FakeRunner(failures={"bundle install": 1, "db:setup": 2})

        run = _provisioner(tmp_path / "demo", runner).run()

        assert run.soft_failures == ["install", "database"]
        assert runner.commands[-1] == "bundle exec rake db:setup"

    def test_deploy_runs_every_step(self, tmp_path):
        target = tmp_path / "demo"
        runner = FakeRunner(failures={"heroku create": 1})

        run = _provisioner(target, runner, deploy_target="demo-staging").run()

        assert runner.commands[3:] == [
            'git init && git add . && git commit -q -m "Initial commit"',
            "heroku create demo-staging --remote heroku",
            "git push heroku master",
            "heroku run rake db:setup",
            "heroku restart",
        ]
        assert all(spec.working_directory == target for spec in runner.specs[3:])
        assert run.soft_failures == ["remote"]

    def test_deploy_cli_path_does_not_name_the_remote(self, tmp_path):
        runner = FakeRunner()
        config = AppforgeConfig(deploy_cli="/usr/local/bin/heroku")

        Provisioner(
            Options(target=tmp_path / "demo", deploy_target="demo-staging"),
            runner=runner,
            config=config,
        ).run()

        assert "/usr/local/bin/heroku create demo-staging --remote heroku" in runner.commands
        assert "git push heroku master" in runner.commands
        assert "/usr/local/bin/heroku restart" in runner.commands


class TestDryRun:
    """Dry runs log instead of touching anything."""

    def test_dry_run_touches_nothing(self, tmp_path):
        target = tmp_path / "demo"
        run = Provisioner(Options(target=target, dry_run=True), config=AppforgeConfig()).run()

        assert not target.exists()
        assert [step for step, _, _ in run.executions] == ["generate", "install", "database"]
        assert all(result.ok for _, _, result in run.executions)
