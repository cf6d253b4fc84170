"""Shared test fixtures for Appforge tests."""
from pathlib import Path

import pytest

from appforge.core.config import AppforgeConfig, set_config
from appforge.core.template_loader import TemplateLoader
from appforge.models.run import CommandResult
from appforge.services.command_runner import CommandRunner

TEMPLATES_DIR = Path(__file__).parent.parent / "appforge" / "templates"

# What `rails new` leaves behind, trimmed to the files the pipeline touches
RAILS_SKELETON = {
    "Gemfile": "source 'https://rubygems.org'\n\ngem 'rails', '3.2.22'\ngem 'sqlite3'\n",
    "README.rdoc": "== Welcome to Rails\n",
    ".gitignore": "/.bundle\n/db/*.sqlite3\n/log/*.log\n/tmp\n",
    "config.ru": "require ::File.expand_path('../config/environment',  __FILE__)\nrun {ns}::Application\n",
    "Rakefile": "require File.expand_path('../config/application', __FILE__)\n\n{ns}::Application.load_tasks\n",
    "config/application.rb": (
        "require File.expand_path('../boot', __FILE__)\n\n"
        "require 'rails/all'\n\n"
        "module {ns}\n"
        "  class Application < Rails::Application\n"
        "    config.encoding = \"utf-8\"\n"
        "  end\n"
        "end\n"
    ),
    "config/environment.rb": (
        "require File.expand_path('../application', __FILE__)\n\n"
        "{ns}::Application.initialize!\n"
    ),
    "config/environments/development.rb": "{ns}::Application.configure do\n  config.cache_classes = false\nend\n",
    "config/environments/production.rb": "{ns}::Application.configure do\n  config.cache_classes = true\nend\n",
    "config/environments/test.rb": "{ns}::Application.configure do\n  config.cache_classes = true\nend\n",
    "config/initializers/secret_token.rb": "{ns}::Application.config.secret_token = 'abc123'\n",
    "config/initializers/session_store.rb": "{ns}::Application.config.session_store :cookie_store, key: '_app_session'\n",
    "config/routes.rb": "{ns}::Application.routes.draw do\nend\n",
    "app/controllers/application_controller.rb": "class ApplicationController < ActionController::Base\nend\n",
    "app/models/user.rb": "class User < ActiveRecord::Base\nend\n",
    "app/views/layouts/application.html.erb": "<html><%= yield %></html>\n",
    "public/index.html": "<h1>Welcome aboard</h1>\n",
}


def make_rails_app(root: Path, namespace: str) -> Path:
    """Write a minimal generated Rails tree under root."""
    for relative, content in RAILS_SKELETON.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content.replace("{ns}", namespace))
    return root


class FakeRunner(CommandRunner):
    """Records commands instead of running them.

    The generator command builds a Rails skeleton in the target. Any command
    containing a key of ``failures`` returns that exit status.
    """

    def __init__(self, namespace: str = "Demo", failures=None):
        super().__init__(mock=False)
        self.namespace = namespace
        self.failures = failures or {}
        self.specs = []

    def run(self, spec):
        self.specs.append(spec)
        for needle, code in self.failures.items():
            if needle in spec.command_line:
                return CommandResult(returncode=code, output="boom")
        if spec.command_line.startswith("rails new"):
            target = Path(spec.command_line.split('"')[1])
            make_rails_app(target, self.namespace)
        return CommandResult(returncode=0, output="")

    @property
    def commands(self):
        return [spec.command_line for spec in self.specs]


@pytest.fixture(autouse=True)
def default_config():
    """Reset the global config so environment overrides don't leak."""
    set_config(AppforgeConfig())
    yield
    set_config(None)


@pytest.fixture
def layout():
    return TemplateLoader(TEMPLATES_DIR).load_layout()


@pytest.fixture
def rails_app(tmp_path):
    """A generated Rails app named demo."""
    return make_rails_app(tmp_path / "demo", "Demo")


@pytest.fixture
def templates_dir():
    return TEMPLATES_DIR
