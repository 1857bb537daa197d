"""End-to-end tests for package generation."""

import json
import logging
from pathlib import Path

import pytest

from packsmith.artifacts import ArtifactSpec
from packsmith.errors import (
    FilesystemError,
    TemplateDecodeError,
    TemplateNotFoundError,
    ValidationError,
)
from packsmith.generator import (
    failure_state,
    generate_package,
    package_root,
    render_artifact,
)
from packsmith.materializer import RunState, always_overwrite, never_overwrite
from packsmith.package import resolve_descriptor
from packsmith.package.descriptor import PackageDescriptor
from packsmith.stubs import StubProvider, StubStore, get_package_stubs_path


def make_descriptor(**features: bool) -> PackageDescriptor:
    return resolve_descriptor(
        "blog-module",
        vendor="acme",
        author="Jane Doe",
        email="jane@acme.test",
        features=features,
        year=2024,
    )


def files_in(root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


class TestGeneratePackage:
    """Tests for generate_package."""

    def test_base_package(self, tmp_path: Path) -> None:
        """Test a package with no toggles gets the base files and directories."""
        result = generate_package(make_descriptor(), tmp_path, never_overwrite)
        root = tmp_path / "blog-module"

        assert result.state == RunState.COMPLETE
        assert result.exit_code == 0
        assert result.root == root
        assert files_in(root) == {"composer.json", "README.md", "LICENSE.md", ".gitignore"}
        for directory in (
            "src",
            "config",
            "resources/lang/en",
            "resources/views",
            "routes",
            "database/migrations",
            "database/seeders",
            "database/factories",
        ):
            assert (root / directory).is_dir()

    def test_manifest(self, tmp_path: Path) -> None:
        """Test composer.json is valid JSON with the PSR-4 namespace."""
        generate_package(make_descriptor(), tmp_path, never_overwrite)
        manifest = json.loads((tmp_path / "blog-module" / "composer.json").read_text())

        assert manifest["name"] == "acme/blog-module"
        assert manifest["license"] == "MIT"
        assert manifest["authors"] == [{"name": "Jane Doe", "email": "jane@acme.test"}]
        assert manifest["autoload"]["psr-4"] == {"Acme\\BlogModule\\": "src/"}
        assert manifest["extra"]["laravel"]["providers"] == []

    def test_manifest_registers_provider(self, tmp_path: Path) -> None:
        """Test the provider is listed in the manifest when generated."""
        generate_package(make_descriptor(provider=True), tmp_path, never_overwrite)
        manifest = json.loads((tmp_path / "blog-module" / "composer.json").read_text())

        assert manifest["extra"]["laravel"]["providers"] == [
            "Acme\\BlogModule\\BlogModuleServiceProvider"
        ]

    def test_manifest_escapes_description(self, tmp_path: Path) -> None:
        """Test quotes in the description keep composer.json valid."""
        descriptor = resolve_descriptor(
            "blog-module", vendor="acme", description='The "best" blog'
        )
        generate_package(descriptor, tmp_path, never_overwrite)
        manifest = json.loads((tmp_path / "blog-module" / "composer.json").read_text())
        assert manifest["description"] == 'The "best" blog'

    def test_model_package(self, tmp_path: Path) -> None:
        """Test the model toggle writes the model and its migration."""
        generate_package(make_descriptor(model=True), tmp_path, never_overwrite)
        root = tmp_path / "blog-module"

        model = (root / "src" / "Models" / "BlogModule.php").read_text()
        migration = (
            root / "database" / "migrations" / "create_blog_modules_table.php"
        ).read_text()

        assert "namespace Acme\\BlogModule\\Models;" in model
        assert "class BlogModule" in model
        assert "blog_modules" in migration
        assert "{{" not in model

    def test_all_features_render_cleanly(self, tmp_path: Path) -> None:
        """Test every shipped stub renders without leftover placeholders."""
        descriptor = resolve_descriptor("blog-module", vendor="acme", all_features=True)
        result = generate_package(descriptor, tmp_path, never_overwrite)
        root = tmp_path / "blog-module"

        assert result.state == RunState.COMPLETE
        for relative in files_in(root):
            if relative.endswith(".blade.php"):
                continue
            assert "{{" not in (root / relative).read_text(), relative

    def test_license_and_readme(self, tmp_path: Path) -> None:
        """Test metadata lands in the license and README."""
        generate_package(make_descriptor(), tmp_path, never_overwrite)
        root = tmp_path / "blog-module"

        license_text = (root / "LICENSE.md").read_text()
        assert "2024" in license_text
        assert "Jane Doe" in license_text
        assert (root / "README.md").read_text().startswith("# Blog Module")

    def test_mit_license_text(self, tmp_path: Path) -> None:
        """Test the default license writes the full MIT text."""
        generate_package(make_descriptor(), tmp_path, never_overwrite)
        license_text = (tmp_path / "blog-module" / "LICENSE.md").read_text()
        assert license_text.startswith("# The MIT License (MIT)")

    def test_license_file_matches_manifest(self, tmp_path: Path) -> None:
        """Test a non-MIT license is named in LICENSE.md and never claims MIT."""
        descriptor = resolve_descriptor(
            "blog-module",
            vendor="acme",
            author="Jane Doe",
            license="Apache-2.0",
            year=2024,
        )
        generate_package(descriptor, tmp_path, never_overwrite)
        root = tmp_path / "blog-module"

        manifest = json.loads((root / "composer.json").read_text())
        license_text = (root / "LICENSE.md").read_text()
        assert manifest["license"] == "Apache-2.0"
        assert "Apache-2.0" in license_text
        assert "MIT" not in license_text
        assert "Jane Doe" in license_text
        assert "{{" not in license_text

    def test_package_type_directories(self, tmp_path: Path) -> None:
        """Test a theme package gets its asset directories on disk."""
        descriptor = resolve_descriptor("blog-module", vendor="acme", package_type="theme")
        generate_package(descriptor, tmp_path, never_overwrite)
        root = tmp_path / "blog-module"

        for directory in ("js", "css", "images"):
            assert (root / "resources" / "assets" / directory).is_dir()

    def test_decline_keeps_existing_tree(self, tmp_path: Path) -> None:
        """Test declining the overwrite leaves the directory as it was."""
        root = tmp_path / "blog-module"
        root.mkdir()
        (root / "marker.txt").write_text("keep")

        result = generate_package(make_descriptor(), tmp_path, never_overwrite)

        assert result.state == RunState.DECLINED
        assert result.exit_code == 0
        assert files_in(root) == {"marker.txt"}

    def test_overwrite_replaces_existing_tree(self, tmp_path: Path) -> None:
        """Test accepting the overwrite yields exactly the new artifacts."""
        root = tmp_path / "blog-module"
        root.mkdir()
        (root / "marker.txt").write_text("old")

        result = generate_package(make_descriptor(), tmp_path, always_overwrite)

        assert result.state == RunState.COMPLETE
        assert result.replaced is True
        assert not (root / "marker.txt").exists()
        assert files_in(root) == {"composer.json", "README.md", "LICENSE.md", ".gitignore"}

    def test_missing_stub_leaves_no_tree(self, tmp_path: Path) -> None:
        """Test a missing stub aborts before anything is written."""
        stubs = tmp_path / "stubs"
        stubs.mkdir()
        (stubs / "manifest.stub").write_text("{}")
        store = StubStore([StubProvider("only", stubs)])
        out = tmp_path / "out"

        with pytest.raises(TemplateNotFoundError, match="readme"):
            generate_package(make_descriptor(), out, never_overwrite, store=store)

        assert not out.exists()

    def test_non_utf8_stub_leaves_no_tree(self, tmp_path: Path) -> None:
        """Test an unreadable override stub fails before anything is written."""
        overrides = tmp_path / "overrides"
        overrides.mkdir()
        (overrides / "readme.stub").write_bytes(b"# caf\xe9 {{title}}")
        store = StubStore(
            [
                StubProvider("override", overrides),
                StubProvider("builtin", get_package_stubs_path()),
            ]
        )
        out = tmp_path / "out"

        with pytest.raises(TemplateDecodeError, match="readme.stub"):
            generate_package(make_descriptor(), out, never_overwrite, store=store)

        assert not out.exists()

    def test_override_stub_used(self, tmp_path: Path) -> None:
        """Test an override provider shadows the shipped stub."""
        overrides = tmp_path / "overrides"
        overrides.mkdir()
        (overrides / "readme.stub").write_text("Custom {{title}} by {{author}}")
        store = StubStore(
            [
                StubProvider("override", overrides),
                StubProvider("builtin", get_package_stubs_path()),
            ]
        )
        out = tmp_path / "out"

        generate_package(make_descriptor(), out, never_overwrite, store=store)

        readme = (out / "blog-module" / "README.md").read_text()
        assert readme == "Custom Blog Module by Jane Doe"

    def test_package_root(self, tmp_path: Path) -> None:
        """Test the package directory is named after the package."""
        assert package_root(make_descriptor(), tmp_path) == tmp_path / "blog-module"


class TestFailureState:
    """Tests for failure_state."""

    def test_validation_aborts(self) -> None:
        """Test invalid input maps to ABORTED."""
        assert failure_state(ValidationError(["bad name"])) == RunState.ABORTED

    def test_other_errors_fail(self, tmp_path: Path) -> None:
        """Test stub and write errors map to FAILED."""
        assert failure_state(TemplateNotFoundError("readme", [])) == RunState.FAILED
        assert failure_state(FilesystemError(tmp_path, "denied")) == RunState.FAILED
        decode = TemplateDecodeError(tmp_path / "readme.stub", "not valid UTF-8")
        assert failure_state(decode) == RunState.FAILED


class TestRenderArtifact:
    """Tests for render_artifact."""

    def test_unresolved_placeholder_logged(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test unknown tokens are kept and reported as warnings."""
        (tmp_path / "custom.stub").write_text("Hello {{name}} {{unknownKey}}")
        store = StubStore([StubProvider("test", tmp_path)])
        artifact = ArtifactSpec("NOTES.md", "custom", {"name": "blog"})

        with caplog.at_level(logging.WARNING, logger="packsmith"):
            rendered = render_artifact(artifact, store)

        assert rendered.content == "Hello blog {{unknownKey}}"
        assert "unknownKey" in caplog.text

    def test_directory_needs_no_stub(self) -> None:
        """Test directory artifacts skip stub resolution."""
        store = StubStore([])
        rendered = render_artifact(ArtifactSpec("src", None), store)
        assert rendered.is_directory
